"""f1feeds — Scheduled jobs that publish F1 standings and results as static JSON."""

from f1feeds._filters import Filter
from f1feeds.config import Settings
from f1feeds.exceptions import (
    AssetError,
    CalendarError,
    EmptyResultError,
    F1FeedsError,
    RateLimitedError,
    ResolverExhaustedError,
    SourceAPIError,
    SourceConnectionError,
    SourceDecodeError,
    SourceError,
    SourceTimeoutError,
    SourceValidationError,
)
from f1feeds.matcher import EntityMatcher
from f1feeds.resolver import Candidate, MultiSourceResolver

__all__ = [
    "AssetError",
    "CalendarError",
    "Candidate",
    "EmptyResultError",
    "EntityMatcher",
    "F1FeedsError",
    "Filter",
    "MultiSourceResolver",
    "RateLimitedError",
    "ResolverExhaustedError",
    "Settings",
    "SourceAPIError",
    "SourceConnectionError",
    "SourceDecodeError",
    "SourceError",
    "SourceTimeoutError",
    "SourceValidationError",
]

__version__ = "0.1.0"
