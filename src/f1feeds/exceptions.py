"""Custom exceptions for the f1feeds jobs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from f1feeds.resolver import Attempt


class F1FeedsError(Exception):
    """Base exception for all f1feeds errors."""


class SourceError(F1FeedsError):
    """An upstream source could not deliver usable data for one request."""


class SourceConnectionError(SourceError):
    """Raised when the client cannot connect to the upstream host."""


class SourceTimeoutError(SourceError):
    """Raised when a request to the upstream host times out."""


class SourceAPIError(SourceError):
    """Raised when the upstream returns an error response (4xx/5xx)."""

    def __init__(self, status_code: int, message: str, url: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.url = url
        super().__init__(f"HTTP {status_code} from {url or 'upstream'}: {message[:200]}")


class RateLimitedError(SourceAPIError):
    """Raised when HTTP 429 responses outlast the retry budget."""


class SourceDecodeError(SourceError):
    """Raised when a response body is not valid JSON."""


class SourceValidationError(SourceError):
    """Raised when response data fails model validation or has the wrong shape."""


class EmptyResultError(SourceError):
    """Raised when a well-formed response carries no rows."""


class ResolverExhaustedError(F1FeedsError):
    """Raised when every resolver candidate failed."""

    def __init__(self, attempts: list[Attempt]) -> None:
        self.attempts = attempts
        summary = "; ".join(f"{a.label}: {a.error}" for a in attempts)
        super().__init__(f"All {len(attempts)} candidates failed ({summary})")


class CalendarError(F1FeedsError):
    """Raised when the ICS calendar cannot be fetched or parsed."""


class AssetError(F1FeedsError):
    """Raised when an image asset cannot be downloaded or converted."""
