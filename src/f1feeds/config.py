"""
Runtime configuration for the feed jobs.

Every setting has a default suitable for the scheduled CI run and can be
overridden through an ``F1FEEDS_*`` environment variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping

from f1feeds._http import DEFAULT_TIMEOUT
from f1feeds.calendar import DEFAULT_ICS_URL
from f1feeds.clients.ergast import DEFAULT_BASE_URLS
from f1feeds.clients.openf1 import OPENF1_BASE_URL

PAGES_BASE = "https://mredman48.github.io/F1-standings"
DEFAULT_TZ = "America/Edmonton"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    """Read a float, returning *default* on missing or invalid values."""
    try:
        return float(env.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_list(env: Mapping[str, str], name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Read a comma-delimited list, e.g. ``F1FEEDS_ERGAST_BASES="https://a,https://b"``."""
    raw = env.get(name)
    if not raw:
        return default
    items = tuple(x.strip().rstrip("/") for x in raw.split(",") if x.strip())
    return items or default


def _env_str(env: Mapping[str, str], name: str, default: str | None) -> str | None:
    raw = env.get(name)
    return raw.strip() if raw and raw.strip() else default


@dataclass(frozen=True)
class Settings:
    """Immutable settings for one run."""

    output_dir: Path = Path(".")
    asset_root: Path = Path(".")
    pages_base: str = PAGES_BASE
    ics_url: str = DEFAULT_ICS_URL
    openf1_base_url: str = OPENF1_BASE_URL
    ergast_base_urls: tuple[str, ...] = DEFAULT_BASE_URLS
    timeout: float = DEFAULT_TIMEOUT
    display_tz: str = DEFAULT_TZ
    # Fixed query tag appended to image URLs; reruns stay byte-identical.
    cache_bust: str | None = None
    completion_hold_hours: float = 12.0
    log_file: str | None = None
    log_level: str = "INFO"
    # Set by GitHub Actions; the race-window gate appends its outputs there.
    github_output: str | None = None

    @property
    def completion_hold(self) -> timedelta:
        return timedelta(hours=self.completion_hold_hours)

    def output_path(self, filename: str) -> Path:
        return self.output_dir / filename

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if env is None else env
        return cls(
            output_dir=Path(_env_str(env, "F1FEEDS_OUTPUT_DIR", ".") or "."),
            asset_root=Path(_env_str(env, "F1FEEDS_ASSET_ROOT", ".") or "."),
            pages_base=(_env_str(env, "F1FEEDS_PAGES_BASE", PAGES_BASE) or PAGES_BASE).rstrip("/"),
            ics_url=_env_str(env, "F1FEEDS_ICS_URL", DEFAULT_ICS_URL) or DEFAULT_ICS_URL,
            openf1_base_url=_env_str(env, "F1FEEDS_OPENF1_BASE", OPENF1_BASE_URL) or OPENF1_BASE_URL,
            ergast_base_urls=_env_list(env, "F1FEEDS_ERGAST_BASES", DEFAULT_BASE_URLS),
            timeout=_env_float(env, "F1FEEDS_TIMEOUT", DEFAULT_TIMEOUT),
            display_tz=_env_str(env, "F1FEEDS_TZ", DEFAULT_TZ) or DEFAULT_TZ,
            cache_bust=_env_str(env, "F1FEEDS_CACHE_BUST", None),
            completion_hold_hours=_env_float(env, "F1FEEDS_COMPLETION_HOLD_HOURS", 12.0),
            log_file=_env_str(env, "F1FEEDS_LOG_FILE", None),
            log_level=(_env_str(env, "F1FEEDS_LOG_LEVEL", "INFO") or "INFO").upper(),
            github_output=_env_str(env, "GITHUB_OUTPUT", None),
        )
