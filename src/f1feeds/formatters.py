"""Formatting helpers and output sentinels shared by every feed."""

from __future__ import annotations

import re
import unicodedata

# Value could not be resolved from any source.
UNKNOWN = "-"
# Category exists but its session has not finished yet.
NOT_YET_AVAILABLE = "NOT_YET_AVAILABLE"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_accents(text: str) -> str:
    """Decompose and drop combining marks: 'Pérez' -> 'Perez'."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(text: str | None) -> str:
    """Case-folded, accent-free, whitespace-collapsed name for joining."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", strip_accents(text).casefold()).strip()


def slugify(text: str | None) -> str:
    """Filename-safe slug: lower-cased, accents stripped, runs of other chars -> '-'."""
    if not text:
        return ""
    return _NON_ALNUM_RE.sub("-", strip_accents(text).lower()).strip("-")


def format_position(position: int | None) -> str:
    """Format a classification position as P<n> or the unknown sentinel."""
    if position is None or position < 1:
        return UNKNOWN
    return f"P{position}"


def format_number(value: float | int | None) -> float | int | str:
    """Whole numbers as int, fractional as float, missing as the unknown sentinel."""
    if value is None:
        return UNKNOWN
    if float(value).is_integer():
        return int(value)
    return float(value)


def or_unknown(value: object) -> object:
    """Return *value* unless it is None or blank, else the unknown sentinel."""
    if value is None or value == "":
        return UNKNOWN
    return value


def team_colour_hex(team_colour: str | None) -> str | None:
    """Normalize an OpenF1 colour ('3671C6' or '#3671C6') to '#3671C6'."""
    if not team_colour:
        return None
    return f"#{team_colour.lstrip('#')}"
