"""Race calendar (ICS) parsing into typed sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import StrEnum

from icalendar import Calendar

from f1feeds._http import SyncTransport
from f1feeds.exceptions import CalendarError, SourceError

logger = logging.getLogger(__name__)

DEFAULT_ICS_URL = "https://better-f1-calendar.vercel.app/api/calendar.ics"


class SessionType(StrEnum):
    FP1 = "FP1"
    FP2 = "FP2"
    FP3 = "FP3"
    SPRINT_QUALIFYING = "Sprint Qualifying"
    SPRINT = "Sprint"
    QUALIFYING = "Qualifying"
    RACE = "Race"


# First matching fragment wins, so the more specific spellings come first.
SESSION_FRAGMENTS: tuple[tuple[str, SessionType], ...] = (
    ("practice 1", SessionType.FP1),
    ("fp1", SessionType.FP1),
    ("practice 2", SessionType.FP2),
    ("fp2", SessionType.FP2),
    ("practice 3", SessionType.FP3),
    ("fp3", SessionType.FP3),
    ("sprint qualifying", SessionType.SPRINT_QUALIFYING),
    ("sprint shootout", SessionType.SPRINT_QUALIFYING),
    ("sprint", SessionType.SPRINT),
    ("qualifying", SessionType.QUALIFYING),
    ("quali", SessionType.QUALIFYING),
    ("race", SessionType.RACE),
)

# Display order used by the next-race feed.
SESSION_ORDER: tuple[SessionType, ...] = (
    SessionType.FP1,
    SessionType.FP2,
    SessionType.FP3,
    SessionType.SPRINT_QUALIFYING,
    SessionType.SPRINT,
    SessionType.QUALIFYING,
    SessionType.RACE,
)


def gp_name(summary: str) -> str:
    """Event name: the part of the summary before the first ' - '."""
    return summary.split(" - ")[0].strip() or summary.strip()


def classify_session(summary: str | None) -> SessionType | None:
    """Map an event summary such as 'Bahrain Grand Prix - Practice 1' to its type."""
    if not summary:
        return None
    head, sep, tail = summary.partition(" - ")
    text = (tail if sep else head).casefold()
    for fragment, session_type in SESSION_FRAGMENTS:
        if fragment in text:
            return session_type
    return None


@dataclass(frozen=True)
class CalendarSession:
    summary: str
    gp_name: str
    session_type: SessionType
    start: datetime
    end: datetime
    location: str | None = None


def _as_utc(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def parse_ics(text: str) -> list[CalendarSession]:
    """Parse an ICS document into recognised sessions sorted by start time.

    Events whose summary is not a known session type are skipped.
    """
    try:
        calendar = Calendar.from_ical(text)
    except ValueError as exc:
        raise CalendarError(f"Unparseable calendar: {exc}") from exc

    sessions: list[CalendarSession] = []
    for event in calendar.walk("VEVENT"):
        summary = str(event.get("summary", "")).strip()
        session_type = classify_session(summary)
        if session_type is None or event.get("dtstart") is None:
            continue
        start = _as_utc(event.decoded("dtstart"))
        if event.get("dtend") is not None:
            end = _as_utc(event.decoded("dtend"))
        elif event.get("duration") is not None:
            end = start + event.decoded("duration")
        else:
            end = start + timedelta(hours=1)
        location = event.get("location")
        sessions.append(
            CalendarSession(
                summary=summary,
                gp_name=gp_name(summary),
                session_type=session_type,
                start=start,
                end=end,
                location=str(location) if location else None,
            )
        )
    sessions.sort(key=lambda s: s.start)
    return sessions


def fetch_calendar(transport: SyncTransport, url: str = DEFAULT_ICS_URL) -> list[CalendarSession]:
    """Download and parse the calendar; any failure surfaces as :class:`CalendarError`."""
    try:
        text = transport.get_text(url)
    except SourceError as exc:
        raise CalendarError(f"Calendar download failed: {exc}") from exc
    sessions = parse_ics(text)
    logger.info("Calendar %s: %d sessions", url, len(sessions))
    return sessions
