"""Next race feed (``f1_next_race.json``): session times in UTC and local time."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Sequence
from zoneinfo import ZoneInfo

from f1feeds.calendar import SESSION_ORDER, CalendarSession, SessionType, fetch_calendar
from f1feeds.exceptions import CalendarError
from f1feeds.jobs.common import FeedContext, iso_utc
from f1feeds.store import write_snapshot
from f1feeds.weekend import WeekendWindow, window_for_race

logger = logging.getLogger(__name__)

OUTPUT_FILE = "f1_next_race.json"


def days_until(moment: datetime, now: datetime) -> int:
    """Whole days until *moment*, rounded up; negative once it has passed."""
    return math.ceil((moment - now).total_seconds() / 86400)


def local_date_short(moment: datetime, tz: ZoneInfo) -> str:
    """'Sun, Mar 08' in the display timezone."""
    return moment.astimezone(tz).strftime("%a, %b %d")


def local_time_short(moment: datetime, tz: ZoneInfo) -> str:
    return moment.astimezone(tz).strftime("%H:%M")


def session_rows(sessions: Sequence[CalendarSession], tz: ZoneInfo) -> list[dict[str, Any]]:
    rows = []
    for session_type in SESSION_ORDER:
        session = next((s for s in sessions if s.session_type is session_type), None)
        if session is None:
            continue
        rows.append({
            "type": str(session_type),
            "startUtc": iso_utc(session.start),
            "endUtc": iso_utc(session.end),
            "startLocalDateShort": local_date_short(session.start, tz),
            "startLocalTimeShort": local_time_short(session.start, tz),
            "startLocalDateTimeShort": (
                f"{local_date_short(session.start, tz)} {local_time_short(session.start, tz)}"
            ),
        })
    return rows


def next_weekend(sessions: Sequence[CalendarSession], now: datetime) -> WeekendWindow:
    races = sorted(
        (s for s in sessions if s.session_type is SessionType.RACE and s.start > now),
        key=lambda s: s.start,
    )
    if not races:
        raise CalendarError("No upcoming race session in calendar")
    return window_for_race(races[0], sessions)


def build_next_race_document(
    sessions: Sequence[CalendarSession], now: datetime, display_tz: str, ics_url: str,
) -> dict[str, Any]:
    """Describe the next race weekend whose race has not started yet.

    Raises CalendarError when the calendar holds no upcoming race; there is
    no earlier snapshot worth overwriting with a placeholder in that case.
    """
    tz = ZoneInfo(display_tz)
    window = next_weekend(sessions, now)
    return {
        "header": "Next F1 event",
        "generatedAtUtc": iso_utc(now),
        "displayTimeZone": display_tz,
        "source": {"kind": "ics", "url": ics_url},
        "nextEvent": {
            "type": "RACE_WEEKEND",
            "name": window.gp_name,
            "startUtc": iso_utc(window.start),
            "startLocalDateShort": local_date_short(window.start, tz),
            "startLocalTimeShort": local_time_short(window.start, tz),
            "startsInDays": days_until(window.start, now),
        },
        "grandPrix": {
            "name": window.gp_name,
            "location": window.location,
            "season": str(window.race_start.year),
        },
        "countdowns": {
            "weekendStartsInDays": days_until(window.start, now),
            "raceStartsInDays": days_until(window.race_start, now),
        },
        "weekend": {
            "startUtc": iso_utc(window.start),
            "endUtc": iso_utc(window.end),
            "startLocalDateShort": local_date_short(window.start, tz),
            "startLocalTimeShort": local_time_short(window.start, tz),
        },
        "race": {
            "startUtc": iso_utc(window.race_start),
            "endUtc": iso_utc(window.race_end),
            "startLocalDateShort": local_date_short(window.race_start, tz),
            "startLocalTimeShort": local_time_short(window.race_start, tz),
        },
        "sessions": session_rows(window.sessions, tz),
    }


def run(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    sessions = fetch_calendar(ctx.transport, ctx.settings.ics_url)
    doc = build_next_race_document(sessions, now, ctx.settings.display_tz, ctx.settings.ics_url)
    write_snapshot(ctx.settings.output_path(OUTPUT_FILE), doc)
    logger.info("Next race written: %s", doc["grandPrix"]["name"])
    return doc
