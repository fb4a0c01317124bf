"""Race-weekend windows and the result gates derived from them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Sequence

from f1feeds.calendar import CalendarSession, SessionType

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_HOLD = timedelta(hours=12)
# Sessions of one event never start more than this long before its race.
_MAX_EVENT_SPAN = timedelta(days=5)


class WeekendState(StrEnum):
    PRE_WEEKEND = "PRE_WEEKEND"
    IN_WEEKEND_GATED = "IN_WEEKEND_GATED"
    WEEKEND_COMPLETE = "WEEKEND_COMPLETE"


@dataclass(frozen=True)
class WeekendWindow:
    gp_name: str
    start: datetime
    end: datetime
    race_start: datetime
    race_end: datetime
    qualifying_end: datetime | None = None
    location: str | None = None
    sessions: tuple[CalendarSession, ...] = field(default_factory=tuple)

    def session(self, session_type: SessionType) -> CalendarSession | None:
        for s in self.sessions:
            if s.session_type is session_type:
                return s
        return None


def window_for_race(race: CalendarSession, sessions: Sequence[CalendarSession]) -> WeekendWindow:
    grouped = sorted(
        (
            s for s in sessions
            if s.gp_name == race.gp_name and race.start - _MAX_EVENT_SPAN <= s.start <= race.end
        ),
        key=lambda s: s.start,
    )
    if race not in grouped:
        grouped.append(race)
    qualifying = next((s for s in grouped if s.session_type is SessionType.QUALIFYING), None)
    return WeekendWindow(
        gp_name=race.gp_name,
        start=min(s.start for s in grouped),
        end=max(s.end for s in grouped),
        race_start=race.start,
        race_end=race.end,
        qualifying_end=qualifying.end if qualifying else None,
        location=race.location,
        sessions=tuple(grouped),
    )


def find_weekend(
    sessions: Sequence[CalendarSession],
    now: datetime,
    completion_hold: timedelta = DEFAULT_COMPLETION_HOLD,
) -> WeekendWindow | None:
    """Earliest race weekend whose end plus *completion_hold* is not yet in the past."""
    races = sorted((s for s in sessions if s.session_type is SessionType.RACE), key=lambda s: s.start)
    for race in races:
        window = window_for_race(race, sessions)
        if window.end + completion_hold >= now:
            return window
    return None


@dataclass(frozen=True)
class GateDecision:
    state: WeekendState
    window: WeekendWindow | None = None
    qualifying_open: bool = False
    race_open: bool = False


def evaluate_gate(window: WeekendWindow | None, now: datetime) -> GateDecision:
    """Weekend state and per-category gates; depends on nothing but *now*."""
    if window is None:
        return GateDecision(WeekendState.PRE_WEEKEND)
    if now < window.start:
        state = WeekendState.PRE_WEEKEND
    elif now <= window.end:
        state = WeekendState.IN_WEEKEND_GATED
    else:
        state = WeekendState.WEEKEND_COMPLETE
    return GateDecision(
        state=state,
        window=window,
        qualifying_open=state is WeekendState.WEEKEND_COMPLETE or (
            window.qualifying_end is not None and now > window.qualifying_end
        ),
        race_open=now > window.race_end,
    )


class WeekendWindowGate:
    """Calendar sessions in, :class:`GateDecision` out."""

    def __init__(self, completion_hold: timedelta = DEFAULT_COMPLETION_HOLD) -> None:
        self.completion_hold = completion_hold

    def decide(self, sessions: Sequence[CalendarSession] | None, now: datetime) -> GateDecision:
        if not sessions:
            logger.warning("No calendar sessions available; treating as pre-weekend")
            return GateDecision(WeekendState.PRE_WEEKEND)
        window = find_weekend(sessions, now, self.completion_hold)
        if window is None:
            logger.warning("No upcoming race weekend in calendar; treating as pre-weekend")
        return evaluate_gate(window, now)
