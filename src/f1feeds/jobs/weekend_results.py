"""Weekend results feed (``f1_results_smart.json``).

Before a race weekend starts the feed shows the previous completed race in
full. Once it starts the feed switches to the current event and keeps the
qualifying and race categories at ``NOT_YET_AVAILABLE`` until the calendar
says the respective session has ended.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Sequence

from f1feeds.calendar import CalendarSession, fetch_calendar
from f1feeds.clients.ergast import QUALIFYING_PATHS, RESULTS_PATHS, SCHEDULE_PATHS
from f1feeds.exceptions import CalendarError, ResolverExhaustedError, SourceError
from f1feeds.formatters import NOT_YET_AVAILABLE, UNKNOWN, format_number, format_position, or_unknown
from f1feeds.jobs.common import FeedContext, iso_utc, race_block, resolve_last_race
from f1feeds.matcher import EntityMatcher
from f1feeds.models.openf1 import Driver
from f1feeds.models.ergast import ErgastConstructor, ErgastDriver, QualifyingResult, Race, RaceResult
from f1feeds.resolver import MultiSourceResolver
from f1feeds.store import write_snapshot
from f1feeds.types import Identity, identity_of_openf1
from f1feeds.weekend import GateDecision, WeekendState, WeekendWindow, WeekendWindowGate

logger = logging.getLogger(__name__)

OUTPUT_FILE = "f1_results_smart.json"

type HeadshotLookup = Callable[[str | None], EntityMatcher[Driver]]


# ── Upstream lookups ───────────────────────────────────────────


def load_sessions(ctx: FeedContext) -> list[CalendarSession] | None:
    try:
        return fetch_calendar(ctx.transport, ctx.settings.ics_url)
    except CalendarError as exc:
        logger.warning("Calendar unavailable, falling back to previous race: %s", exc)
        return None


def season_schedule(ctx: FeedContext) -> tuple[list[Race], str | None]:
    try:
        resolution = MultiSourceResolver("season schedule").resolve(
            ctx.ergast.race_candidates(SCHEDULE_PATHS, season="current")
        )
    except ResolverExhaustedError as exc:
        logger.warning("Season schedule unavailable: %s", exc)
        return [], None
    return resolution.payload, resolution.label


def match_race_by_date(races: Sequence[Race], race_start: datetime) -> Race | None:
    """Schedule entry whose date equals the calendar race day (UTC)."""
    target = race_start.date().isoformat()
    return next((r for r in races if r.date == target), None)


def fetch_qualifying(ctx: FeedContext, season: str, round_: int | str) -> list[QualifyingResult]:
    candidates = [
        c.map(lambda races: races[0].qualifying_results if races else [])
        for c in ctx.ergast.race_candidates(QUALIFYING_PATHS, season=season, round=round_)
    ]
    return MultiSourceResolver(f"qualifying {season}/{round_}").resolve(candidates).payload


def fetch_results(ctx: FeedContext, season: str, round_: int | str) -> list[RaceResult]:
    candidates = [
        c.map(lambda races: races[0].results if races else [])
        for c in ctx.ergast.race_candidates(RESULTS_PATHS, season=season, round=round_)
    ]
    return MultiSourceResolver(f"results {season}/{round_}").resolve(candidates).payload


def headshot_matcher(ctx: FeedContext, season: str | None) -> EntityMatcher[Driver]:
    """OpenF1 drivers of the season's latest race session, best effort."""
    if not season or not season.isdigit():
        return EntityMatcher([], identity_of_openf1)
    try:
        sessions = ctx.openf1.sessions(year=int(season), session_name="Race")
        dated = [s for s in sessions if s.session_key is not None and s.date_start is not None]
        if not dated:
            return EntityMatcher([], identity_of_openf1)
        latest = max(dated, key=lambda s: s.date_start)
        drivers = ctx.openf1.drivers(session_key=latest.session_key)
    except SourceError as exc:
        logger.warning("OpenF1 headshots unavailable: %s", exc)
        return EntityMatcher([], identity_of_openf1)
    return EntityMatcher(drivers, identity_of_openf1)


# ── Row mapping ────────────────────────────────────────────────


def driver_ref(
    driver: ErgastDriver, constructor: ErgastConstructor | None, headshots: EntityMatcher[Driver],
) -> dict[str, Any]:
    meta = headshots.match(Identity(driver.given_name, driver.family_name, driver.code))
    return {
        "driverId": driver.driver_id,
        "code": driver.code,
        "permanentNumber": driver.permanent_number,
        "givenName": driver.given_name,
        "familyName": driver.family_name,
        "headshotUrl": or_unknown(meta.headshot_url if meta else None),
        "constructor": constructor.name if constructor else None,
    }


def map_results(results: Sequence[RaceResult], headshots: EntityMatcher[Driver]) -> list[dict[str, Any]]:
    return [
        {
            "position": format_position(r.position),
            "points": format_number(r.points),
            "status": r.status,
            "time": r.time.time if r.time else None,
            "driver": driver_ref(r.driver, r.constructor, headshots),
        }
        for r in results
    ]


def map_podium(results: Sequence[RaceResult], headshots: EntityMatcher[Driver]) -> list[dict[str, Any]]:
    podium = sorted((r for r in results if r.position in (1, 2, 3)), key=lambda r: r.position)
    return map_results(podium, headshots)


def map_qualifying(
    qualifying: Sequence[QualifyingResult], headshots: EntityMatcher[Driver],
) -> list[dict[str, Any]]:
    return [
        {
            "position": format_position(q.position),
            "q1": q.q1,
            "q2": q.q2,
            "q3": q.q3,
            "driver": driver_ref(q.driver, q.constructor, headshots),
        }
        for q in qualifying
    ]


# ── Document ───────────────────────────────────────────────────


def window_meta(
    window: WeekendWindow | None, matched: Race | None, schedule_season: str | None,
) -> dict[str, Any] | None:
    if window is None:
        return None
    return {
        "gpName": window.gp_name,
        "weekendStartUtc": iso_utc(window.start),
        "weekendEndUtc": iso_utc(window.end),
        "raceStartUtc": iso_utc(window.race_start),
        "raceEndUtc": iso_utc(window.race_end),
        "qualifyingEndUtc": iso_utc(window.qualifying_end),
        "matchedErgast": {
            "season": matched.season if matched else schedule_season,
            "round": str(matched.round) if matched and matched.round is not None else None,
            "raceName": matched.race_name if matched else window.gp_name,
            "matchedByRaceDateUtc": window.race_start.date().isoformat(),
        },
    }


def previous_race_sections(ctx: FeedContext, headshots_for: HeadshotLookup) -> dict[str, Any]:
    """Full results of the last completed race, used before a weekend starts."""
    last, sources = resolve_last_race(ctx)
    if last is None:
        return {
            "live": False,
            "sources": sources,
            "weekend": {"type": "PREVIOUS_COMPLETED_RACE", **race_block(None)},
            "qualifying": UNKNOWN,
            "podium": UNKNOWN,
            "raceResultsTimes": UNKNOWN,
        }

    headshots = headshots_for(last.season)
    qualifying: Any = UNKNOWN
    live = True
    if last.season and last.round is not None:
        try:
            qualifying = map_qualifying(fetch_qualifying(ctx, last.season, last.round), headshots)
        except ResolverExhaustedError as exc:
            logger.warning("Qualifying of previous race unavailable: %s", exc)
            live = False
    return {
        "live": live,
        "sources": sources,
        "weekend": {"type": "PREVIOUS_COMPLETED_RACE", **race_block(last)},
        "qualifying": qualifying,
        "podium": map_podium(last.results, headshots),
        "raceResultsTimes": map_results(last.results, headshots),
    }


def current_weekend_sections(
    ctx: FeedContext,
    decision: GateDecision,
    window: WeekendWindow,
    matched: Race | None,
    season: str | None,
    headshots_for: HeadshotLookup,
) -> dict[str, Any]:
    headshots = headshots_for(season)
    round_ = matched.round if matched else None
    live = True

    qualifying: Any = NOT_YET_AVAILABLE
    if decision.qualifying_open:
        qualifying = UNKNOWN
        if season and round_ is not None:
            try:
                qualifying = map_qualifying(fetch_qualifying(ctx, season, round_), headshots)
            except ResolverExhaustedError as exc:
                logger.warning("Qualifying unavailable although the session has ended: %s", exc)
        if qualifying == UNKNOWN:
            live = False

    podium: Any = NOT_YET_AVAILABLE
    results: Any = NOT_YET_AVAILABLE
    if decision.race_open:
        podium = results = UNKNOWN
        if season and round_ is not None:
            try:
                race_results = fetch_results(ctx, season, round_)
                podium = map_podium(race_results, headshots)
                results = map_results(race_results, headshots)
            except ResolverExhaustedError as exc:
                logger.warning("Race results unavailable although the race has ended: %s", exc)
        if results == UNKNOWN:
            live = False

    return {
        "live": live,
        "weekend": {
            "type": "CURRENT_WEEKEND",
            "season": season,
            "round": str(round_) if round_ is not None else None,
            "raceName": (matched.race_name if matched else None) or window.gp_name,
            "weekendStartUtc": iso_utc(window.start),
            "weekendEndUtc": iso_utc(window.end),
            "raceStartUtc": iso_utc(window.race_start),
            "raceEndUtc": iso_utc(window.race_end),
            "qualifyingEndUtc": iso_utc(window.qualifying_end),
            "sessionEnds": {
                "qualifyingEnded": decision.qualifying_open if window.qualifying_end else None,
                "raceEnded": decision.race_open,
            },
            "locationRaw": window.location,
        },
        "qualifying": qualifying,
        "podium": podium,
        "raceResultsTimes": results,
    }


def build_weekend_results_document(
    ctx: FeedContext, now: datetime, sessions: Sequence[CalendarSession] | None,
) -> dict[str, Any]:
    decision = WeekendWindowGate(ctx.settings.completion_hold).decide(sessions, now)
    window = decision.window

    schedule, schedule_url = season_schedule(ctx) if window else ([], None)
    matched = match_race_by_date(schedule, window.race_start) if window else None
    schedule_season = schedule[0].season if schedule else None
    season = (matched.season if matched else None) or schedule_season

    cache: dict[str | None, EntityMatcher[Driver]] = {}

    def headshots_for(year: str | None) -> EntityMatcher[Driver]:
        if year not in cache:
            cache[year] = headshot_matcher(ctx, year)
        return cache[year]

    if decision.state is WeekendState.PRE_WEEKEND or window is None:
        sections = previous_race_sections(ctx, headshots_for)
    else:
        sections = current_weekend_sections(ctx, decision, window, matched, season, headshots_for)
    live = sections.pop("live")
    last_race_sources = sections.pop("sources", None)

    return {
        "header": "F1 results (smart mode)",
        "generatedAtUtc": iso_utc(now),
        "mode": "live" if live else "placeholder",
        "state": str(decision.state),
        "source": {
            "ics": ctx.settings.ics_url,
            "calendarAvailable": bool(sessions),
            "schedule": schedule_url,
            "lastRace": last_race_sources,
            "ergastBases": [client.base_url for client in ctx.ergast.clients],
            "openf1": ctx.openf1.base_url,
        },
        "nextWeekendMeta": window_meta(window, matched, schedule_season),
        **sections,
    }


def run(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    doc = build_weekend_results_document(ctx, now, load_sessions(ctx))
    write_snapshot(ctx.settings.output_path(OUTPUT_FILE), doc)
    logger.info("Weekend results written (%s, %s)", doc["state"], doc["mode"])
    return doc
