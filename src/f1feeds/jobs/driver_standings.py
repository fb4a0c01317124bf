"""Driver championship feed (``f1_driver_standings.json``)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence

from f1feeds.clients.ergast import DRIVER_STANDINGS_PATHS, FINAL_DRIVER_STANDINGS_PATHS
from f1feeds.differ import PreviousSnapshot, carry_forward, diff_position
from f1feeds.exceptions import SourceError
from f1feeds.formatters import format_number, format_position, or_unknown, team_colour_hex
from f1feeds.jobs.common import (
    FeedContext,
    iso_utc,
    openf1_label,
    previous_season,
    race_block,
    resolve_last_race,
    resolve_season_standings,
)
from f1feeds.matcher import EntityMatcher
from f1feeds.models.openf1 import Driver
from f1feeds.models.ergast import DriverStanding
from f1feeds.store import read_document, write_snapshot
from f1feeds.teams import canonical_team_name
from f1feeds.types import Identity, identity_of_openf1

logger = logging.getLogger(__name__)

OUTPUT_FILE = "f1_driver_standings.json"


def fetch_openf1_metadata(ctx: FeedContext) -> list[Driver]:
    """Latest-session driver rows for headshots and colours; empty on failure."""
    try:
        return ctx.openf1.drivers(session_key="latest")
    except SourceError as exc:
        logger.warning("OpenF1 driver metadata unavailable: %s", exc)
        return []


def driver_row(
    standing: DriverStanding,
    matcher: EntityMatcher[Driver],
    previous: PreviousSnapshot,
) -> dict[str, Any]:
    driver = standing.driver
    constructor = standing.constructors[0] if standing.constructors else None
    # Ergast's permanent number is not always the car number OpenF1 reports.
    meta = matcher.match(Identity(driver.given_name, driver.family_name, driver.code))
    delta = diff_position(
        standing.position, previous.lookup(driver.code, driver.given_name, driver.family_name),
    )
    full_name = (
        f"{driver.given_name} {driver.family_name}" if driver.given_name and driver.family_name else None
    )
    return {
        "position": format_position(standing.position),
        "positionNumber": or_unknown(standing.position),
        "points": format_number(standing.points),
        "wins": format_number(standing.wins),
        **delta.to_dict(),
        "driver": {
            "code": driver.code,
            "firstName": driver.given_name,
            "lastName": driver.family_name,
            "fullName": full_name,
            "nationality": driver.nationality,
            "driverNumber": meta.driver_number if meta else driver.permanent_number,
            "headshotUrl": or_unknown(meta.headshot_url if meta else None),
            "nameAcronym": meta.name_acronym if meta else None,
        },
        "constructor": {
            "name": canonical_team_name(constructor.name if constructor else None),
            "fullName": constructor.name if constructor else None,
            "nationality": constructor.nationality if constructor else None,
            "teamHex": team_colour_hex(meta.team_colour) if meta else None,
        },
    }


def build_driver_standings_document(
    ctx: FeedContext,
    previous: PreviousSnapshot,
    now: datetime,
    carried: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Build the document; *carried* rows stand in for the drivers when no source answers."""
    standings = resolve_season_standings(
        "driver standings",
        ctx.ergast.driver_standings_candidates(DRIVER_STANDINGS_PATHS, season="current"),
        ctx.ergast.driver_standings_candidates(
            FINAL_DRIVER_STANDINGS_PATHS, season=previous_season(now),
        ),
    )
    page = standings.page
    season = (page.season if page else None) or (
        previous_season(now) if standings.used_fallback else str(now.year)
    )

    metadata = fetch_openf1_metadata(ctx) if page else []
    matcher = EntityMatcher(metadata, identity_of_openf1)
    drivers = [driver_row(s, matcher, previous) for s in page.driver_standings] if page else list(carried)

    last_race, last_race_sources = resolve_last_race(ctx, season) if page else (None, {})
    header = f"{season} Driver Standings"
    if standings.used_fallback:
        header += " (fallback)"

    return {
        "header": header,
        "generatedAtUtc": iso_utc(now),
        "mode": "live" if page else "placeholder",
        "season": season,
        "lastRace": race_block(last_race),
        "lastRaceSource": {"found": last_race is not None, **last_race_sources},
        "source": {
            "kind": "jolpica ergast-compatible",
            **standings.sources,
            "note": (
                "Current season standings were empty; using last season final standings."
                if standings.used_fallback else None
            ),
        },
        "enrichment": {
            "openf1DriversUrl": openf1_label(ctx.openf1, "/drivers", session_key="latest"),
            "openf1RowsSeen": len(metadata),
        },
        "fallback": (
            {"seasonRequested": "current", "fallbackSeason": season} if standings.used_fallback else None
        ),
        "drivers": drivers,
    }


def run(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    path = ctx.settings.output_path(OUTPUT_FILE)
    previous_doc = read_document(path)
    doc = build_driver_standings_document(
        ctx, PreviousSnapshot.from_document(previous_doc), now, carry_forward(previous_doc, "drivers"),
    )
    write_snapshot(path, doc)
    logger.info("Driver standings written: season=%s drivers=%d", doc["season"], len(doc["drivers"]))
    return doc
