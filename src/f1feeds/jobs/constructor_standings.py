"""Constructor championship feed (``f1_constructors_standings.json``)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence

from f1feeds.clients.ergast import CONSTRUCTOR_STANDINGS_PATHS, FINAL_CONSTRUCTOR_STANDINGS_PATHS
from f1feeds.differ import PreviousSnapshot, carry_forward, diff_position
from f1feeds.formatters import UNKNOWN, format_number, format_position, or_unknown
from f1feeds.jobs.common import (
    FeedContext,
    iso_utc,
    previous_season,
    race_block,
    resolve_last_race,
    resolve_season_standings,
)
from f1feeds.models.ergast import ConstructorStanding
from f1feeds.store import read_document, write_snapshot
from f1feeds.teams import canonical_team_name

logger = logging.getLogger(__name__)

OUTPUT_FILE = "f1_constructors_standings.json"


def constructor_row(
    ctx: FeedContext, standing: ConstructorStanding, season: str, previous: PreviousSnapshot,
) -> dict[str, Any]:
    constructor = standing.constructor
    constructor_id = (constructor.constructor_id or "").lower() or None
    delta = diff_position(standing.position, previous.lookup_constructor(constructor_id))
    return {
        "constructorId": or_unknown(constructor_id),
        "team": or_unknown(constructor.name),
        "shortName": or_unknown(canonical_team_name(constructor.name)),
        "position": format_position(standing.position),
        "positionNumber": or_unknown(standing.position),
        "points": format_number(standing.points),
        "wins": format_number(standing.wins),
        "teamLogoPng": ctx.locator.constructor_logo_url(constructor_id, season),
        **delta.to_dict(),
    }


def build_constructor_standings_document(
    ctx: FeedContext,
    previous: PreviousSnapshot,
    now: datetime,
    carried: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    standings = resolve_season_standings(
        "constructor standings",
        ctx.ergast.constructor_standings_candidates(CONSTRUCTOR_STANDINGS_PATHS, season="current"),
        ctx.ergast.constructor_standings_candidates(
            FINAL_CONSTRUCTOR_STANDINGS_PATHS, season=previous_season(now),
        ),
    )
    page = standings.page
    season = (page.season if page else None) or (
        previous_season(now) if standings.used_fallback else str(now.year)
    )
    last_race, last_race_sources = resolve_last_race(ctx, season) if page else (None, {})
    constructors = (
        [constructor_row(ctx, s, season, previous) for s in page.constructor_standings]
        if page else list(carried)
    )

    return {
        "header": "Constructors standings",
        "generatedAtUtc": iso_utc(now),
        "mode": "live" if page else "placeholder",
        "sources": {
            "ergastBases": [client.base_url for client in ctx.ergast.clients],
            "constructorStandings": standings.sources,
            "lastRace": last_race_sources,
        },
        "meta": {
            "seasonUsed": season,
            "roundUsed": str(page.round) if page and page.round is not None else UNKNOWN,
            "note": (
                f"Current season standings unavailable; fell back to {season}."
                if standings.used_fallback else "Pulled current constructor standings."
            ),
        },
        "lastRace": race_block(last_race),
        "constructors": constructors,
    }


def run(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    path = ctx.settings.output_path(OUTPUT_FILE)
    previous_doc = read_document(path)
    doc = build_constructor_standings_document(
        ctx, PreviousSnapshot.from_document(previous_doc), now, carry_forward(previous_doc, "constructors"),
    )
    write_snapshot(path, doc)
    logger.info("Constructor standings written: %d teams", len(doc["constructors"]))
    return doc
