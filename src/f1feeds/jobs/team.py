"""Team feed: one team's drivers, their standings and the team standing.

Roster comes from OpenF1 (or the team's fixed lineup), standings from the
Ergast hosts with OpenF1's championship endpoints as the last resort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from f1feeds._filters import Filter
from f1feeds.clients.ergast import CONSTRUCTOR_STANDINGS_PATHS, DRIVER_STANDINGS_PATHS
from f1feeds.differ import PreviousSnapshot, diff_position
from f1feeds.exceptions import ResolverExhaustedError, SourceError
from f1feeds.formatters import UNKNOWN, format_number, format_position, or_unknown
from f1feeds.jobs.common import (
    FeedContext,
    iso_utc,
    openf1_label,
    provenance,
    race_block,
    resolve_last_race,
)
from f1feeds.matcher import EntityMatcher
from f1feeds.models.openf1 import Driver
from f1feeds.models.ergast import StandingsPage
from f1feeds.resolver import Candidate, MultiSourceResolver
from f1feeds.store import load_previous, write_snapshot
from f1feeds.teams import TeamConfig, canonical_team_name
from f1feeds.types import RosterEntry, StandingsRow

logger = logging.getLogger(__name__)


@dataclass
class RosterResult:
    entries: list[RosterEntry]
    source: str
    sources: dict[str, Any] | None = None


@dataclass
class StandingsResult:
    rows: list[StandingsRow] = field(default_factory=list)
    sources: dict[str, Any] = field(default_factory=dict)
    available: bool = False


# ── Roster ─────────────────────────────────────────────────────


def select_roster(rows: Sequence[Driver], team: TeamConfig) -> list[RosterEntry]:
    """Latest meeting only, one row per car number, lowest numbers first."""
    keyed = [r for r in rows if r.meeting_key is not None]
    if keyed:
        latest = max(r.meeting_key for r in keyed)
        rows = [r for r in rows if r.meeting_key == latest]

    by_number: dict[int, Driver] = {}
    for row in rows:
        if row.driver_number is not None:
            by_number.setdefault(row.driver_number, row)
    ordered = [by_number[number] for number in sorted(by_number)]
    return [RosterEntry.from_openf1(d, team.display_name) for d in ordered[: team.roster_size]]


def resolve_roster(ctx: FeedContext, team: TeamConfig) -> RosterResult:
    if team.pin_roster:
        return RosterResult(list(team.placeholder_roster), "pinned")

    candidates = [
        Candidate(
            openf1_label(ctx.openf1, "/drivers", meeting_key="latest", team_name=name),
            lambda n=name: ctx.openf1.drivers(meeting_key="latest", team_name=n),
        )
        for name in team.openf1_team_names
    ]
    try:
        resolution = MultiSourceResolver(f"{team.key} roster").resolve(candidates)
    except ResolverExhaustedError as exc:
        logger.warning("%s roster unavailable, using placeholder lineup: %s", team.display_name, exc)
        return RosterResult(list(team.placeholder_roster), "placeholder", provenance(None, exc.attempts))

    entries = select_roster(resolution.payload, team)
    if len(entries) < team.roster_size:
        logger.warning(
            "%s roster has %d of %d drivers, using placeholder lineup",
            team.display_name, len(entries), team.roster_size,
        )
        return RosterResult(list(team.placeholder_roster), "placeholder", provenance(resolution))
    return RosterResult(entries, "openf1", provenance(resolution))


# ── Standings ──────────────────────────────────────────────────


def _driver_rows(page: StandingsPage) -> list[StandingsRow]:
    return [StandingsRow.from_ergast_driver(r) for r in page.driver_standings]


def _constructor_rows(page: StandingsPage) -> list[StandingsRow]:
    return [StandingsRow.from_ergast_constructor(r) for r in page.constructor_standings]


def driver_standings_candidates(ctx: FeedContext) -> list[Candidate[list[StandingsRow]]]:
    candidates = [
        c.map(_driver_rows)
        for c in ctx.ergast.driver_standings_candidates(DRIVER_STANDINGS_PATHS, season="current")
    ]
    candidates.append(
        Candidate(
            openf1_label(ctx.openf1, "/championship_drivers", session_key="latest"),
            lambda: [
                StandingsRow.from_openf1_driver(r)
                for r in ctx.openf1.championship_drivers(session_key="latest")
            ],
        )
    )
    return candidates


def constructor_standings_candidates(ctx: FeedContext) -> list[Candidate[list[StandingsRow]]]:
    candidates = [
        c.map(_constructor_rows)
        for c in ctx.ergast.constructor_standings_candidates(CONSTRUCTOR_STANDINGS_PATHS, season="current")
    ]
    candidates.append(
        Candidate(
            openf1_label(ctx.openf1, "/championship_teams", session_key="latest"),
            lambda: [
                StandingsRow.from_openf1_team(r)
                for r in ctx.openf1.championship_teams(session_key="latest")
            ],
        )
    )
    return candidates


def resolve_standings(name: str, candidates: list[Candidate[list[StandingsRow]]]) -> StandingsResult:
    try:
        resolution = MultiSourceResolver(name).resolve(candidates)
    except ResolverExhaustedError as exc:
        logger.warning("%s unavailable from every source: %s", name, exc)
        return StandingsResult(sources=provenance(None, exc.attempts))
    return StandingsResult(resolution.payload, provenance(resolution), available=True)


def find_team_row(rows: Sequence[StandingsRow], team: TeamConfig) -> StandingsRow | None:
    """Constructor id first (newest id wins), then a unique alias-table name match."""
    for constructor_id in team.constructor_ids:
        for row in rows:
            if (row.constructor_id or "").lower() == constructor_id:
                return row
    names = {canonical_team_name(n) for n in (team.display_name, *team.openf1_team_names)}
    matches = [r for r in rows if canonical_team_name(r.constructor_name) in names]
    if len(matches) == 1:
        return matches[0]
    return None


# ── Last race ──────────────────────────────────────────────────


def openf1_race_meeting(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    """Meeting details of the latest finished Race session on OpenF1."""
    block = {"meetingName": UNKNOWN, "circuitShortName": UNKNOWN, "location": UNKNOWN, "countryName": UNKNOWN}
    sessions = ctx.openf1.sessions(session_name="Race", date_end=Filter(lt=now))
    finished = [s for s in sessions if s.finished_at is not None]
    if not finished:
        return block
    latest = max(finished, key=lambda s: s.finished_at)
    meeting = None
    if latest.meeting_key is not None:
        meetings = ctx.openf1.meetings(meeting_key=latest.meeting_key)
        meeting = meetings[0] if meetings else None
    return {
        "meetingName": or_unknown(meeting.meeting_name if meeting else None),
        "circuitShortName": or_unknown(
            (meeting.circuit_short_name if meeting else None) or latest.circuit_short_name
        ),
        "location": or_unknown((meeting.location if meeting else None) or latest.location),
        "countryName": or_unknown((meeting.country_name if meeting else None) or latest.country_name),
    }


def enrich_last_race(ctx: FeedContext, block: dict[str, Any], now: datetime) -> dict[str, Any]:
    try:
        openf1 = openf1_race_meeting(ctx, now)
    except SourceError as exc:
        logger.warning("OpenF1 last-race enrichment failed: %s", exc)
        return block
    circuit = dict(block["circuit"])
    if circuit["locality"] == UNKNOWN:
        circuit["locality"] = openf1["location"]
    if circuit["country"] == UNKNOWN:
        circuit["country"] = openf1["countryName"]
    return {**block, "circuit": circuit, "openf1": openf1}


# ── Document ───────────────────────────────────────────────────


def driver_block(
    ctx: FeedContext,
    team: TeamConfig,
    entry: RosterEntry,
    row: StandingsRow | None,
    previous: PreviousSnapshot,
) -> dict[str, Any]:
    position = row.position if row else None
    delta = diff_position(position, previous.lookup(entry.code, entry.first_name, entry.last_name))
    has_name = entry.first_name != UNKNOWN and entry.last_name != UNKNOWN
    return {
        "firstName": entry.first_name,
        "lastName": entry.last_name,
        "code": entry.code,
        "driverNumber": or_unknown(entry.driver_number),
        "numberImageUrl": or_unknown(ctx.locator.driver_number_url(entry.driver_number)),
        "headshotUrl": or_unknown(
            ctx.locator.headshot_url(entry.first_name, entry.last_name) if has_name else None
        ),
        "team": team.display_name,
        "position": format_position(position),
        "positionNumber": or_unknown(position),
        "points": format_number(row.points if row else None),
        "wins": format_number(row.wins if row else None),
        "placeholder": row is None,
        "fromOpenF1": entry.from_live_source,
        **delta.to_dict(),
    }


def team_standing_block(
    team: TeamConfig, row: StandingsRow | None, previous: PreviousSnapshot,
) -> dict[str, Any]:
    position = row.position if row else None
    constructor_id = (row.constructor_id if row else None) or team.constructor_ids[0]
    delta = diff_position(position, previous.lookup_constructor(constructor_id))
    return {
        "team": team.display_name,
        "constructorId": constructor_id,
        "position": format_position(position),
        "positionNumber": or_unknown(position),
        "points": format_number(row.points if row else None),
        "wins": format_number(row.wins if row else None),
        "originalTeam": or_unknown(row.constructor_name if row else None),
        **delta.to_dict(),
    }


def build_team_document(
    ctx: FeedContext, team: TeamConfig, previous: PreviousSnapshot, now: datetime,
) -> dict[str, Any]:
    roster = resolve_roster(ctx, team)
    driver_standings = resolve_standings(f"{team.key} driver standings", driver_standings_candidates(ctx))
    constructor_standings = resolve_standings(
        f"{team.key} constructor standings", constructor_standings_candidates(ctx),
    )

    matcher = EntityMatcher(driver_standings.rows, lambda r: r.identity)
    matched = [(entry, matcher.match(entry.identity)) for entry in roster.entries]
    team_row = find_team_row(constructor_standings.rows, team)

    live = any(row is not None for _, row in matched) or team_row is not None
    if not live:
        logger.warning("%s: no standings matched, writing placeholder document", team.display_name)

    last_race, last_race_sources = resolve_last_race(ctx)
    last_race_out = race_block(last_race)
    if team.enrich_last_race:
        last_race_out = enrich_last_race(ctx, last_race_out, now)

    return {
        "header": team.header,
        "generatedAtUtc": iso_utc(now),
        "mode": "live" if live else "placeholder",
        "sources": {
            "rosterSource": roster.source,
            "openf1Drivers": roster.sources,
            "driverStandings": driver_standings.sources,
            "constructorStandings": constructor_standings.sources,
            "lastRace": last_race_sources,
        },
        "team": {
            "key": team.key,
            "team": team.display_name,
            "teamLogoPng": ctx.locator.team_logo_url(team.logo_file),
            "teamStanding": team_standing_block(team, team_row, previous),
        },
        "lastRace": last_race_out,
        "drivers": [driver_block(ctx, team, entry, row, previous) for entry, row in matched],
    }


def run(ctx: FeedContext, team: TeamConfig, now: datetime) -> dict[str, Any]:
    path = ctx.settings.output_path(team.output_file)
    doc = build_team_document(ctx, team, load_previous(path), now)
    write_snapshot(path, doc)
    logger.info("%s feed written in %s mode", team.display_name, doc["mode"])
    return doc
