"""Pieces shared by every feed job: clients, timestamps and common blocks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence
from urllib.parse import urlencode

from f1feeds._http import SyncTransport
from f1feeds.assets import AssetLocator
from f1feeds.clients.ergast import LAST_RESULTS_PATHS, ErgastHosts
from f1feeds.clients.openf1 import OpenF1Client
from f1feeds.config import Settings
from f1feeds.exceptions import ResolverExhaustedError
from f1feeds.formatters import or_unknown
from f1feeds.models.ergast import Race, StandingsPage
from f1feeds.resolver import Attempt, Candidate, MultiSourceResolver, Resolution

logger = logging.getLogger(__name__)

UNAVAILABLE = "UNAVAILABLE"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(value: datetime | None) -> str | None:
    """``2026-03-08T04:00:00Z``; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def openf1_label(client: OpenF1Client, endpoint: str, **params: Any) -> str:
    query = urlencode({k: v for k, v in params.items() if v is not None})
    return f"{client.base_url}{endpoint}?{query}" if query else f"{client.base_url}{endpoint}"


def provenance(resolution: Resolution[Any] | None, attempts: Sequence[Attempt] = ()) -> dict[str, Any]:
    """Source block: the winning URL (or UNAVAILABLE) and every URL tried."""
    if resolution is not None:
        return {"urlUsed": resolution.label, "urlsTried": resolution.urls_tried}
    return {"urlUsed": UNAVAILABLE, "urlsTried": [a.label for a in attempts]}


def race_block(race: Race | None) -> dict[str, Any]:
    """Race identity block; every missing field is the unknown sentinel."""
    circuit = race.circuit if race else None
    location = circuit.location if circuit else None
    return {
        "season": or_unknown(race.season if race else None),
        "round": or_unknown(str(race.round) if race and race.round is not None else None),
        "raceName": or_unknown(race.race_name if race else None),
        "date": or_unknown(race.date if race else None),
        "timeUtc": or_unknown(race.time if race else None),
        "circuit": {
            "name": or_unknown(circuit.circuit_name if circuit else None),
            "locality": or_unknown(location.locality if location else None),
            "country": or_unknown(location.country if location else None),
        },
    }


def previous_season(now: datetime) -> str:
    return str(now.year - 1)


@dataclass
class FeedContext:
    """Clients and settings for one run; closed by the CLI when the job returns."""

    settings: Settings
    ergast: ErgastHosts
    openf1: OpenF1Client
    transport: SyncTransport
    locator: AssetLocator

    @classmethod
    def from_settings(cls, settings: Settings) -> FeedContext:
        return cls(
            settings=settings,
            ergast=ErgastHosts.from_urls(settings.ergast_base_urls, timeout=settings.timeout),
            openf1=OpenF1Client(base_url=settings.openf1_base_url, timeout=settings.timeout),
            transport=SyncTransport(timeout=settings.timeout),
            locator=AssetLocator(
                settings.pages_base, settings.asset_root, cache_bust=settings.cache_bust,
            ),
        )

    def close(self) -> None:
        self.ergast.close()
        self.openf1.close()
        self.transport.close()

    def __enter__(self) -> FeedContext:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@dataclass
class SeasonStandings:
    """Standings of the current season or, failing that, the previous one."""

    page: StandingsPage | None
    sources: dict[str, Any]
    used_fallback: bool = False


def resolve_season_standings(
    name: str,
    current: Sequence[Candidate[StandingsPage]],
    fallback: Sequence[Candidate[StandingsPage]],
) -> SeasonStandings:
    """Try every current-season candidate, then the previous season's final table."""
    fallback_labels = {c.label for c in fallback}
    try:
        resolution = MultiSourceResolver(name).resolve([*current, *fallback])
    except ResolverExhaustedError as exc:
        logger.warning("%s unavailable from every source: %s", name, exc)
        return SeasonStandings(None, provenance(None, exc.attempts))
    used_fallback = resolution.label in fallback_labels
    if used_fallback:
        logger.info("%s: current season empty, using %s", name, resolution.label)
    return SeasonStandings(resolution.payload, provenance(resolution), used_fallback)


def resolve_last_race(ctx: FeedContext, season: str = "current") -> tuple[Race | None, dict[str, Any]]:
    """Last race of *season* with results, or None with the attempts made."""
    candidates = [
        c.map(lambda races: races[:1])
        for c in ctx.ergast.race_candidates(LAST_RESULTS_PATHS, season=season)
    ]
    try:
        resolution = MultiSourceResolver(f"last race {season}").resolve(candidates)
    except ResolverExhaustedError as exc:
        logger.warning("Last race of %s unavailable: %s", season, exc)
        return None, provenance(None, exc.attempts)
    return resolution.payload[0], provenance(resolution)
