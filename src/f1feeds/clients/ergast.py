"""Client for Ergast-compatible standings APIs (Jolpica and the Ergast mirror)."""

from __future__ import annotations

from typing import Any, Sequence

from pydantic import TypeAdapter

from f1feeds._http import DEFAULT_TIMEOUT, SyncTransport
from f1feeds.api_logging import log_api_call
from f1feeds.exceptions import SourceValidationError
from f1feeds.models.ergast import ConstructorStanding, DriverStanding, Race, StandingsPage
from f1feeds.resolver import Candidate

JOLPICA_BASE_URL = "https://api.jolpi.ca/ergast/f1"
ERGAST_BASE_URL = "https://ergast.com/api/f1"
DEFAULT_BASE_URLS = (JOLPICA_BASE_URL, ERGAST_BASE_URL)

# ── Path spellings ─────────────────────────────────────────────
# Jolpica accepts several spellings of the same resource and has answered
# some of them with empty tables in the past, so each family lists every
# variant in the order they should be tried.

DRIVER_STANDINGS_PATHS = (
    "/{season}/driverStandings.json",
    "/{season}/driverstandings.json",
)
FINAL_DRIVER_STANDINGS_PATHS = (
    "/{season}/last/driverstandings.json",
    "/{season}/last/driverStandings.json",
    "/{season}/driverstandings/last.json",
    "/{season}/driverStandings/last.json",
)
CONSTRUCTOR_STANDINGS_PATHS = (
    "/{season}/constructorStandings.json",
    "/{season}/constructorstandings.json",
)
FINAL_CONSTRUCTOR_STANDINGS_PATHS = (
    "/{season}/last/constructorstandings.json",
    "/{season}/constructorstandings/last.json",
)
LAST_RESULTS_PATHS = (
    "/{season}/last/results.json",
    "/{season}/last/results/",
    "/{season}/last/results",
)
RESULTS_PATHS = ("/{season}/{round}/results.json",)
QUALIFYING_PATHS = ("/{season}/{round}/qualifying.json",)
SCHEDULE_PATHS = ("/{season}.json",)
NEXT_RACE_PATHS = ("/current/next.json", "/current/next.json?limit=1")


def _mrdata(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict) or not isinstance(payload.get("MRData"), dict):
        raise SourceValidationError("Response is missing the MRData envelope")
    return payload["MRData"]


def parse_standings(payload: Any) -> StandingsPage:
    """Flatten ``MRData.StandingsTable`` into a :class:`StandingsPage`."""
    table = _mrdata(payload).get("StandingsTable") or {}
    lists = table.get("StandingsLists") or []
    first = lists[0] if lists else {}
    try:
        return StandingsPage(
            season=first.get("season") or table.get("season"),
            round=first.get("round") or table.get("round"),
            driver_standings=TypeAdapter(list[DriverStanding]).validate_python(
                first.get("DriverStandings") or []
            ),
            constructor_standings=TypeAdapter(list[ConstructorStanding]).validate_python(
                first.get("ConstructorStandings") or []
            ),
        )
    except Exception as exc:
        raise SourceValidationError(f"Failed to validate standings response: {exc}") from exc


def parse_races(payload: Any) -> list[Race]:
    """Validate ``MRData.RaceTable.Races``."""
    table = _mrdata(payload).get("RaceTable") or {}
    try:
        return TypeAdapter(list[Race]).validate_python(table.get("Races") or [])
    except Exception as exc:
        raise SourceValidationError(f"Failed to validate race table: {exc}") from exc


class ErgastClient:
    """Synchronous client for one Ergast-compatible host."""

    def __init__(
        self,
        base_url: str = JOLPICA_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: SyncTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._transport = transport or SyncTransport(base_url=base_url, timeout=timeout)

    def __enter__(self) -> ErgastClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._transport.close()

    @log_api_call
    def standings(self, path: str) -> StandingsPage:
        """Get a driver or constructor standings table."""
        return parse_standings(self._transport.get(path))

    @log_api_call
    def races(self, path: str) -> list[Race]:
        """Get a race table (schedule, results or qualifying)."""
        return parse_races(self._transport.get(path))


class ErgastHosts:
    """Every configured Ergast-compatible host, primary first.

    Builds resolver candidates for the cross product of path spellings and
    hosts: each spelling is tried on the primary host, then on the mirror,
    before moving to the next spelling.
    """

    def __init__(self, clients: Sequence[ErgastClient]) -> None:
        if not clients:
            raise ValueError("ErgastHosts needs at least one client")
        self.clients = list(clients)

    @classmethod
    def from_urls(
        cls, base_urls: Sequence[str] = DEFAULT_BASE_URLS, timeout: float = DEFAULT_TIMEOUT,
    ) -> ErgastHosts:
        return cls([ErgastClient(base_url=url, timeout=timeout) for url in base_urls])

    def close(self) -> None:
        for client in self.clients:
            client.close()

    def __enter__(self) -> ErgastHosts:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _paths(self, templates: Sequence[str], fields: dict[str, object]) -> list[str]:
        return [template.format(**fields) for template in templates]

    def driver_standings_candidates(
        self, templates: Sequence[str], **fields: object,
    ) -> list[Candidate[StandingsPage]]:
        return [
            Candidate(
                label=f"{client.base_url}{path}",
                fetch=lambda c=client, p=path: c.standings(p),
                is_empty=lambda page: not page.driver_standings,
            )
            for path in self._paths(templates, fields)
            for client in self.clients
        ]

    def constructor_standings_candidates(
        self, templates: Sequence[str], **fields: object,
    ) -> list[Candidate[StandingsPage]]:
        return [
            Candidate(
                label=f"{client.base_url}{path}",
                fetch=lambda c=client, p=path: c.standings(p),
                is_empty=lambda page: not page.constructor_standings,
            )
            for path in self._paths(templates, fields)
            for client in self.clients
        ]

    def race_candidates(
        self, templates: Sequence[str], **fields: object,
    ) -> list[Candidate[list[Race]]]:
        return [
            Candidate(
                label=f"{client.base_url}{path}",
                fetch=lambda c=client, p=path: c.races(p),
            )
            for path in self._paths(templates, fields)
            for client in self.clients
        ]
