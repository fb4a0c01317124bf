"""Shared test fixtures and sample API responses."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
import respx

from f1feeds.clients.ergast import ERGAST_BASE_URL, JOLPICA_BASE_URL
from f1feeds.clients.openf1 import OPENF1_BASE_URL
from f1feeds.config import Settings
from f1feeds.jobs.common import FeedContext

ICS_URL = "https://calendar.test/f1.ics"
PAGES_BASE = "https://pages.test/F1-standings"


# ── OpenF1 ─────────────────────────────────────────────────────

SAMPLE_DRIVER = {
    "broadcast_name": "M VERSTAPPEN",
    "country_code": "NED",
    "driver_number": 1,
    "first_name": "Max",
    "full_name": "Max VERSTAPPEN",
    "headshot_url": "https://media.test/ver.png",
    "last_name": "Verstappen",
    "meeting_key": 1250,
    "name_acronym": "VER",
    "session_key": 9900,
    "team_colour": "3671C6",
    "team_name": "Red Bull Racing",
}

SAMPLE_DRIVER_HAD = {
    **SAMPLE_DRIVER,
    "broadcast_name": "I HADJAR",
    "driver_number": 6,
    "first_name": "Isack",
    "full_name": "Isack HADJAR",
    "headshot_url": "https://media.test/had.png",
    "last_name": "Hadjar",
    "name_acronym": "HAD",
}

SAMPLE_SESSION = {
    "circuit_short_name": "Sakhir",
    "country_name": "Bahrain",
    "date_end": "2026-04-12T17:00:00+00:00",
    "date_start": "2026-04-12T15:00:00+00:00",
    "location": "Sakhir",
    "meeting_key": 1250,
    "session_key": 9900,
    "session_name": "Race",
    "session_type": "Race",
    "year": 2026,
}

SAMPLE_MEETING = {
    "circuit_short_name": "Sakhir",
    "country_name": "Bahrain",
    "date_start": "2026-04-10T11:30:00+00:00",
    "location": "Sakhir",
    "meeting_key": 1250,
    "meeting_name": "Bahrain Grand Prix",
    "year": 2026,
}

SAMPLE_CHAMPIONSHIP_DRIVER = {
    "driver_number": 1,
    "meeting_key": 1250,
    "points_current": 400,
    "points_start": 375,
    "position_current": 1,
    "position_start": 2,
    "session_key": 9900,
}

SAMPLE_CHAMPIONSHIP_TEAM = {
    "meeting_key": 1250,
    "points_current": 420,
    "points_start": 390,
    "position_current": 2,
    "position_start": 2,
    "session_key": 9900,
    "team_name": "Red Bull Racing",
}


# ── Ergast ─────────────────────────────────────────────────────


def ergast_driver(code: str, given: str, family: str, number: int | None = None, **extra: Any) -> dict[str, Any]:
    return {
        "driverId": family.lower(),
        "permanentNumber": str(number) if number is not None else None,
        "code": code,
        "givenName": given,
        "familyName": family,
        "nationality": extra.get("nationality", "Dutch"),
    }


RED_BULL = {"constructorId": "red_bull", "name": "Red Bull", "nationality": "Austrian"}
MCLAREN = {"constructorId": "mclaren", "name": "McLaren", "nationality": "British"}
RB = {"constructorId": "rb", "name": "RB F1 Team", "nationality": "Italian"}


def driver_standing(position: int, points: float, driver: dict[str, Any], constructor: dict[str, Any]) -> dict[str, Any]:
    return {
        "position": str(position),
        "positionText": str(position),
        "points": str(points),
        "wins": "0",
        "Driver": driver,
        "Constructors": [constructor],
    }


def constructor_standing(position: int, points: float, constructor: dict[str, Any], wins: int = 0) -> dict[str, Any]:
    return {
        "position": str(position),
        "positionText": str(position),
        "points": str(points),
        "wins": str(wins),
        "Constructor": constructor,
    }


def standings_payload(
    season: str = "2026",
    round_: str = "5",
    drivers: list[dict[str, Any]] | None = None,
    constructors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    lists = []
    if drivers is not None or constructors is not None:
        entry: dict[str, Any] = {"season": season, "round": round_}
        if drivers is not None:
            entry["DriverStandings"] = drivers
        if constructors is not None:
            entry["ConstructorStandings"] = constructors
        lists.append(entry)
    return {"MRData": {"StandingsTable": {"season": season, "StandingsLists": lists}}}


def races_payload(*races: dict[str, Any]) -> dict[str, Any]:
    return {"MRData": {"RaceTable": {"Races": list(races)}}}


VER = ergast_driver("VER", "Max", "Verstappen", 33)
HAD = ergast_driver("HAD", "Isack", "Hadjar", 6, nationality="French")
NOR = ergast_driver("NOR", "Lando", "Norris", 4, nationality="British")

SAMPLE_DRIVER_STANDINGS = standings_payload(
    drivers=[
        driver_standing(1, 400, VER, RED_BULL),
        driver_standing(2, 380, NOR, MCLAREN),
        driver_standing(14, 20, HAD, RED_BULL),
    ],
)

SAMPLE_CONSTRUCTOR_STANDINGS = standings_payload(
    constructors=[
        constructor_standing(1, 700, MCLAREN, wins=6),
        constructor_standing(2, 420, RED_BULL, wins=3),
        constructor_standing(7, 60, RB),
    ],
)

EMPTY_STANDINGS = standings_payload()

SAMPLE_LAST_RACE = {
    "season": "2026",
    "round": "5",
    "raceName": "Bahrain Grand Prix",
    "date": "2026-04-12",
    "time": "15:00:00Z",
    "Circuit": {
        "circuitId": "bahrain",
        "circuitName": "Bahrain International Circuit",
        "Location": {"locality": "Sakhir", "country": "Bahrain"},
    },
    "Results": [
        {
            "position": "1", "points": "25", "status": "Finished",
            "Time": {"millis": "5600000", "time": "1:33:20.000"},
            "Driver": VER, "Constructor": RED_BULL,
        },
        {
            "position": "2", "points": "18", "status": "Finished",
            "Time": {"millis": "5605000", "time": "+5.000"},
            "Driver": NOR, "Constructor": MCLAREN,
        },
        {
            "position": "3", "points": "15", "status": "Finished",
            "Time": {"millis": "5610000", "time": "+10.000"},
            "Driver": HAD, "Constructor": RED_BULL,
        },
    ],
}

SAMPLE_QUALIFYING_RACE = {
    **{k: v for k, v in SAMPLE_LAST_RACE.items() if k != "Results"},
    "QualifyingResults": [
        {"position": "1", "Q1": "1:30.1", "Q2": "1:29.8", "Q3": "1:29.5", "Driver": NOR, "Constructor": MCLAREN},
        {"position": "2", "Q1": "1:30.3", "Q2": "1:29.9", "Q3": "1:29.6", "Driver": VER, "Constructor": RED_BULL},
    ],
}


# ── Calendar ───────────────────────────────────────────────────


def _ics_stamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def ics_calendar(*events: tuple[str, datetime, datetime]) -> str:
    """Minimal VCALENDAR with one VEVENT per (summary, start, end)."""
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//f1feeds tests//EN"]
    for index, (summary, start, end) in enumerate(events):
        lines += [
            "BEGIN:VEVENT",
            f"UID:event-{index}@f1feeds.test",
            f"DTSTAMP:{_ics_stamp(start)}",
            f"DTSTART:{_ics_stamp(start)}",
            f"DTEND:{_ics_stamp(end)}",
            f"SUMMARY:{summary}",
            "LOCATION:Jeddah",
            "END:VEVENT",
        ]
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# Saudi Arabian GP weekend, Fri 17 Apr - Sun 19 Apr 2026.
SAUDI_WEEKEND = (
    ("Saudi Arabian Grand Prix - Practice 1", utc(2026, 4, 17, 13, 30), utc(2026, 4, 17, 14, 30)),
    ("Saudi Arabian Grand Prix - Practice 2", utc(2026, 4, 17, 17, 0), utc(2026, 4, 17, 18, 0)),
    ("Saudi Arabian Grand Prix - Practice 3", utc(2026, 4, 18, 13, 30), utc(2026, 4, 18, 14, 30)),
    ("Saudi Arabian Grand Prix - Qualifying", utc(2026, 4, 18, 17, 0), utc(2026, 4, 18, 18, 0)),
    ("Saudi Arabian Grand Prix - Race", utc(2026, 4, 19, 17, 0), utc(2026, 4, 19, 19, 0)),
)

SAMPLE_ICS = ics_calendar(*SAUDI_WEEKEND)


# ── Fixtures ───────────────────────────────────────────────────


def not_found_everywhere(router: respx.MockRouter) -> None:
    """Catch-all 404 for every request no earlier route handled."""
    router.route().mock(return_value=httpx.Response(404, text="Not Found"))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        output_dir=tmp_path / "out",
        asset_root=tmp_path / "site",
        pages_base=PAGES_BASE,
        ics_url=ICS_URL,
        openf1_base_url=OPENF1_BASE_URL,
        ergast_base_urls=(JOLPICA_BASE_URL, ERGAST_BASE_URL),
        timeout=5.0,
    )


@pytest.fixture
def api():
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def ctx(settings, api):
    context = FeedContext.from_settings(settings)
    yield context
    context.close()


@pytest.fixture
def now() -> datetime:
    return utc(2026, 4, 14, 12, 0)
