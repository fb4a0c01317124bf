"""Tests for Pydantic model deserialization."""

from __future__ import annotations

import pytest

from f1feeds.clients.ergast import parse_races, parse_standings
from f1feeds.exceptions import SourceValidationError
from f1feeds.models import (
    ChampionshipDriver,
    ChampionshipTeam,
    Driver,
    Meeting,
    Race,
    Session,
)
from tests.conftest import (
    SAMPLE_CHAMPIONSHIP_DRIVER,
    SAMPLE_CHAMPIONSHIP_TEAM,
    SAMPLE_CONSTRUCTOR_STANDINGS,
    SAMPLE_DRIVER,
    SAMPLE_DRIVER_STANDINGS,
    SAMPLE_LAST_RACE,
    SAMPLE_MEETING,
    SAMPLE_QUALIFYING_RACE,
    SAMPLE_SESSION,
    races_payload,
)


class TestDriverModel:
    def test_parse(self) -> None:
        driver = Driver.model_validate(SAMPLE_DRIVER)
        assert driver.driver_number == 1
        assert driver.headshot_url == "https://media.test/ver.png"
        assert driver.team_name == "Red Bull Racing"
        assert driver.name_acronym == "VER"

    def test_frozen(self) -> None:
        driver = Driver.model_validate(SAMPLE_DRIVER)
        with pytest.raises(Exception):
            driver.driver_number = 44  # type: ignore[misc]

    def test_optional_fields(self) -> None:
        driver = Driver.model_validate({"driver_number": 1})
        assert driver.headshot_url is None
        assert driver.team_colour is None


class TestSessionAndMeeting:
    def test_session_datetimes(self) -> None:
        session = Session.model_validate(SAMPLE_SESSION)
        assert session.session_name == "Race"
        assert session.date_end is not None
        assert session.date_end.year == 2026
        assert session.date_end.tzinfo is not None
        assert session.finished_at == session.date_end

    def test_session_without_end(self) -> None:
        session = Session.model_validate({"date_start": "2026-04-12T15:00:00+00:00"})
        assert session.finished_at == session.date_start

    def test_meeting(self) -> None:
        meeting = Meeting.model_validate(SAMPLE_MEETING)
        assert meeting.meeting_name == "Bahrain Grand Prix"
        assert meeting.location == "Sakhir"


class TestChampionshipModels:
    def test_driver(self) -> None:
        row = ChampionshipDriver.model_validate(SAMPLE_CHAMPIONSHIP_DRIVER)
        assert row.position_current == 1
        assert row.points_current == 400

    def test_team(self) -> None:
        row = ChampionshipTeam.model_validate(SAMPLE_CHAMPIONSHIP_TEAM)
        assert row.team_name == "Red Bull Racing"
        assert row.position_current == 2


class TestErgastStandings:
    def test_driver_standings_coerce_strings(self) -> None:
        page = parse_standings(SAMPLE_DRIVER_STANDINGS)
        assert page.season == "2026"
        assert page.round == 5
        first = page.driver_standings[0]
        assert first.position == 1
        assert first.points == 400.0
        assert first.driver.code == "VER"
        assert first.driver.permanent_number == 33
        assert first.constructors[0].constructor_id == "red_bull"

    def test_constructor_standings(self) -> None:
        page = parse_standings(SAMPLE_CONSTRUCTOR_STANDINGS)
        assert [s.constructor.constructor_id for s in page.constructor_standings] == [
            "mclaren", "red_bull", "rb",
        ]
        assert page.constructor_standings[0].wins == 6
        assert page.driver_standings == []

    def test_empty_table(self) -> None:
        page = parse_standings({"MRData": {"StandingsTable": {"StandingsLists": []}}})
        assert page.driver_standings == []
        assert page.constructor_standings == []

    def test_missing_envelope(self) -> None:
        with pytest.raises(SourceValidationError):
            parse_standings({"data": []})

    def test_bad_row(self) -> None:
        payload = {"MRData": {"StandingsTable": {"StandingsLists": [{"DriverStandings": [{"position": "1"}]}]}}}
        with pytest.raises(SourceValidationError):
            parse_standings(payload)


class TestErgastRaces:
    def test_results(self) -> None:
        races = parse_races(races_payload(SAMPLE_LAST_RACE))
        race = races[0]
        assert isinstance(race, Race)
        assert race.round == 5
        assert race.race_name == "Bahrain Grand Prix"
        assert race.circuit is not None and race.circuit.location is not None
        assert race.circuit.location.locality == "Sakhir"
        assert [r.driver.code for r in race.results] == ["VER", "NOR", "HAD"]
        assert race.results[0].time is not None
        assert race.results[0].time.time == "1:33:20.000"

    def test_qualifying(self) -> None:
        race = parse_races(races_payload(SAMPLE_QUALIFYING_RACE))[0]
        assert race.results == []
        assert race.qualifying_results[0].q3 == "1:29.5"

    def test_empty(self) -> None:
        assert parse_races(races_payload()) == []
