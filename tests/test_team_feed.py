"""Tests for the per-team standings feed."""

from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest

from f1feeds.clients.ergast import JOLPICA_BASE_URL
from f1feeds.clients.openf1 import OPENF1_BASE_URL
from f1feeds.formatters import UNKNOWN
from f1feeds.jobs import team as team_job
from f1feeds.models import Driver
from f1feeds.store import write_snapshot
from f1feeds.teams import get_team
from f1feeds.types import StandingsRow
from tests.conftest import (
    SAMPLE_CHAMPIONSHIP_DRIVER,
    SAMPLE_CHAMPIONSHIP_TEAM,
    SAMPLE_CONSTRUCTOR_STANDINGS,
    SAMPLE_DRIVER,
    SAMPLE_DRIVER_HAD,
    SAMPLE_DRIVER_STANDINGS,
    SAMPLE_LAST_RACE,
    SAMPLE_MEETING,
    SAMPLE_SESSION,
    not_found_everywhere,
    races_payload,
)


def _mock_live_upstreams(api, roster=(SAMPLE_DRIVER, SAMPLE_DRIVER_HAD)) -> None:
    api.get(f"{OPENF1_BASE_URL}/drivers", params={"team_name": "Red Bull Racing"}).mock(
        return_value=httpx.Response(200, json=list(roster))
    )
    api.get(f"{JOLPICA_BASE_URL}/current/driverStandings.json").mock(
        return_value=httpx.Response(200, json=SAMPLE_DRIVER_STANDINGS)
    )
    api.get(f"{JOLPICA_BASE_URL}/current/constructorStandings.json").mock(
        return_value=httpx.Response(200, json=SAMPLE_CONSTRUCTOR_STANDINGS)
    )
    api.get(f"{JOLPICA_BASE_URL}/current/last/results.json").mock(
        return_value=httpx.Response(200, json=races_payload(SAMPLE_LAST_RACE))
    )
    not_found_everywhere(api)


def _read(settings, key: str) -> dict:
    return json.loads(settings.output_path(get_team(key).output_file).read_text(encoding="utf-8"))


class TestSelectRoster:
    def test_latest_meeting_deduplicated_and_sorted(self) -> None:
        redbull = get_team("redbull")
        rows = [
            Driver(driver_number=22, first_name="Yuki", last_name="Tsunoda", meeting_key=1240),
            Driver(driver_number=6, first_name="Isack", last_name="Hadjar", meeting_key=1250),
            Driver(driver_number=1, first_name="Max", last_name="Verstappen", name_acronym="VER", meeting_key=1250),
            Driver(driver_number=6, first_name="Isack", last_name="Hadjar", meeting_key=1250),
        ]
        roster = team_job.select_roster(rows, redbull)
        assert [(e.driver_number, e.code) for e in roster] == [(1, "VER"), (6, "HAD")]
        assert all(e.from_live_source for e in roster)
        assert roster[0].team_display_name == "Red Bull"

    def test_limited_to_roster_size(self) -> None:
        rows = [Driver(driver_number=n, first_name="A", last_name=f"Driver{n}") for n in (30, 3, 41)]
        assert [e.driver_number for e in team_job.select_roster(rows, get_team("vcarb"))] == [3, 30]


class TestFindTeamRow:
    def test_by_constructor_id_in_order(self) -> None:
        rows = [
            StandingsRow("constructor:sauber", position=9, constructor_id="sauber", constructor_name="Sauber"),
            StandingsRow("constructor:audi", position=8, constructor_id="audi", constructor_name="Audi"),
        ]
        assert team_job.find_team_row(rows, get_team("audi")).position == 8

    def test_by_alias_name(self) -> None:
        rows = [StandingsRow("team:visa cash app rb", position=6, constructor_name="Visa Cash App RB")]
        assert team_job.find_team_row(rows, get_team("vcarb")).position == 6

    def test_missing(self) -> None:
        assert team_job.find_team_row([], get_team("haas")) is None


class TestLiveTeamFeed:
    def test_end_to_end(self, ctx, api, settings, now) -> None:
        _mock_live_upstreams(api)
        write_snapshot(
            settings.output_path("f1_redbull_standings.json"),
            {
                "drivers": [{"code": "VER", "firstName": "Max", "lastName": "Verstappen", "positionNumber": 2}],
                "team": {"teamStanding": {"constructorId": "red_bull", "positionNumber": 2}},
            },
        )

        doc = team_job.run(ctx, get_team("redbull"), now)

        assert doc == _read(settings, "redbull")
        assert doc["mode"] == "live"
        assert doc["header"] == "Red Bull standings"
        assert doc["sources"]["rosterSource"] == "openf1"
        assert doc["sources"]["driverStandings"]["urlUsed"] == f"{JOLPICA_BASE_URL}/current/driverStandings.json"

        ver, had = doc["drivers"]
        assert (ver["code"], ver["position"], ver["points"]) == ("VER", "P1", 400)
        assert ver["positionChange"] == 1
        assert ver["positionDirection"] == "UP"
        assert ver["arrowSymbol"] == "^"
        assert ver["numberImageUrl"].endswith("/driver-numbers/driver-number-1.png")
        assert ver["headshotUrl"] == UNKNOWN
        assert ver["fromOpenF1"] is True
        assert ver["placeholder"] is False
        assert (had["code"], had["position"]) == ("HAD", "P14")
        assert had["positionDirection"] == "NEW"

        standing = doc["team"]["teamStanding"]
        assert standing["position"] == "P2"
        assert standing["points"] == 420
        assert standing["positionDirection"] == "SAME"
        assert doc["team"]["teamLogoPng"].endswith("/teamlogos/redbull_logo.png")
        assert doc["lastRace"]["raceName"] == "Bahrain Grand Prix"

    def test_rerun_is_stable(self, ctx, api, settings, now) -> None:
        _mock_live_upstreams(api)
        path = settings.output_path("f1_redbull_standings.json")
        team_job.run(ctx, get_team("redbull"), now)
        team_job.run(ctx, get_team("redbull"), now + timedelta(minutes=5))
        second = path.read_text(encoding="utf-8")
        team_job.run(ctx, get_team("redbull"), now + timedelta(minutes=5))
        assert path.read_text(encoding="utf-8") == second

        doc = json.loads(second)
        assert {d["positionDirection"] for d in doc["drivers"]} == {"SAME"}
        assert {d["positionChange"] for d in doc["drivers"]} == {0}

    def test_short_roster_uses_placeholder_lineup(self, ctx, api, now) -> None:
        _mock_live_upstreams(api, roster=(SAMPLE_DRIVER,))
        doc = team_job.run(ctx, get_team("redbull"), now)
        assert doc["sources"]["rosterSource"] == "placeholder"
        assert [d["lastName"] for d in doc["drivers"]] == ["Verstappen", "Hadjar"]
        assert {d["fromOpenF1"] for d in doc["drivers"]} == {False}
        assert doc["mode"] == "live"

    def test_team_name_spellings_fall_through(self, ctx, api, now) -> None:
        lawson = {**SAMPLE_DRIVER, "driver_number": 30, "first_name": "Liam", "last_name": "Lawson",
                  "name_acronym": "LAW", "team_name": "RB"}
        lindblad = {**SAMPLE_DRIVER, "driver_number": 41, "first_name": "Arvid", "last_name": "Lindblad",
                    "name_acronym": "LIN", "team_name": "RB"}
        api.get(f"{OPENF1_BASE_URL}/drivers", params={"team_name": "Racing Bulls"}).mock(
            return_value=httpx.Response(200, json=[])
        )
        route = api.get(f"{OPENF1_BASE_URL}/drivers", params={"team_name": "RB"}).mock(
            return_value=httpx.Response(200, json=[lawson, lindblad])
        )
        not_found_everywhere(api)

        doc = team_job.run(ctx, get_team("vcarb"), now)
        assert route.called
        assert doc["sources"]["rosterSource"] == "openf1"
        assert doc["sources"]["openf1Drivers"]["urlUsed"].endswith("team_name=RB")
        assert len(doc["sources"]["openf1Drivers"]["urlsTried"]) == 2
        assert [d["code"] for d in doc["drivers"]] == ["LAW", "LIN"]

    def test_openf1_championship_fallback(self, ctx, api, now) -> None:
        api.get(f"{OPENF1_BASE_URL}/drivers").mock(
            return_value=httpx.Response(200, json=[SAMPLE_DRIVER, SAMPLE_DRIVER_HAD])
        )
        api.get(f"{OPENF1_BASE_URL}/championship_drivers").mock(
            return_value=httpx.Response(200, json=[SAMPLE_CHAMPIONSHIP_DRIVER])
        )
        api.get(f"{OPENF1_BASE_URL}/championship_teams").mock(
            return_value=httpx.Response(200, json=[SAMPLE_CHAMPIONSHIP_TEAM])
        )
        not_found_everywhere(api)

        doc = team_job.run(ctx, get_team("redbull"), now)
        assert doc["mode"] == "live"
        assert doc["sources"]["driverStandings"]["urlUsed"].startswith(f"{OPENF1_BASE_URL}/championship_drivers")
        ver, had = doc["drivers"]
        assert (ver["position"], ver["points"], ver["wins"]) == ("P1", 400, UNKNOWN)
        assert had["position"] == UNKNOWN
        assert had["placeholder"] is True
        assert doc["team"]["teamStanding"]["position"] == "P2"
        assert doc["team"]["teamStanding"]["originalTeam"] == "Red Bull Racing"


class TestPlaceholderTeamFeed:
    def test_every_source_down(self, ctx, api, settings, now) -> None:
        not_found_everywhere(api)
        doc = team_job.run(ctx, get_team("redbull"), now)

        assert doc == _read(settings, "redbull")
        assert doc["mode"] == "placeholder"
        assert doc["sources"]["rosterSource"] == "placeholder"
        assert doc["sources"]["driverStandings"]["urlUsed"] == "UNAVAILABLE"
        assert len(doc["sources"]["driverStandings"]["urlsTried"]) == 5
        for driver in doc["drivers"]:
            assert driver["placeholder"] is True
            assert driver["position"] == UNKNOWN
            assert driver["points"] == UNKNOWN
            assert driver["wins"] == UNKNOWN
            assert driver["positionDirection"] == "NEW"
        standing = doc["team"]["teamStanding"]
        assert standing["position"] == UNKNOWN
        assert standing["constructorId"] == "red_bull"
        assert doc["lastRace"]["raceName"] == UNKNOWN
        assert doc["lastRace"]["circuit"]["country"] == UNKNOWN

    def test_placeholder_run_replaces_file(self, ctx, api, settings, now) -> None:
        not_found_everywhere(api)
        path = settings.output_path("f1_alpine_standings.json")
        path.parent.mkdir(parents=True)
        path.write_text("{broken", encoding="utf-8")
        doc = team_job.run(ctx, get_team("alpine"), now)
        assert doc["sources"]["rosterSource"] == "pinned"
        assert json.loads(path.read_text(encoding="utf-8"))["mode"] == "placeholder"

    def test_outage_keeps_position_history(self, ctx, api, settings, now) -> None:
        write_snapshot(
            settings.output_path("f1_redbull_standings.json"),
            {
                "drivers": [{"code": "VER", "firstName": "Max", "lastName": "Verstappen", "positionNumber": 1}],
                "team": {"teamStanding": {"constructorId": "red_bull", "positionNumber": 2}},
            },
        )
        not_found_everywhere(api)
        outage = team_job.run(ctx, get_team("redbull"), now)
        ver = outage["drivers"][0]
        assert (ver["code"], ver["positionNumber"], ver["previousPositionNumber"]) == ("VER", UNKNOWN, 1)
        assert outage["team"]["teamStanding"]["previousPositionNumber"] == 2

        api.clear()
        _mock_live_upstreams(api)
        recovered = team_job.run(ctx, get_team("redbull"), now + timedelta(minutes=5))
        assert recovered["drivers"][0]["positionDirection"] == "SAME"
        assert recovered["team"]["teamStanding"]["positionDirection"] == "SAME"


class TestLastRaceEnrichment:
    def test_openf1_meeting_added(self, ctx, api, now) -> None:
        api.get(f"{OPENF1_BASE_URL}/sessions").mock(return_value=httpx.Response(200, json=[SAMPLE_SESSION]))
        api.get(f"{OPENF1_BASE_URL}/meetings").mock(return_value=httpx.Response(200, json=[SAMPLE_MEETING]))
        not_found_everywhere(api)

        doc = team_job.run(ctx, get_team("williams"), now)
        assert doc["sources"]["rosterSource"] == "pinned"
        assert [d["lastName"] for d in doc["drivers"]] == ["Albon", "Sainz"]
        openf1 = doc["lastRace"]["openf1"]
        assert openf1["meetingName"] == "Bahrain Grand Prix"
        assert doc["lastRace"]["circuit"]["locality"] == "Sakhir"
        assert doc["lastRace"]["circuit"]["country"] == "Bahrain"

    def test_enrichment_failure_keeps_block(self, ctx, api, now) -> None:
        not_found_everywhere(api)
        doc = team_job.run(ctx, get_team("williams"), now)
        assert "openf1" not in doc["lastRace"]

    @pytest.mark.parametrize("key", ["mclaren", "ferrari", "cadillac"])
    def test_not_enriched_by_default(self, ctx, api, now, key) -> None:
        not_found_everywhere(api)
        assert "openf1" not in team_job.run(ctx, get_team(key), now)["lastRace"]
