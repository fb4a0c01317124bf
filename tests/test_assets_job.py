"""Tests for the roster headshot download job."""

from __future__ import annotations

import io

import httpx
from PIL import Image

from f1feeds.clients.openf1 import OPENF1_BASE_URL
from f1feeds.jobs import assets
from f1feeds.teams import get_team
from tests.conftest import SAMPLE_DRIVER, SAMPLE_DRIVER_HAD, not_found_everywhere


def _jpeg_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (30, 65, 255)).save(buffer, format="JPEG")
    return buffer.getvalue()


class TestHeadshotJob:
    def test_downloads_and_reports_failures(self, ctx, api, settings) -> None:
        api.get(f"{OPENF1_BASE_URL}/drivers").mock(
            return_value=httpx.Response(200, json=[SAMPLE_DRIVER, SAMPLE_DRIVER_HAD])
        )
        api.get("https://media.test/ver.png").mock(
            return_value=httpx.Response(200, content=_jpeg_bytes())
        )
        not_found_everywhere(api)

        summary = assets.run(ctx, get_team("redbull"))

        assert summary["downloaded"] == ["max-verstappen.png"]
        assert summary["failed"] == ["isack-hadjar.png"]
        saved = settings.asset_root / "headshots" / "max-verstappen.png"
        assert saved.read_bytes().startswith(b"\x89PNG")

    def test_existing_files_left_alone(self, ctx, api, settings) -> None:
        headshots = settings.asset_root / "headshots"
        headshots.mkdir(parents=True)
        (headshots / "max-verstappen.png").write_bytes(b"already here")
        api.get(f"{OPENF1_BASE_URL}/drivers").mock(
            return_value=httpx.Response(200, json=[SAMPLE_DRIVER, {**SAMPLE_DRIVER_HAD, "headshot_url": None}])
        )
        not_found_everywhere(api)

        summary = assets.run(ctx, get_team("redbull"))

        assert summary["present"] == ["max-verstappen.png"]
        assert summary["missing"] == ["isack-hadjar.png"]
        assert summary["downloaded"] == []
        assert (headshots / "max-verstappen.png").read_bytes() == b"already here"

    def test_pinned_roster_without_openf1(self, ctx, api) -> None:
        not_found_everywhere(api)
        summary = assets.run(ctx, get_team("williams"))
        assert summary["team"] == "williams"
        assert len(summary["missing"]) == 2
        assert summary["downloaded"] == []
