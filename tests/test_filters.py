"""Tests for the filter builder."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from f1feeds._filters import Filter, build_query_params


class TestFilter:
    def test_gt(self) -> None:
        f = Filter(gt=5)
        assert f.to_params("meeting_key") == [("meeting_key>", "5")]

    def test_lt(self) -> None:
        f = Filter(lt=100)
        assert f.to_params("session_key") == [("session_key<", "100")]

    def test_range(self) -> None:
        f = Filter(gte=5, lte=10)
        params = f.to_params("position_current")
        assert ("position_current>=", "5") in params
        assert ("position_current<=", "10") in params
        assert len(params) == 2

    def test_no_operators(self) -> None:
        f = Filter()
        assert f.to_params("key") == []

    def test_datetime_value(self) -> None:
        f = Filter(lt=datetime(2026, 3, 16, 6, 0, tzinfo=timezone.utc))
        assert f.to_params("date_end") == [("date_end<", "2026-03-16T06:00:00+00:00")]

    def test_frozen(self) -> None:
        """Filter should be immutable."""
        f = Filter(gte=5)
        with pytest.raises(AttributeError):
            f.gte = 10  # type: ignore[misc]


class TestBuildQueryParams:
    def test_simple_equality(self) -> None:
        params = build_query_params(meeting_key="latest", team_name="McLaren")
        assert params == [("meeting_key", "latest"), ("team_name", "McLaren")]

    def test_filter_value(self) -> None:
        params = build_query_params(session_name="Race", date_end=Filter(lt="2026-04-14"))
        assert params == [("session_name", "Race"), ("date_end<", "2026-04-14")]

    def test_list_repeats_key(self) -> None:
        params = build_query_params(driver_number=[1, 6])
        assert params == [("driver_number", "1"), ("driver_number", "6")]

    def test_none_values_skipped(self) -> None:
        params = build_query_params(session_key="latest", driver_number=None)
        assert params == [("session_key", "latest")]

    def test_empty_params(self) -> None:
        assert build_query_params() == []
