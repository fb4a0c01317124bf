"""OpenF1 rows used by the feeds: drivers, sessions, meetings and championships.

Only the fields the jobs read are declared; OpenF1 adds columns freely and
pydantic ignores the rest.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class _OpenF1Model(BaseModel):
    model_config = ConfigDict(frozen=True)


class Driver(_OpenF1Model):
    """One driver row of a session or meeting; source of numbers, headshots and colours."""

    driver_number: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    name_acronym: str | None = None
    headshot_url: str | None = None
    team_name: str | None = None
    team_colour: str | None = None
    meeting_key: int | None = None
    session_key: int | None = None


class Session(_OpenF1Model):
    circuit_short_name: str | None = None
    country_name: str | None = None
    date_start: datetime | None = None
    date_end: datetime | None = None
    location: str | None = None
    meeting_key: int | None = None
    session_key: int | None = None
    session_name: str | None = None

    @property
    def finished_at(self) -> datetime | None:
        """End of the session, or its start when OpenF1 has no end yet."""
        return self.date_end or self.date_start


class Meeting(_OpenF1Model):
    circuit_short_name: str | None = None
    country_name: str | None = None
    location: str | None = None
    meeting_key: int | None = None
    meeting_name: str | None = None


class ChampionshipDriver(_OpenF1Model):
    """Drivers' championship after a race session, keyed by car number only."""

    driver_number: int | None = None
    points_current: float | None = None
    position_current: int | None = None
    session_key: int | None = None


class ChampionshipTeam(_OpenF1Model):
    points_current: float | None = None
    position_current: int | None = None
    session_key: int | None = None
    team_name: str | None = None
