"""Upstream data models (OpenF1 and Ergast-compatible)."""

from f1feeds.models.ergast import (
    Circuit,
    ConstructorStanding,
    DriverStanding,
    ErgastConstructor,
    ErgastDriver,
    QualifyingResult,
    Race,
    RaceResult,
    StandingsPage,
)
from f1feeds.models.openf1 import ChampionshipDriver, ChampionshipTeam, Driver, Meeting, Session

__all__ = [
    "ChampionshipDriver",
    "ChampionshipTeam",
    "Circuit",
    "ConstructorStanding",
    "Driver",
    "DriverStanding",
    "ErgastConstructor",
    "ErgastDriver",
    "Meeting",
    "QualifyingResult",
    "Race",
    "RaceResult",
    "Session",
    "StandingsPage",
]
