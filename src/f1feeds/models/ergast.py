"""Ergast-compatible (Jolpica) response models.

Ergast wraps everything in ``MRData`` and uses camelCase keys with
string-typed numbers; the aliases below map those onto snake_case fields
and pydantic's lax mode coerces ``"25"`` to ``25``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ErgastModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ErgastDriver(_ErgastModel):
    code: str | None = None
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    driver_id: str | None = Field(default=None, alias="driverId")
    family_name: str | None = Field(default=None, alias="familyName")
    given_name: str | None = Field(default=None, alias="givenName")
    nationality: str | None = None
    permanent_number: int | None = Field(default=None, alias="permanentNumber")


class ErgastConstructor(_ErgastModel):
    constructor_id: str | None = Field(default=None, alias="constructorId")
    name: str | None = None
    nationality: str | None = None


class DriverStanding(_ErgastModel):
    """One row of ``StandingsLists[0].DriverStandings``."""

    constructors: list[ErgastConstructor] = Field(default_factory=list, alias="Constructors")
    driver: ErgastDriver = Field(alias="Driver")
    points: float | None = None
    position: int | None = None
    wins: int | None = None


class ConstructorStanding(_ErgastModel):
    """One row of ``StandingsLists[0].ConstructorStandings``."""

    constructor: ErgastConstructor = Field(alias="Constructor")
    points: float | None = None
    position: int | None = None
    wins: int | None = None


class Location(_ErgastModel):
    country: str | None = None
    locality: str | None = None


class Circuit(_ErgastModel):
    circuit_id: str | None = Field(default=None, alias="circuitId")
    circuit_name: str | None = Field(default=None, alias="circuitName")
    location: Location | None = Field(default=None, alias="Location")


class ResultTime(_ErgastModel):
    millis: int | None = None
    time: str | None = None


class RaceResult(_ErgastModel):
    constructor: ErgastConstructor | None = Field(default=None, alias="Constructor")
    driver: ErgastDriver = Field(alias="Driver")
    grid: int | None = None
    laps: int | None = None
    points: float | None = None
    position: int | None = None
    status: str | None = None
    time: ResultTime | None = Field(default=None, alias="Time")


class QualifyingResult(_ErgastModel):
    constructor: ErgastConstructor | None = Field(default=None, alias="Constructor")
    driver: ErgastDriver = Field(alias="Driver")
    position: int | None = None
    q1: str | None = Field(default=None, alias="Q1")
    q2: str | None = Field(default=None, alias="Q2")
    q3: str | None = Field(default=None, alias="Q3")


class Race(_ErgastModel):
    """A race weekend from ``RaceTable.Races``, with results when requested."""

    circuit: Circuit | None = Field(default=None, alias="Circuit")
    date: str | None = None
    qualifying_results: list[QualifyingResult] = Field(
        default_factory=list, alias="QualifyingResults",
    )
    race_name: str | None = Field(default=None, alias="raceName")
    results: list[RaceResult] = Field(default_factory=list, alias="Results")
    round: int | None = None
    season: str | None = None
    time: str | None = None


class StandingsPage(_ErgastModel):
    """Flattened ``MRData.StandingsTable`` for one season."""

    constructor_standings: list[ConstructorStanding] = Field(default_factory=list)
    driver_standings: list[DriverStanding] = Field(default_factory=list)
    round: int | None = None
    season: str | None = None
