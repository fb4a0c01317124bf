"""Normalized records shared by the jobs, independent of the upstream they came from."""

from __future__ import annotations

from dataclasses import dataclass

from f1feeds.formatters import UNKNOWN, normalize_name, slugify
from f1feeds.models.ergast import ConstructorStanding, DriverStanding
from f1feeds.models.openf1 import ChampionshipDriver, ChampionshipTeam, Driver


def name_key(first_name: str | None, last_name: str | None) -> str:
    return f"{normalize_name(first_name)}|{normalize_name(last_name)}"


def driver_entity_key(
    code: str | None, first_name: str | None = None, last_name: str | None = None,
) -> str | None:
    """Stable join key for a driver: the code when present, else the normalized name."""
    if code:
        return f"code:{code.strip().upper()}"
    if first_name and last_name:
        return f"name:{name_key(first_name, last_name)}"
    return None


def constructor_entity_key(constructor_id: str | None) -> str | None:
    if not constructor_id:
        return None
    return f"constructor:{constructor_id.strip().lower()}"


def derive_code(last_name: str | None) -> str:
    """Three-letter acronym from the family name when the source has none."""
    letters = slugify(last_name).replace("-", "")
    return letters[:3].upper() if letters else UNKNOWN


@dataclass(frozen=True)
class Identity:
    """The fields EntityMatcher can join on."""

    first_name: str | None = None
    last_name: str | None = None
    code: str | None = None
    driver_number: int | None = None


@dataclass(frozen=True)
class StandingsRow:
    """One driver's or constructor's championship record from a single response."""

    entity_key: str
    position: int | None = None
    points: float | None = None
    wins: int | None = None
    code: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    driver_number: int | None = None
    nationality: str | None = None
    constructor_id: str | None = None
    constructor_name: str | None = None
    constructor_nationality: str | None = None

    @property
    def identity(self) -> Identity:
        # Ergast permanent numbers are not car numbers; only OpenF1 rows join by number.
        number = self.driver_number if self.entity_key.startswith("number:") else None
        return Identity(self.first_name, self.last_name, self.code, number)

    @classmethod
    def from_ergast_driver(cls, row: DriverStanding) -> StandingsRow:
        driver = row.driver
        constructor = row.constructors[0] if row.constructors else None
        key = (
            driver_entity_key(driver.code, driver.given_name, driver.family_name)
            or f"driver:{driver.driver_id}"
        )
        return cls(
            entity_key=key,
            position=row.position,
            points=row.points,
            wins=row.wins,
            code=driver.code,
            first_name=driver.given_name,
            last_name=driver.family_name,
            driver_number=driver.permanent_number,
            nationality=driver.nationality,
            constructor_id=constructor.constructor_id if constructor else None,
            constructor_name=constructor.name if constructor else None,
            constructor_nationality=constructor.nationality if constructor else None,
        )

    @classmethod
    def from_ergast_constructor(cls, row: ConstructorStanding) -> StandingsRow:
        constructor = row.constructor
        return cls(
            entity_key=constructor_entity_key(constructor.constructor_id) or f"constructor:{constructor.name}",
            position=row.position,
            points=row.points,
            wins=row.wins,
            constructor_id=constructor.constructor_id,
            constructor_name=constructor.name,
            constructor_nationality=constructor.nationality,
        )

    @classmethod
    def from_openf1_driver(cls, row: ChampionshipDriver) -> StandingsRow:
        # OpenF1 championship rows carry only the car number; wins are not published.
        return cls(
            entity_key=f"number:{row.driver_number}",
            position=row.position_current,
            points=row.points_current,
            driver_number=row.driver_number,
        )

    @classmethod
    def from_openf1_team(cls, row: ChampionshipTeam) -> StandingsRow:
        return cls(
            entity_key=f"team:{normalize_name(row.team_name)}",
            position=row.position_current,
            points=row.points_current,
            constructor_name=row.team_name,
        )


@dataclass(frozen=True)
class RosterEntry:
    """One driver of one team for the current run."""

    first_name: str
    last_name: str
    driver_number: int | None
    code: str
    team_display_name: str
    from_live_source: bool = False

    @property
    def identity(self) -> Identity:
        code = self.code if self.code != UNKNOWN else None
        return Identity(self.first_name, self.last_name, code, self.driver_number)

    @property
    def entity_key(self) -> str | None:
        code = self.code if self.code != UNKNOWN else None
        return driver_entity_key(code, self.first_name, self.last_name)

    @classmethod
    def from_openf1(cls, driver: Driver, team_display_name: str) -> RosterEntry:
        code = (driver.name_acronym or "").strip().upper() or derive_code(driver.last_name)
        return cls(
            first_name=driver.first_name or UNKNOWN,
            last_name=driver.last_name or UNKNOWN,
            driver_number=driver.driver_number,
            code=code,
            team_display_name=team_display_name,
            from_live_source=True,
        )


def identity_of_openf1(driver: Driver) -> Identity:
    return Identity(
        first_name=driver.first_name,
        last_name=driver.last_name,
        code=driver.name_acronym,
        driver_number=driver.driver_number,
    )
