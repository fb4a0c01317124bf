"""Per-team configuration for the team feeds and the team-name alias table."""

from __future__ import annotations

from dataclasses import dataclass

from f1feeds.types import RosterEntry


@dataclass(frozen=True)
class TeamConfig:
    """Everything that differs between two team feeds.

    *openf1_team_names* are tried in order as ``team_name`` filter values;
    *constructor_ids* are the Ergast ids the team has raced under, newest first.
    """

    key: str
    display_name: str
    constructor_ids: tuple[str, ...]
    openf1_team_names: tuple[str, ...]
    placeholder_roster: tuple[RosterEntry, ...]
    logo_file: str
    pin_roster: bool = False
    roster_size: int = 2
    enrich_last_race: bool = False

    @property
    def output_file(self) -> str:
        return f"f1_{self.key}_standings.json"

    @property
    def header(self) -> str:
        return f"{self.display_name} standings"


def _roster(team: str, *drivers: tuple[str, str, str, int]) -> tuple[RosterEntry, ...]:
    return tuple(
        RosterEntry(
            first_name=first,
            last_name=last,
            driver_number=number,
            code=code,
            team_display_name=team,
        )
        for first, last, code, number in drivers
    )


_TEAMS = (
    TeamConfig(
        key="mclaren",
        display_name="McLaren",
        constructor_ids=("mclaren",),
        openf1_team_names=("McLaren",),
        placeholder_roster=_roster(
            "McLaren", ("Lando", "Norris", "NOR", 4), ("Oscar", "Piastri", "PIA", 81),
        ),
        logo_file="2025_mclaren_color_v2.png",
    ),
    TeamConfig(
        key="ferrari",
        display_name="Ferrari",
        constructor_ids=("ferrari",),
        openf1_team_names=("Ferrari",),
        placeholder_roster=_roster(
            "Ferrari", ("Charles", "Leclerc", "LEC", 16), ("Lewis", "Hamilton", "HAM", 44),
        ),
        logo_file="2025_ferrari_color_v2.png",
    ),
    TeamConfig(
        key="mercedes",
        display_name="Mercedes",
        constructor_ids=("mercedes",),
        openf1_team_names=("Mercedes",),
        placeholder_roster=_roster(
            "Mercedes", ("George", "Russell", "RUS", 63), ("Andrea", "Antonelli", "ANT", 12),
        ),
        logo_file="2025_mercedes_color_v2.png",
    ),
    TeamConfig(
        key="redbull",
        display_name="Red Bull",
        constructor_ids=("red_bull",),
        openf1_team_names=("Red Bull Racing",),
        placeholder_roster=_roster(
            "Red Bull", ("Max", "Verstappen", "VER", 1), ("Isack", "Hadjar", "HAD", 6),
        ),
        logo_file="redbull_logo.png",
    ),
    TeamConfig(
        key="williams",
        display_name="Williams",
        constructor_ids=("williams",),
        openf1_team_names=("Williams",),
        placeholder_roster=_roster(
            "Williams", ("Alex", "Albon", "ALB", 23), ("Carlos", "Sainz", "SAI", 55),
        ),
        logo_file="2025_williams_color_v2.png",
        pin_roster=True,
        enrich_last_race=True,
    ),
    TeamConfig(
        key="astonmartin",
        display_name="Aston Martin",
        constructor_ids=("aston_martin",),
        openf1_team_names=("Aston Martin",),
        placeholder_roster=_roster(
            "Aston Martin", ("Fernando", "Alonso", "ALO", 14), ("Lance", "Stroll", "STR", 18),
        ),
        logo_file="2025_aston-martin_color_v2.png",
    ),
    TeamConfig(
        key="alpine",
        display_name="Alpine",
        constructor_ids=("alpine",),
        openf1_team_names=("Alpine",),
        placeholder_roster=_roster(
            "Alpine", ("Pierre", "Gasly", "GAS", 10), ("Franco", "Colapinto", "COL", 43),
        ),
        logo_file="2025_alpine_color_v2.png",
        pin_roster=True,
    ),
    TeamConfig(
        key="haas",
        display_name="Haas",
        constructor_ids=("haas",),
        openf1_team_names=("Haas F1 Team",),
        placeholder_roster=_roster(
            "Haas", ("Esteban", "Ocon", "OCO", 31), ("Oliver", "Bearman", "BEA", 87),
        ),
        logo_file="2025_haas_color_v2.png",
    ),
    TeamConfig(
        key="vcarb",
        display_name="Racing Bulls",
        constructor_ids=("rb",),
        openf1_team_names=("Racing Bulls", "RB", "Visa Cash App RB"),
        placeholder_roster=_roster(
            "Racing Bulls", ("Liam", "Lawson", "LAW", 30), ("Arvid", "Lindblad", "LIN", 41),
        ),
        logo_file="2025_racing-bulls_color_v2.png",
    ),
    TeamConfig(
        key="audi",
        display_name="Audi",
        constructor_ids=("audi", "sauber"),
        openf1_team_names=("Audi", "Kick Sauber"),
        placeholder_roster=_roster(
            "Audi", ("Nico", "Hülkenberg", "HUL", 27), ("Gabriel", "Bortoleto", "BOR", 5),
        ),
        logo_file="audi_audi_v1.png",
    ),
    TeamConfig(
        key="cadillac",
        display_name="Cadillac",
        constructor_ids=("cadillac",),
        openf1_team_names=("Cadillac",),
        placeholder_roster=_roster(
            "Cadillac", ("Sergio", "Pérez", "PER", 11), ("Valtteri", "Bottas", "BOT", 77),
        ),
        logo_file="2025_cadillac_color_v2.png",
    ),
)

TEAMS: dict[str, TeamConfig] = {team.key: team for team in _TEAMS}


def get_team(key: str) -> TeamConfig:
    try:
        return TEAMS[key.strip().lower()]
    except KeyError:
        raise KeyError(f"Unknown team {key!r}; expected one of {', '.join(sorted(TEAMS))}") from None


# Upstream team names -> the short name shown in the feeds.
TEAM_NAME_ALIASES: dict[str, str] = {
    "Red Bull Racing": "Red Bull",
    "Oracle Red Bull Racing": "Red Bull",
    "RB": "VCARB",
    "RB F1 Team": "VCARB",
    "Racing Bulls": "VCARB",
    "Visa Cash App RB": "VCARB",
    "Visa Cash App RB F1 Team": "VCARB",
}


def canonical_team_name(name: str | None) -> str | None:
    if not name:
        return None
    return TEAM_NAME_ALIASES.get(name.strip(), name.strip())
