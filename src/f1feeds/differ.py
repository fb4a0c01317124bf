"""Position deltas against the previously published snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

from f1feeds.formatters import UNKNOWN, or_unknown
from f1feeds.types import constructor_entity_key, name_key

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    UP = "UP"
    DOWN = "DOWN"
    SAME = "SAME"
    NEW = "NEW"


ARROWS: dict[Direction, str] = {
    Direction.UP: "^",
    Direction.DOWN: "v",
    Direction.SAME: "-",
    Direction.NEW: "NEW",
}


@dataclass(frozen=True)
class PositionDelta:
    previous_position: int | None
    position_change: int | None
    direction: Direction

    @property
    def arrow(self) -> str:
        return ARROWS[self.direction]

    @property
    def change_text(self) -> str:
        if self.direction is Direction.NEW:
            return "NEW"
        if self.position_change and self.position_change > 0:
            return f"+{self.position_change}"
        return str(self.position_change)

    def to_dict(self) -> dict[str, Any]:
        return {
            "previousPositionNumber": or_unknown(self.previous_position),
            "positionChange": or_unknown(self.position_change),
            "positionDirection": str(self.direction),
            "arrowSymbol": self.arrow,
            "positionChangeText": self.change_text,
        }


def diff_position(current: int | None, previous: int | None) -> PositionDelta:
    """Compare two positions; a positive change means places gained."""
    if previous is None or current is None:
        return PositionDelta(previous, None, Direction.NEW)
    change = previous - current
    if change > 0:
        return PositionDelta(previous, change, Direction.UP)
    if change < 0:
        return PositionDelta(previous, change, Direction.DOWN)
    return PositionDelta(previous, 0, Direction.SAME)


def _as_position(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float) and value.is_integer():
        return int(value) if value >= 1 else None
    if isinstance(value, str):
        text = value.strip().upper().removeprefix("P")
        if text.isdigit() and int(text) >= 1:
            return int(text)
    return None


def row_position(row: Mapping[str, Any]) -> int | None:
    """Position of a snapshot row; a placeholder row falls back to the one it carried."""
    position = _as_position(row.get("positionNumber", row.get("position")))
    if position is None:
        position = _as_position(row.get("previousPositionNumber"))
    return position


def carry_forward(doc: Any, key: str) -> list[dict[str, Any]]:
    """Rows of the previous document re-emitted as placeholders.

    Standings are blanked but each row keeps its last known position in
    ``previousPositionNumber``, so the next live run can still diff against it.
    """
    if not isinstance(doc, dict):
        return []
    carried = []
    for row in doc.get(key) or []:
        if not isinstance(row, dict):
            continue
        last = row_position(row)
        if last is None:
            continue
        carried.append({
            **row,
            "position": UNKNOWN,
            "positionNumber": UNKNOWN,
            "points": UNKNOWN,
            "wins": UNKNOWN,
            "placeholder": True,
            **diff_position(None, last).to_dict(),
        })
    return carried


@dataclass(frozen=True)
class PreviousSnapshot:
    """Read-only position lookup built from the last written document.

    Keys are ``code:<CODE>``, ``name:<first>|<last>`` and ``constructor:<id>``.
    """

    positions: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> PreviousSnapshot:
        return cls({})

    @classmethod
    def from_document(cls, doc: Any) -> PreviousSnapshot:
        """Collect positions from ``drivers``, ``constructors`` and ``team.teamStanding``.

        Driver rows may nest identity under ``driver`` (standings feed) or keep
        it flat (team feeds). Placeholder rows count with the position they
        carried; rows with neither are skipped and a
        document of the wrong shape yields an empty lookup.
        """
        if not isinstance(doc, dict):
            if doc is not None:
                logger.warning("Previous snapshot is not an object; treating every entry as NEW")
            return cls.empty()

        positions: dict[str, int] = {}
        for row in doc.get("drivers") or []:
            if not isinstance(row, dict):
                continue
            position = row_position(row)
            if position is None:
                continue
            ident = row.get("driver") if isinstance(row.get("driver"), dict) else row
            code = ident.get("code")
            first = ident.get("firstName")
            last = ident.get("lastName")
            if isinstance(code, str) and code.strip() and code.strip() != "-":
                positions[f"code:{code.strip().upper()}"] = position
            if isinstance(first, str) and isinstance(last, str) and first and last:
                positions[f"name:{name_key(first, last)}"] = position

        constructor_rows = list(doc.get("constructors") or [])
        team = doc.get("team")
        if isinstance(team, dict) and isinstance(team.get("teamStanding"), dict):
            constructor_rows.append(team["teamStanding"])
        for row in constructor_rows:
            if not isinstance(row, dict):
                continue
            position = row_position(row)
            key = constructor_entity_key(row.get("constructorId"))
            if position is not None and key:
                positions[key] = position
        return cls(positions)

    def __len__(self) -> int:
        return len(self.positions)

    def lookup(
        self, code: str | None, first_name: str | None = None, last_name: str | None = None,
    ) -> int | None:
        """Previous position of a driver: by code first, then by normalized full name."""
        if code and code.strip() and code.strip() != "-":
            found = self.positions.get(f"code:{code.strip().upper()}")
            if found is not None:
                return found
        if first_name and last_name:
            return self.positions.get(f"name:{name_key(first_name, last_name)}")
        return None

    def lookup_constructor(self, constructor_id: str | None) -> int | None:
        key = constructor_entity_key(constructor_id)
        return self.positions.get(key) if key else None
