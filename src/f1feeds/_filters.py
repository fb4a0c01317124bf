"""Query parameter builder for OpenF1 comparison filters."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

type FilterValue = int | float | str | datetime | None


def _encode(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class Filter:
    """A comparison filter on one OpenF1 query field.

    Usage:
        # Race sessions that already finished
        Filter(lt=now)  # produces: date_end<2025-03-16T06:00:00+00:00

        # Range filter
        Filter(gte=5, lte=10)  # produces: param>=5&param<=10
    """

    gt: FilterValue = None
    gte: FilterValue = None
    lt: FilterValue = None
    lte: FilterValue = None

    def to_params(self, key: str) -> list[tuple[str, str]]:
        """Convert this filter to a list of (key_with_operator, value) pairs."""
        operators = ((">", self.gt), (">=", self.gte), ("<", self.lt), ("<=", self.lte))
        return [(f"{key}{op}", _encode(value)) for op, value in operators if value is not None]


def build_query_params(**kwargs: Any) -> list[tuple[str, str]]:
    """Build a list of query parameter tuples from keyword arguments.

    Plain values become equality filters, lists and tuples repeat the key
    (``driver_number=[1, 4]`` → ``driver_number=1&driver_number=4``) and
    Filter instances become comparison operators. None values are skipped.
    """
    params: list[tuple[str, str]] = []
    for key, value in kwargs.items():
        if value is None:
            continue
        if isinstance(value, Filter):
            params.extend(value.to_params(key))
        elif isinstance(value, (list, tuple)):
            params.extend((key, _encode(v)) for v in value)
        else:
            params.append((key, _encode(value)))
    return params
