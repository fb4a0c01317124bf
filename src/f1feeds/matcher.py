"""Join driver records across sources that spell drivers differently.

Every exact key (full name, three-letter code, car number) has the same
weight. A wanted identity matches when those keys point at exactly one
row; when they point at different rows the match is refused. Only without
any exact hit is the family name consulted, and only a unique family name
matches.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Iterable

from f1feeds.formatters import normalize_name
from f1feeds.types import Identity

logger = logging.getLogger(__name__)


def _code(value: str | None) -> str:
    return (value or "").strip().upper()


def _full_name(identity: Identity) -> str | None:
    first = normalize_name(identity.first_name)
    last = normalize_name(identity.last_name)
    if not first or not last:
        return None
    return f"{first}|{last}"


class EntityMatcher[T]:
    """Index a list of rows once and match wanted identities against it.

    Usage:
        matcher = EntityMatcher(openf1_drivers, identity_of_openf1)
        meta = matcher.match(Identity("Max", "Verstappen", "VER"))
    """

    def __init__(self, rows: Iterable[T], identify: Callable[[T], Identity]) -> None:
        self.rows = list(rows)
        self._by_name: dict[str, set[int]] = defaultdict(set)
        self._by_code: dict[str, set[int]] = defaultdict(set)
        self._by_number: dict[int, set[int]] = defaultdict(set)
        self._by_family: dict[str, set[int]] = defaultdict(set)

        for index, row in enumerate(self.rows):
            identity = identify(row)
            if name := _full_name(identity):
                self._by_name[name].add(index)
            if code := _code(identity.code):
                self._by_code[code].add(index)
            if identity.driver_number is not None:
                self._by_number[identity.driver_number].add(index)
            if family := normalize_name(identity.last_name):
                self._by_family[family].add(index)

    def __len__(self) -> int:
        return len(self.rows)

    def _exact_hits(self, wanted: Identity) -> set[int]:
        hits: set[int] = set()
        if name := _full_name(wanted):
            hits |= self._by_name.get(name, set())
        if code := _code(wanted.code):
            hits |= self._by_code.get(code, set())
        if wanted.driver_number is not None:
            hits |= self._by_number.get(wanted.driver_number, set())
        return hits

    def match(self, wanted: Identity) -> T | None:
        """Return the single row *wanted* identifies, or None when absent or ambiguous."""
        hits = self._exact_hits(wanted)
        if len(hits) == 1:
            return self.rows[hits.pop()]
        if hits:
            logger.debug("Refusing ambiguous exact match for %s: %d rows", wanted, len(hits))
            return None

        family = normalize_name(wanted.last_name)
        if not family:
            return None
        candidates = self._by_family.get(family, set())
        if len(candidates) == 1:
            return self.rows[next(iter(candidates))]
        if candidates:
            logger.debug("Refusing ambiguous family-name match for %r: %d rows", family, len(candidates))
        return None
