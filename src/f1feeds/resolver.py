"""Ordered multi-source fallback.

A resolver walks a list of candidates (different hosts, seasons or filter
spellings of the same request) and returns the first usable payload. A
candidate is usable when its request succeeded, the payload decoded and
validated, and it is not empty. Every failure is recorded so that total
exhaustion can report what was tried.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sized
from dataclasses import dataclass, field
from typing import Callable

from f1feeds.exceptions import EmptyResultError, ResolverExhaustedError, SourceError

logger = logging.getLogger(__name__)


def payload_is_empty(payload: object) -> bool:
    """Default emptiness check: None or a zero-length container."""
    if payload is None:
        return True
    if isinstance(payload, (str, bytes)):
        return False
    return isinstance(payload, Sized) and len(payload) == 0


@dataclass(frozen=True)
class Candidate[T]:
    """One fully specified attempt against one source variant."""

    label: str
    fetch: Callable[[], T]
    is_empty: Callable[[T], bool] = payload_is_empty

    def map[U](self, transform: Callable[[T], U]) -> Candidate[U]:
        """Same source with the payload passed through *transform*.

        Emptiness is judged on the transformed payload.
        """
        return Candidate(self.label, lambda: transform(self.fetch()))


@dataclass(frozen=True)
class Attempt:
    """Outcome of one candidate, kept for provenance."""

    label: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Resolution[T]:
    """The winning payload and how it was obtained."""

    payload: T
    label: str
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def urls_tried(self) -> list[str]:
        return [a.label for a in self.attempts]


class MultiSourceResolver:
    """Try candidates strictly in order and return the first usable payload.

    Usage:
        resolver = MultiSourceResolver("driver standings")
        result = resolver.resolve([
            Candidate("jolpica", lambda: jolpica.standings("/current/driverStandings.json")),
            Candidate("ergast", lambda: ergast.standings("/current/driverStandings.json")),
        ])
        result.payload, result.label

    Only :class:`SourceError` counts as a candidate failure; anything else
    is a bug and propagates to the caller.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def resolve[T](self, candidates: Iterable[Candidate[T]]) -> Resolution[T]:
        attempts: list[Attempt] = []
        for candidate in candidates:
            try:
                payload = candidate.fetch()
                if candidate.is_empty(payload):
                    raise EmptyResultError(f"Fetched but empty result from {candidate.label}")
            except SourceError as exc:
                attempts.append(Attempt(candidate.label, f"{type(exc).__name__}: {exc}"))
                logger.debug("%s: candidate %s failed: %s", self.name, candidate.label, exc)
                continue

            attempts.append(Attempt(candidate.label))
            if len(attempts) > 1:
                logger.info(
                    "%s: resolved by fallback candidate %s after %d failures",
                    self.name, candidate.label, len(attempts) - 1,
                )
            return Resolution(payload=payload, label=candidate.label, attempts=attempts)

        raise ResolverExhaustedError(attempts)
