"""Race-weekend gate for the scheduler.

Ergast only publishes the race date and time, so the window is fixed
around it: Friday 00:00 UTC of race week until Monday 06:00 UTC after.
The gate fails safe: any error means ``in_window=false``.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any

from f1feeds.clients.ergast import NEXT_RACE_PATHS
from f1feeds.exceptions import ResolverExhaustedError
from f1feeds.jobs.common import FeedContext, iso_utc
from f1feeds.models.ergast import Race
from f1feeds.resolver import Candidate, MultiSourceResolver

logger = logging.getLogger(__name__)

FRIDAY = 4
WINDOW_END_OFFSET = timedelta(days=3, hours=6)


def next_race_candidates(ctx: FeedContext) -> list[Candidate[list[Race]]]:
    """Both paths on the primary host, then both on the mirror."""
    return [
        Candidate(
            label=f"{client.base_url}{path}",
            fetch=lambda c=client, p=path: [r for r in c.races(p)[:1] if r.date],
        )
        for client in ctx.ergast.clients
        for path in NEXT_RACE_PATHS
    ]


def race_datetime(race: Race) -> datetime | None:
    """Race start in UTC; midnight when Ergast has no time yet."""
    if not race.date:
        return None
    try:
        parsed = datetime.fromisoformat(f"{race.date}T{race.time or '00:00:00Z'}")
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def weekend_bounds(race_start: datetime) -> tuple[datetime, datetime]:
    """Friday 00:00 UTC of race week and Monday 06:00 UTC after it."""
    race_day = datetime.combine(race_start.date(), time(0), tzinfo=timezone.utc)
    friday = race_day - timedelta(days=(race_day.weekday() - FRIDAY) % 7)
    return friday, friday + WINDOW_END_OFFSET


def build_race_window(race: Race | None, url_used: str | None, now: datetime) -> dict[str, Any]:
    out: dict[str, Any] = {
        "nowUtc": iso_utc(now),
        "urlUsed": url_used,
        "inWindow": False,
        "windowStartUtc": None,
        "windowEndUtc": None,
        "nextRace": None,
        "reason": None,
    }
    if race is None:
        out["reason"] = "No next race found (feed empty/unavailable)."
        return out

    race_start = race_datetime(race)
    if race_start is None:
        out["reason"] = "Next race date/time invalid."
        out["nextRace"] = {"raceName": race.race_name, "date": race.date, "time": race.time}
        return out

    start, end = weekend_bounds(race_start)
    out["windowStartUtc"] = iso_utc(start)
    out["windowEndUtc"] = iso_utc(end)
    out["nextRace"] = {
        "season": race.season,
        "round": str(race.round) if race.round is not None else None,
        "raceName": race.race_name,
        "date": race.date,
        "timeUtc": race.time,
    }
    out["inWindow"] = start <= now <= end
    out["reason"] = "Within race weekend window." if out["inWindow"] else "Outside race weekend window."
    return out


def github_output_lines(doc: dict[str, Any]) -> list[str]:
    next_race = doc.get("nextRace") or {}
    return [
        f"in_window={'true' if doc['inWindow'] else 'false'}",
        f"window_start={doc['windowStartUtc'] or ''}",
        f"window_end={doc['windowEndUtc'] or ''}",
        f"next_race={next_race.get('raceName') or ''}",
    ]


def append_github_output(path: str | Path, lines: list[str]) -> None:
    with open(path, "a", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")


def evaluate(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    try:
        resolution = MultiSourceResolver("next race").resolve(next_race_candidates(ctx))
    except ResolverExhaustedError as exc:
        logger.warning("Next race unavailable: %s", exc)
        return build_race_window(None, None, now)
    return build_race_window(resolution.payload[0], resolution.label, now)


def run(ctx: FeedContext, now: datetime) -> dict[str, Any]:
    """Evaluate the window and publish it; never raises."""
    output = ctx.settings.github_output
    try:
        doc = evaluate(ctx, now)
    except Exception:
        logger.exception("Race window check failed; reporting out of window")
        if output:
            append_github_output(output, ["in_window=false"])
        return {"nowUtc": iso_utc(now), "inWindow": False, "reason": "Gate error."}

    if output:
        append_github_output(output, github_output_lines(doc))
    logger.info("Race window: %s", doc["reason"])
    return doc
