"""Headshot download for one team's roster.

Headshots already under ``headshots/`` are left alone; missing ones are
fetched from the OpenF1 ``headshot_url`` of the matching driver and stored
as PNG so the feeds can point at them.
"""

from __future__ import annotations

import logging
from typing import Any

from f1feeds.assets import fetch_png
from f1feeds.exceptions import AssetError, SourceError
from f1feeds.formatters import UNKNOWN
from f1feeds.jobs.common import FeedContext
from f1feeds.jobs.team import resolve_roster
from f1feeds.matcher import EntityMatcher
from f1feeds.models.openf1 import Driver
from f1feeds.teams import TeamConfig
from f1feeds.types import identity_of_openf1

logger = logging.getLogger(__name__)


def latest_drivers(ctx: FeedContext) -> list[Driver]:
    try:
        return ctx.openf1.drivers(session_key="latest")
    except SourceError as exc:
        logger.warning("OpenF1 drivers unavailable, no headshots can be fetched: %s", exc)
        return []


def run(ctx: FeedContext, team: TeamConfig) -> dict[str, Any]:
    roster = resolve_roster(ctx, team)
    matcher: EntityMatcher[Driver] | None = None
    summary: dict[str, Any] = {"team": team.key, "downloaded": [], "present": [], "missing": [], "failed": []}

    for entry in roster.entries:
        if UNKNOWN in (entry.first_name, entry.last_name):
            continue
        dest = ctx.locator.headshot_path(entry.first_name, entry.last_name)
        if dest is None:
            continue
        if dest.is_file():
            summary["present"].append(dest.name)
            continue

        if matcher is None:
            matcher = EntityMatcher(latest_drivers(ctx), identity_of_openf1)
        meta = matcher.match(entry.identity)
        if meta is None or not meta.headshot_url:
            logger.warning("No OpenF1 headshot for %s %s", entry.first_name, entry.last_name)
            summary["missing"].append(dest.name)
            continue

        try:
            fetch_png(ctx.transport, meta.headshot_url, dest)
        except AssetError as exc:
            logger.warning("Headshot for %s %s not saved: %s", entry.first_name, entry.last_name, exc)
            summary["failed"].append(dest.name)
            continue
        summary["downloaded"].append(dest.name)

    logger.info(
        "%s headshots: %d downloaded, %d present, %d missing, %d failed",
        team.display_name, len(summary["downloaded"]), len(summary["present"]),
        len(summary["missing"]), len(summary["failed"]),
    )
    return summary
