"""Command line entry point.

Usage:
    f1feeds team williams                # f1_williams_standings.json
    f1feeds driver-standings             # f1_driver_standings.json
    f1feeds constructor-standings        # f1_constructors_standings.json
    f1feeds weekend-results              # f1_results_smart.json
    f1feeds next-race                    # f1_next_race.json
    f1feeds race-window                  # prints the gate, writes $GITHUB_OUTPUT
    f1feeds assets williams              # missing roster headshots
    f1feeds --output-dir site team all   # every team feed
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from f1feeds import __version__
from f1feeds.api_logging import configure_logging
from f1feeds.config import Settings
from f1feeds.jobs import (
    assets,
    constructor_standings,
    driver_standings,
    next_race,
    race_window,
    team,
    weekend_results,
)
from f1feeds.jobs.common import FeedContext, utc_now
from f1feeds.store import dumps
from f1feeds.teams import TEAMS, get_team

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="f1feeds", description="Publish F1 standings and results as JSON")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--output-dir", type=Path, help="Directory for the JSON documents")
    parser.add_argument("--asset-root", type=Path, help="Checkout holding headshots/ and teamlogos/")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    team_parser = sub.add_parser("team", help="Write one team's standings feed")
    team_parser.add_argument("key", choices=[*TEAMS, "all"])
    sub.add_parser("driver-standings", help="Write the driver championship feed")
    sub.add_parser("constructor-standings", help="Write the constructor championship feed")
    sub.add_parser("weekend-results", help="Write the gated weekend results feed")
    sub.add_parser("next-race", help="Write the next race weekend feed")
    sub.add_parser("race-window", help="Report whether now is inside a race weekend")
    assets_parser = sub.add_parser("assets", help="Download missing roster headshots")
    assets_parser.add_argument("key", choices=list(TEAMS))
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    overrides: dict[str, object] = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.asset_root is not None:
        overrides["asset_root"] = args.asset_root
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return dataclasses.replace(base, **overrides) if overrides else base


def dispatch(args: argparse.Namespace, ctx: FeedContext, now: datetime) -> None:
    if args.command == "team":
        keys = list(TEAMS) if args.key == "all" else [args.key]
        for key in keys:
            team.run(ctx, get_team(key), now)
    elif args.command == "driver-standings":
        driver_standings.run(ctx, now)
    elif args.command == "constructor-standings":
        constructor_standings.run(ctx, now)
    elif args.command == "weekend-results":
        weekend_results.run(ctx, now)
    elif args.command == "next-race":
        next_race.run(ctx, now)
    elif args.command == "race-window":
        print(dumps(race_window.run(ctx, now)), end="")
    elif args.command == "assets":
        assets.run(ctx, get_team(args.key))


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args, settings or Settings.from_env())
    configure_logging(getattr(logging, settings.log_level, logging.INFO), settings.log_file)

    try:
        with FeedContext.from_settings(settings) as ctx:
            dispatch(args, ctx, utc_now())
    except Exception:
        logger.exception("f1feeds %s failed", args.command)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
