"""Main CLI entry-point."""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from core.errors import ConfigError
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from domain.enums import Region


def _regions(values: Optional[List[str]]) -> List[Region]:
    if not values or any(v.lower() == "all" for v in values):
        return Region.all_regions()
    regions = []
    for value in values:
        region = Region.parse(value)
        if region is None:
            raise argparse.ArgumentTypeError(f"unknown region: {value}")
        regions.append(region)
    return regions


def _stats_region(value: str) -> str:
    """Stored key for a read-side region argument (``na`` -> ``NA``, ``all`` kept)."""
    if value.strip().lower() == "all":
        return "all"
    region = Region.parse(value)
    if region is None:
        raise argparse.ArgumentTypeError(f"unknown region: {value}")
    return region.value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tft-stats", description="TFT match ingestion and meta statistics")
    sub = parser.add_subparsers(dest="command", required=True)

    refresh = sub.add_parser("refresh", help="fetch matches from the Riot API and rebuild stats")
    refresh.add_argument("-r", "--region", action="append", help="region (repeatable, default all)")
    refresh.add_argument("-n", "--matches", type=int, default=settings.MATCHES_PER_REGION,
                         help="matches to collect per region")

    rebuild = sub.add_parser("rebuild", help="rebuild stats from cached matches only")
    rebuild.add_argument("-r", "--region", action="append", help="region (repeatable, default all)")

    comps = sub.add_parser("comps", help="show the top compositions")
    comps.add_argument("-r", "--region", type=_stats_region, default="all")
    comps.add_argument("-l", "--limit", type=int, default=10)

    combos = sub.add_parser("combos", help="show item combos for a main item")
    combos.add_argument("item_id")
    combos.add_argument("-r", "--region", type=_stats_region, default="all")
    combos.add_argument("-l", "--limit", type=int, default=10)
    return parser


async def _dispatch(args: argparse.Namespace) -> int:
    # Lazy imports here - keeps --help fast and avoids import cycles
    from presentation.cli import RefreshCommand, StatsCommand

    if args.command == "refresh":
        return await RefreshCommand(_regions(args.region), args.matches).run()
    if args.command == "rebuild":
        return await RefreshCommand(_regions(args.region)).rebuild()
    if args.command == "comps":
        return await StatsCommand(args.region, args.limit).comps()
    return await StatsCommand(args.region, args.limit).combos(args.item_id)


def main(argv: list[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    bootstrap_logging(
        service="tft-stats",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="tft-stats.jsonl",
    )
    try:
        return asyncio.run(_dispatch(args))
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130
    finally:
        shutdown_logging()


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
