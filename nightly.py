#!/usr/bin/env python3
"""
Sparky Nightly Analysis CLI

Builds the nightly recap for one scored date from the daily score store:
per-team stats, day and season rankings, and 1-2 narrative lines per team.
Daily scores come from data/daily/YYYY-MM-DD.json

Usage:
    python nightly.py --date 2026-01-25
    python nightly.py --date 2026-01-25 --output data/analysis/2026-01-25.json
    python nightly.py --no-archive --workers 6
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from sparky import (
    DailyScoreStore,
    HistoricalArchive,
    analysis_to_dict,
    build_footer_text,
    build_header_text,
    build_nightly_analysis,
    get_config,
    get_logger,
    get_period_for_date,
    save_analysis,
    setup_logging,
    validate_analysis,
)
from sparky.config import LEAGUE_TIMEZONE


def main():
    parser = argparse.ArgumentParser(description="Sparky nightly fantasy hockey analysis")
    parser.add_argument(
        "--date", "-D",
        default=None,
        help="Date to analyse, YYYY-MM-DD (defaults to today, league time)",
    )
    parser.add_argument(
        "--data-dir", "-d",
        default=None,
        help="Directory of daily score files (defaults to the configured daily_dir)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output path for the analysis JSON (defaults to data/analysis/{date}.json)",
    )
    parser.add_argument(
        "--no-archive",
        action="store_true",
        help="Skip historical-archive narratives",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=1,
        help="Worker threads for per-team analysis",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress detailed output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log narrative candidates and scores",
    )

    args = parser.parse_args()

    day = date.fromisoformat(args.date) if args.date else datetime.now(LEAGUE_TIMEZONE).date()
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    setup_logging(day, level=level)
    logger = get_logger("cli")

    config = get_config()

    period = get_period_for_date(day)
    if period is None:
        logger.error(f"{day} is outside every scoring period")
        print(f"❌ {day} is not in a scoring period (break or off-season)")
        sys.exit(1)

    store = DailyScoreStore(args.data_dir)
    record = store.load(day)
    if record is None:
        logger.error(f"No daily record for {day} in {store.daily_dir}")
        print(f"❌ No daily scores found for {day}: {store.path_for(day)}")
        sys.exit(1)

    if not record.has_games:
        print(f"⚠️  No games on {day} (all teams scored 0). Nothing to post.")
        sys.exit(0)

    archive = None if args.no_archive else HistoricalArchive.from_settings(config.historical)

    if not args.quiet:
        print(f"Analysing {day} (P{period})...")

    analysis = build_nightly_analysis(
        record,
        store=store,
        archive=archive,
        season=config.season,
        narrative_limit=config.narrative_limit,
        max_workers=max(args.workers, 1),
    )

    for error in validate_analysis(analysis):
        logger.warning(error)

    if not args.quiet:
        payload = analysis_to_dict(analysis)
        print("\n" + "=" * 60)
        print(build_header_text(analysis))
        print("=" * 60)
        for team in payload['teams']:
            print(f"  {team['dayRank']}. {team['name']}: {team['dayPts']:g} pts "
                  f"(season #{team['seasonRank']}, {team['seasonPts']:g} pts)")
            for line in team['streaks']:
                print(f"       {line}")
        footer = build_footer_text(analysis)
        if footer:
            print("\n" + footer)

    output_path = Path(args.output) if args.output else Path("data/analysis") / f"{day.isoformat()}.json"
    save_analysis(analysis, output_path)
    print(f"Analysis saved: {output_path}")


if __name__ == "__main__":
    main()
