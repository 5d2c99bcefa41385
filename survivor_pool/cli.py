"""
Command line front end for running a survivor pool from a JSON data file.

Example usage:

    # Create a contest and load the season's schedule from ESPN
    survivor-pool --create-contest "Office Pool" --contest office --load-schedule

    # Score week 4 with the latest ESPN results and print the standings
    survivor-pool --contest office --week 4 --process --standings

    # Save a chart of entries alive per week
    survivor-pool --contest office --plot-survival survival.png
"""

import argparse
import logging
import sys

from .cache import ResultsCache
from .charts import alive_by_week, plot_survival_curve
from .config import load_settings
from .feeds import EspnResultsFeed, scrape_schedule
from .models import LAST_WEEK, Contest, Rejected
from .service import NotFound, process_week, require_contest, season_state
from .standings import leaderboard
from .store import JsonStore

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="NFL survivor pool manager")
    parser.add_argument('--data', help='Path of the JSON data file (default: SURVIVOR_DATA_PATH)')
    parser.add_argument('--contest', help='Contest id to operate on')
    parser.add_argument('--create-contest', metavar='NAME', help='Create the contest given by --contest')
    parser.add_argument('--season', type=int, help='Season year (default: SURVIVOR_SEASON)')
    parser.add_argument('--load-schedule', action='store_true', help='Load all 18 weeks of games from ESPN')
    parser.add_argument('--fftoday', action='store_true', help='Load the schedule from FFToday instead of ESPN')
    parser.add_argument('--week', type=int, help='Week number to process')
    parser.add_argument('--process', action='store_true', help='Fetch results for --week and score picks')
    parser.add_argument('--standings', action='store_true', help='Print the contest leaderboard')
    parser.add_argument('--plot-survival', metavar='PATH', help='Save a chart of entries alive per week')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    season = args.season or settings.season

    store = JsonStore.open(args.data or settings.data_path)
    feed = EspnResultsFeed(
        cache=ResultsCache(ttl=settings.cache_ttl, max_entries=settings.cache_size),
        base_url=settings.espn_base_url,
        timeout=settings.http_timeout,
    )

    if args.create_contest:
        if not args.contest:
            print("--create-contest needs --contest", file=sys.stderr)
            return 2
        store.save_contest(Contest(contest_id=args.contest, name=args.create_contest, season=season))
        store.save()
        print(f"Created contest {args.contest} ({args.create_contest}, season {season})")

    if args.load_schedule:
        if args.fftoday:
            games = scrape_schedule(season, timeout=settings.http_timeout)
        else:
            games = [g for week in range(1, LAST_WEEK + 1) for g in feed.fetch_week(season, week)]
        store.upsert_games(games)
        store.save()
        print(f"Loaded {len(games)} games for season {season}")

    if not args.contest:
        return 0

    try:
        require_contest(store, args.contest)
        if args.process:
            if args.week is None:
                print("--process needs --week", file=sys.stderr)
                return 2
            summary = process_week(store, args.contest, args.week, feed=feed, refresh=True)
            if isinstance(summary, Rejected):
                print(f"Week {args.week} not processed: {summary.detail}", file=sys.stderr)
                return 1
            print(f"Week {args.week}: {summary['survived']} survived, {summary['eliminated']} eliminated, "
                  f"{summary['pending']} pending, {summary['remaining']} remaining "
                  f"(contest {summary['contest_status']})")

        if args.standings:
            rows = leaderboard(store.entries_for_contest(args.contest), season_state(store, args.contest))
            print("\nRank  Entry                             Status      Weeks  Out")
            for row in rows:
                out = row['eliminated_week'] or ''
                print(f"{row['rank']:4d}  {row['entry_id']:32s}  {row['status']:10s}  {row['weeks_survived']:5d}  {out}")

        if args.plot_survival:
            counts = alive_by_week(
                store.entries_for_contest(args.contest),
                store.picks_for_contest(args.contest),
                store.outcomes_for_contest(args.contest),
                range(1, (args.week or LAST_WEEK) + 1),
            )
            print(f"Saved survival curve to {plot_survival_curve(counts, args.plot_survival)}")
    except NotFound as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
