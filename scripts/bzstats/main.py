"""Pipeline orchestration — build_and_write_all and main entry point."""

import logging
import sys
from collections import defaultdict
from datetime import datetime, timezone

from bzstats import aggregation
from bzstats.cleaning import normalize_document
from bzstats.constants import (
    BARE_TIME_UNIT, BARE_TIME_UNITS, DATA_DIR, DATA_URL, DEFAULT_MIN_GAMES,
    DEFAULT_RANKING_METHOD,
)
from bzstats.errors import LoadError
from bzstats.filtering import (
    available_periods, filter_games_by_dimension, filter_games_by_period, filter_options,
)
from bzstats.io_helpers import load_document, write_json
from bzstats.ranking import normalize_ranking_method, resolve_min_games
from bzstats.roles import classify_player_games
from bzstats.session import faction_charts, map_charts, overview_charts, player_charts


def build_and_write_all(dataset, ranking_method=DEFAULT_RANKING_METHOD,
                        min_games=DEFAULT_MIN_GAMES, players=(), data_dir=DATA_DIR):
    """Run all aggregations for each time period and write JSON files.

    Output nesting: overview[period], maps[period][map], factions[period][faction],
    players[period][player].
    """
    games = dataset.games
    periods = ["all"] + [str(year) for year in available_periods(games)]
    all_maps = filter_options(games, "map")
    all_factions = filter_options(games, "faction")

    out = {
        "metadata": {},
        "overview": {},
        "maps": {},
        "factions": {},
        "players": {},
    }

    for period in periods:
        period_games = filter_games_by_period(games, period)
        print(f"  Period '{period}': {len(period_games)} games")

        out["metadata"][period] = {
            "last_updated": dataset.last_updated,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "total_matches": len(period_games),
            "periods": periods,
            "maps": all_maps,
            "factions": all_factions,
            "data_version": "1.0.0",
        }

        out["overview"][period] = {
            "summary": aggregation.aggregate_summary(period_games),
            "charts": overview_charts(period_games, ranking_method, min_games),
        }

        out["maps"][period] = {}
        for map_name in all_maps:
            map_games = filter_games_by_dimension(period_games, "map", map_name)
            out["maps"][period][map_name] = {
                "summary": aggregation.aggregate_summary(map_games),
                "charts": map_charts(map_games, map_name),
            }

        out["factions"][period] = {}
        for faction in all_factions:
            faction_games = filter_games_by_dimension(period_games, "faction", faction)
            out["factions"][period][faction] = {
                "summary": aggregation.aggregate_summary(faction_games),
                "charts": faction_charts(faction_games, faction),
            }

        out["players"][period] = {}
        for player in players:
            player_games = filter_games_by_dimension(period_games, "player", player)
            print(f"    Player '{player}': {len(player_games)} games")
            out["players"][period][player] = {
                "summary": aggregation.aggregate_player_summary(
                    classify_player_games(player_games, player)),
                "charts": player_charts(player_games, player),
            }

    write_json("metadata.json", out["metadata"], data_dir=data_dir)
    write_json("overview.json", out["overview"], data_dir=data_dir)
    write_json("maps.json", out["maps"], compact=True, data_dir=data_dir)
    write_json("factions.json", out["factions"], compact=True, data_dir=data_dir)
    if players:
        write_json("players.json", out["players"], compact=True, data_dir=data_dir)
    return out


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description="Battlezone Combat Commander Strategy Statistics")
    parser.add_argument("--source", default=DATA_URL,
                        help="Export location: http(s) URL, s3://bucket/key or local path")
    parser.add_argument("--output", default=str(DATA_DIR),
                        help="Directory for the generated JSON files")
    parser.add_argument("--player", action="append", default=[],
                        help="Also write a breakdown for this player (repeatable)")
    parser.add_argument("--ranking", default=DEFAULT_RANKING_METHOD,
                        help="Commander ranking method")
    parser.add_argument("--min-games", default=DEFAULT_MIN_GAMES,
                        help="Minimum games to rank a commander: '3%%' or a count")
    parser.add_argument("--bare-time-unit", default=BARE_TIME_UNIT, choices=BARE_TIME_UNITS,
                        help="How a bare number in the time field is read")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ranking = normalize_ranking_method(args.ranking)
        resolve_min_games(args.min_games, 0)
    except ValueError as e:
        parser.error(str(e))

    print("Battlezone Combat Commander Strategy Statistics")
    print("=" * 50)

    # Step 1: Load the export
    print(f"\n[1/3] Loading data from {args.source}...")
    try:
        document = load_document(args.source)
    except LoadError as e:
        print(f"Error loading game data: {e}")
        sys.exit(1)

    # Step 2: Flatten into canonical games
    print("\n[2/3] Normalizing records...")
    skip_log = []
    dataset = normalize_document(document, skip_log=skip_log, bare_time_unit=args.bare_time_unit)
    print(f"  Normalized {len(dataset)} games, skipped {len(skip_log)}")
    if skip_log:
        skip_counts = defaultdict(int)
        for reason in skip_log:
            skip_counts[reason] += 1
        for reason, count in sorted(skip_counts.items(), key=lambda x: -x[1]):
            print(f"    {reason}: {count}")
    print(f"  Last updated: {dataset.last_updated or 'unknown'}")

    # Step 3: Aggregate and write
    print("\n[3/3] Aggregating and writing data files...")
    build_and_write_all(dataset, ranking, args.min_games, args.player, args.output)

    print(f"\nDone! {len(dataset)} games processed → {args.output}")


if __name__ == "__main__":
    main()
