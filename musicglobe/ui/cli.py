# musicglobe/ui/cli.py
import argparse
import logging
import random
import sys

from musicglobe.core.settings import settings
from musicglobe.globe.engine import PlacementEngine
from musicglobe.globe.export import load_records, nodes_to_json, write_nodes
from musicglobe.spotify.client import SpotifyClient
from musicglobe.spotify.collect import RecordCollector
from musicglobe.spotify.errors import SpotifyAPIError

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="musicglobe",
        description="Place your Spotify listening history on a globe",
    )
    parser.add_argument("--log-level", default=settings.log_level, type=str.upper,
                        choices=list(LOG_LEVELS),
                        help="Logging level (default from MUSICGLOBE_LOG_LEVEL, else INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    place = sub.add_parser("place", help="Place records from a local JSON file")
    place.add_argument("input", help="JSON file of cached records or raw Spotify items")
    place.add_argument("--output", "-o", help="Write nodes here instead of stdout")
    place.add_argument("--radius", type=float, default=settings.node_radius,
                       help="Node distance from globe centre (default=%(default)s)")

    fetch = sub.add_parser("fetch", help="Fetch records from Spotify and place them")
    fetch.add_argument("--output", "-o", help="Write nodes here instead of stdout")
    fetch.add_argument("--radius", type=float, default=settings.node_radius,
                       help="Node distance from globe centre (default=%(default)s)")
    fetch.add_argument("--history-only", action="store_true",
                       help="Skip playlists, use recently played tracks only")
    fetch.add_argument("--limit", type=int, default=100,
                       help="Max number of nodes (default=100)")
    fetch.add_argument("--shuffle", action="store_true", help="Shuffle records before placing")
    fetch.add_argument("--seed", type=int, help="Seed for --shuffle")
    return parser


def _emit(nodes, output):
    if output:
        write_nodes(nodes, output)
        print(f"Wrote {len(nodes)} nodes to {output}", file=sys.stderr)
    else:
        print(nodes_to_json(nodes))


def cmd_place(args) -> int:
    try:
        records = load_records(args.input)
    except (OSError, ValueError) as e:
        print(f"Could not read {args.input}: {e}", file=sys.stderr)
        return 1

    nodes = PlacementEngine(radius=args.radius).place(records)
    _emit(nodes, args.output)
    return 0


def cmd_fetch(args) -> int:
    client = SpotifyClient(settings)
    collector = RecordCollector(
        client,
        cap=args.limit,
        shuffle=args.shuffle,
        rng=random.Random(args.seed),
    )

    try:
        user = client.current_user()
        print(f"Connected as {user.get('display_name') or user.get('id')}", file=sys.stderr)
        records = collector.history_only() if args.history_only else collector.collect()
    except SpotifyAPIError as e:
        print(f"Spotify error: {e}", file=sys.stderr)
        return 1

    if not records:
        print("No listening history found. Try playing some music on Spotify first!", file=sys.stderr)
        return 1

    nodes = PlacementEngine(radius=args.radius).place(records)
    _emit(nodes, args.output)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVELS.get(args.log_level, logging.INFO),
        format="%(levelname)s: %(name)s: %(message)s",
    )

    if args.command == "place":
        return cmd_place(args)
    return cmd_fetch(args)


if __name__ == "__main__":
    sys.exit(main())
