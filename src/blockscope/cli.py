"""Command-line interface for blockscope.

Usage:
    blockscope blocks --start 1 --end 50
    blockscope blocks --db cache/transactions.db --base-url http://explorer:8080
    blockscope decode envelope.json
    blockscope version
"""

import argparse
import asyncio
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Any, Optional

from blockscope import __version__
from blockscope.cache import SQLiteCacheReader, open_cache_connection
from blockscope.clients import ExplorerClient, UpstreamUnavailable
from blockscope.config import settings
from blockscope.encoding import EncodedSeries, MalformedSeries, decode
from blockscope.pipeline import RangeOrchestrator

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="blockscope",
        description="blockscope — cached, delta-encoded block volume series",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  blockscope blocks --start 1 --end 50
  blockscope decode envelope.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    blocks_parser = subparsers.add_parser(
        "blocks",
        help="Fetch the encoded volume series for a block range",
        description="Read from the cache, fall back to the explorer API, print the envelope",
    )
    blocks_parser.add_argument("--start", type=int, default=None, help="First block number")
    blocks_parser.add_argument("--end", type=int, default=None, help="Last block number")
    blocks_parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"SQLite cache path (default: {settings.cache_db_path})",
    )
    blocks_parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help=f"Explorer API base URL (default: {settings.explorer_base_url})",
    )

    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode an encoded envelope back to samples",
    )
    decode_parser.add_argument(
        "file",
        type=str,
        help="Envelope JSON file, or '-' for stdin",
    )

    subparsers.add_parser("version", help="Show version information")

    return parser


async def _fetch_encoded(
    db_path: Path,
    base_url: str | None,
    start: int | None,
    end: int | None,
) -> dict[str, Any]:
    conn: sqlite3.Connection | None = None
    try:
        conn = open_cache_connection(db_path)
    except sqlite3.Error as e:
        logger.warning("Cache unavailable at %s: %s", db_path, e)

    try:
        async with ExplorerClient(base_url=base_url) as client:
            orchestrator = RangeOrchestrator(cache=SQLiteCacheReader(conn), client=client)
            return await orchestrator.get_encoded_blocks(start, end)
    finally:
        if conn is not None:
            conn.close()


def cmd_blocks(args: argparse.Namespace) -> int:
    """Execute the blocks command.

    Returns:
        Exit code (0 for success, 1 if both cache and API failed)
    """
    db_path = args.db or Path(settings.cache_db_path)
    try:
        envelope = asyncio.run(_fetch_encoded(db_path, args.base_url, args.start, args.end))
    except UpstreamUnavailable as e:
        logger.error("Failed to fetch block data: %s", e)
        print(json.dumps({"error": "Failed to fetch block data", "details": str(e)}), file=sys.stderr)
        return 1

    print(json.dumps(envelope, indent=2))
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    """Execute the decode command.

    Returns:
        Exit code (0 for success, 1 on unreadable or malformed input)
    """
    try:
        if args.file == "-":
            payload = json.load(sys.stdin)
        else:
            payload = json.loads(Path(args.file).read_text(encoding="utf-8"))
        samples = decode(EncodedSeries.from_dict(payload))
    except (OSError, json.JSONDecodeError, MalformedSeries) as e:
        logger.error("Decode failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps([s.to_dict() for s in samples], indent=2))
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"blockscope v{__version__}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "blocks":
        return cmd_blocks(args)
    elif args.command == "decode":
        return cmd_decode(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
