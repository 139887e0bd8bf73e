"""Command-line interface for the Congress.gov legislator importer."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime, timedelta

from .config import ImporterSettings, configure_logging, load_settings, redact_database_url
from .exceptions import ImporterError
from .lock import DEFAULT_STALE_AFTER
from .orchestrator import open_importer
from .schema import DEFAULT_END_CONGRESS, DEFAULT_START_CONGRESS, ImportStatus, SessionRange


async def _run_import(settings: ImporterSettings, session_range: SessionRange):
    async with open_importer(settings) as importer:
        return await importer.run(session_range)


async def _init_db(settings: ImporterSettings) -> None:
    async with open_importer(settings) as importer:
        await importer.store.create_schema()


async def _release_lock(settings: ImporterSettings, lock_key: str) -> int:
    async with open_importer(settings) as importer:
        return await importer.store.delete_lock(lock_key)


async def _clear_stale_locks(settings: ImporterSettings, older_than: timedelta) -> list[str]:
    async with open_importer(settings) as importer:
        return await importer.lock.clear_stale(older_than)


def cmd_run(args: argparse.Namespace, settings: ImporterSettings) -> int:
    """Handle the run subcommand."""
    session_range = SessionRange(args.start_congress, args.end_congress)
    print(
        f"[{datetime.now().isoformat()}] Importing legislators for Congresses "
        f"{session_range.start_congress} down to {session_range.end_congress}"
    )

    result = asyncio.run(_run_import(settings, session_range))
    print(json.dumps(result.to_dict(), indent=2))

    if result.status is ImportStatus.LOCKED:
        print(f"ERROR: Import already running ({session_range.lock_key})", file=sys.stderr)
        return 1
    if result.status is ImportStatus.ERROR:
        print(f"ERROR: {result.message}", file=sys.stderr)
        return 1

    print(
        f"[{datetime.now().isoformat()}] SUCCESS: {result.imported:,} imported, "
        f"{result.updated:,} updated, {len(result.errors):,} errors"
    )
    return 0


def cmd_init_db(args: argparse.Namespace, settings: ImporterSettings) -> int:
    """Handle the init-db subcommand."""
    target = redact_database_url(settings.database_url)
    print(f"[{datetime.now().isoformat()}] Creating tables on {target}")
    asyncio.run(_init_db(settings))
    print(f"[{datetime.now().isoformat()}] Schema ready")
    return 0


def cmd_release_lock(args: argparse.Namespace, settings: ImporterSettings) -> int:
    """Handle the release-lock subcommand."""
    lock_key = SessionRange(args.start_congress, args.end_congress).lock_key
    deleted = asyncio.run(_release_lock(settings, lock_key))
    if deleted:
        print(f"Released lock: {lock_key}")
    else:
        print(f"No lock held for {lock_key}")
    return 0


def cmd_clear_stale_locks(args: argparse.Namespace, settings: ImporterSettings) -> int:
    """Handle the clear-stale-locks subcommand."""
    cleared = asyncio.run(
        _clear_stale_locks(settings, timedelta(minutes=args.older_than_minutes))
    )
    print(f"Cleared {len(cleared)} stale lock(s)")
    for lock_key in cleared:
        print(f"  {lock_key}")
    return 0


def cmd_serve(args: argparse.Namespace, settings: ImporterSettings) -> int:
    """Handle the serve subcommand."""
    import uvicorn

    from api.main import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return 0


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start-congress",
        type=int,
        default=DEFAULT_START_CONGRESS,
        help=f"Newest Congress to import (default: {DEFAULT_START_CONGRESS})",
    )
    parser.add_argument(
        "--end-congress",
        type=int,
        default=DEFAULT_END_CONGRESS,
        help=f"Oldest Congress to import (default: {DEFAULT_END_CONGRESS})",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Import legislators from the Congress.gov API into PostgreSQL",
        epilog="""
Examples:
  %(prog)s init-db
  %(prog)s run --start-congress 119 --end-congress 117
  %(prog)s release-lock --start-congress 119 --end-congress 117
  %(prog)s clear-stale-locks --older-than-minutes 30

Requires CONGRESS_API_KEY and DATABASE_URL in the environment.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one import over a Congress range")
    _add_range_arguments(run_parser)
    run_parser.set_defaults(func=cmd_run)

    init_parser = subparsers.add_parser("init-db", help="Create the legislators and lock tables")
    init_parser.set_defaults(func=cmd_init_db)

    release_parser = subparsers.add_parser(
        "release-lock",
        help="Delete the lock row for a Congress range (after a killed run)",
    )
    _add_range_arguments(release_parser)
    release_parser.set_defaults(func=cmd_release_lock)

    stale_parser = subparsers.add_parser(
        "clear-stale-locks",
        help="Delete lock rows older than a threshold",
    )
    stale_parser.add_argument(
        "--older-than-minutes",
        type=float,
        default=DEFAULT_STALE_AFTER.total_seconds() / 60,
        help="Age threshold in minutes (default: 10)",
    )
    stale_parser.set_defaults(func=cmd_clear_stale_locks)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP trigger endpoint")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = load_settings()
        return args.func(args, settings)
    except (ImporterError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
