"""CLI client for pushing, pulling and searching the shared roster."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from roster.config import Settings
from roster.exceptions import SyncError
from roster.filesystem.roster_reader import read_roster
from roster.services.sync_service import SyncCoordinator

if TYPE_CHECKING:
    from roster.schemas.employee import EmployeeRecord

logger = logging.getLogger(__name__)

_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


def validate_base_url(base_url: str, allow_insecure_http: bool = False) -> str:
    """Validate the bucket URL and enforce HTTPS for non-localhost hosts by default."""
    normalized = base_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Bucket URL must include scheme and host (e.g. https://kvdb.io/...)")

    hostname = parsed.hostname
    if parsed.scheme == "http" and not allow_insecure_http and hostname not in _LOCALHOST_HOSTS:
        raise ValueError(
            "HTTPS is required for non-localhost buckets. "
            "Use --allow-insecure-http only on trusted networks."
        )

    return normalized


def format_record(record: EmployeeRecord) -> str:
    """Render one record as aligned label/value lines."""
    fields = (
        ("Employee ID", record.employee_id),
        ("Name", record.employee_name),
        ("Company", record.company_name),
        ("Meal", record.meal_type),
        ("Camp", record.camp_allocation),
        ("Access card", record.access_card),
        ("Card number", record.card_number),
    )
    return "\n".join(f"  {label + ':':<13}{value}" for label, value in fields)


def print_status(coordinator: SyncCoordinator) -> None:
    """Print record count and provenance of the current roster."""
    count = len(coordinator.roster)
    print(f"Records:     {count:,}" if count else "Records:     empty")
    metadata = coordinator.metadata
    if coordinator.local_only:
        print(f"Source:      local file {coordinator.local_file_name} (not pushed)")
    elif metadata is not None:
        print(f"Source:      {metadata.file_name}")
        print(f"Pushed by:   {metadata.submitter_name} @ {metadata.timestamp}")
    print(f"Last synced: {coordinator.last_synced or 'never'}")


async def _run_pull(coordinator: SyncCoordinator) -> None:
    updated = await coordinator.pull()
    if updated:
        print(f"Pulled {len(coordinator.roster):,} records.")
    else:
        print("Already up to date.")
    print_status(coordinator)


async def _run_push(coordinator: SyncCoordinator, file_path: Path, submitter: str) -> None:
    records = read_roster(file_path)
    coordinator.load_local(records, file_path.name)
    print(f"Loaded {len(records):,} records from {file_path.name}")
    metadata = await coordinator.push(submitter)
    print(f"Push complete. Published by {metadata.submitter_name} @ {metadata.timestamp}")


async def _run_lookup(coordinator: SyncCoordinator, query: str, refresh: bool) -> bool:
    if refresh:
        await coordinator.pull()
    result = coordinator.lookup(query)
    if result.record is None:
        print(f'Not found: "{result.query}"')
        return False
    print(format_record(result.record))
    return True


async def _run_watch(coordinator: SyncCoordinator) -> None:
    print("Watching for roster updates. Press Ctrl-C to stop.")
    last_seen = coordinator.last_synced
    async with coordinator:
        while True:
            await asyncio.sleep(1)
            if coordinator.last_synced != last_seen:
                last_seen = coordinator.last_synced
                print(f"[{last_seen}] roster updated: {len(coordinator.roster):,} records")


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one subcommand against a freshly restored coordinator."""
    coordinator = SyncCoordinator.from_settings(settings)
    coordinator.restore()
    async with coordinator.store:
        try:
            if args.command == "pull":
                await _run_pull(coordinator)
            elif args.command == "push":
                await _run_push(coordinator, Path(args.file), args.name)
            elif args.command == "lookup":
                return 0 if await _run_lookup(coordinator, args.query, args.refresh) else 1
            elif args.command == "status":
                print_status(coordinator)
            elif args.command == "reset":
                coordinator.reset()
                print("Local roster cleared.")
            elif args.command == "watch":
                await _run_watch(coordinator)
        except (SyncError, ValueError, OSError) as exc:
            print(f"Error: {exc}")
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roster-sync",
        description="Push, pull and search the shared employee roster",
    )
    parser.add_argument("--state-dir", help="Local cache directory")
    parser.add_argument("--base-url", help="Bucket base URL (keys get _manifest/_chunk_N)")
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// bucket URLs for non-localhost hosts",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("pull", help="Fetch the shared roster now")
    push = subparsers.add_parser("push", help="Load a roster file and publish it")
    push.add_argument("file", help="Roster file (.xlsx or .csv)")
    push.add_argument("--name", "-n", required=True, help="Submitter name")
    lookup = subparsers.add_parser("lookup", help="Find a record by card number or ID")
    lookup.add_argument("query")
    lookup.add_argument("--refresh", action="store_true", help="Pull before searching")
    subparsers.add_parser("status", help="Show the cached roster state")
    subparsers.add_parser("reset", help="Clear the local roster cache")
    subparsers.add_parser("watch", help="Poll the bucket until interrupted")
    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.state_dir:
        overrides["state_dir"] = Path(args.state_dir).resolve()
    if args.base_url:
        overrides["sync_base_url"] = args.base_url
    settings = Settings(**overrides)  # type: ignore[arg-type]

    try:
        settings.sync_base_url = validate_base_url(
            settings.sync_base_url, args.allow_insecure_http
        )
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run_command(args, settings)))
    except KeyboardInterrupt:
        print("Stopped.")


if __name__ == "__main__":
    main()
