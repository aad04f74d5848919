#!/usr/bin/env python3
"""
casual-records command line interface.

Usage:
    # Scrape the configured inbox (CASUAL_RECORDS_SOURCE_PATH) or given folders
    casual-records scrape
    casual-records scrape ~/Documents/scans --timeout 60

    # Ingest a single file, optionally overriding the detected type
    casual-records ingest receipt.png --type receipt --tag groceries

    # Search, list and inspect
    casual-records search "dentist visit" --type health_visit --limit 5
    casual-records list --type receipt
    casual-records get doc-0123456789abcdef
    casual-records delete doc-0123456789abcdef
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as ConfigValidationError

from casual_records.config import RecordsConfig
from casual_records.errors import RecordError
from casual_records.ingestion import ScrapeSummary
from casual_records.models import RECORD_TYPES, Record
from casual_records.record_service import RecordService

logger = logging.getLogger("casual-records")

PREVIEW_CHARS = 200


def parse_filters(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect --type, --tag and --filter key=value options into a filter dict."""
    filters: Dict[str, Any] = {}
    for item in args.filter or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid filter {item!r}, expected key=value")
        filters[key] = value
    if args.type:
        filters["type"] = args.type
    if args.tag:
        filters["tag"] = args.tag
    return filters


def format_record_line(record: Record) -> str:
    title = record.title or "(untitled)"
    return f"{record.id}  {record.type:<13}  {record.created_at:%Y-%m-%d}  {title}"


def format_preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def print_summary(summary: ScrapeSummary) -> None:
    for source in summary.sources:
        print(f"Source: {source.source}")
        print(f"   Ingested: {source.ingested} records")
        if source.failed:
            print(f"   Failed: {source.failed} items")
            for error in source.errors:
                print(f"      - {error}")
        if source.aborted:
            print("   Aborted: source could not be scraped")
    print("-" * 40)
    print(f"Total: {summary.ingested} records ingested, {summary.failed} failed")
    if summary.timed_out:
        print("Scrape timed out before all sources finished")


async def run_command(service: RecordService, config: RecordsConfig, args: argparse.Namespace) -> int:
    """Execute one parsed command against the service. Returns the exit code."""
    command = args.command

    if command == "ingest":
        record = await service.ingest_file(
            args.path,
            type=args.type,
            title=args.title,
            description=args.description,
            tags=args.tag or None,
        )
        print(f"Ingested {record.id} ({record.type})")
        return 0

    if command == "search":
        # the vector index is in-memory; rebuild it from the store first
        count = await service.reindex()
        logger.info(f"Indexed {count} records")

        results = await service.search(args.query, filters=parse_filters(args), limit=args.limit)
        if not results:
            print("No results found.")
            return 0

        print(f"Found {len(results)} results:\n")
        for rank, result in enumerate(results, start=1):
            record = result.record
            print(f"{rank}. {record.title or '(untitled)'}")
            print(f"   Type: {record.type}")
            print(f"   ID: {record.id}")
            print(f"   Relevance: {result.score:.2f}")
            if record.tags:
                print(f"   Tags: {', '.join(record.tags)}")
            print(f"   Preview: {format_preview(record.content)}")
            print()
        return 0

    if command == "list":
        records = await service.list(args.type)
        for record in records:
            print(format_record_line(record))
        print(f"{len(records)} records")
        return 0

    if command == "get":
        record = await service.get(args.id)
        print(record.model_dump_json(indent=2))
        return 0

    if command == "delete":
        await service.delete(args.id)
        print(f"Deleted {args.id}")
        return 0

    if command == "scrape":
        paths = args.paths or [config.source_path]
        summary = await service.scrape_paths(paths, timeout=args.timeout)
        print_summary(summary)
        return 0 if summary.ok else 1

    if command == "reindex":
        count = await service.reindex()
        print(f"Indexed {count} records")
        return 0

    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="casual-records",
        description="Ingest, classify and search personal records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Usage:", 1)[1] if __doc__ else None,
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: nearest .env from the working directory)",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=["file", "sqlite", "memory"],
        default=None,
        help="Record store backend (default: CASUAL_RECORDS_STORAGE_BACKEND or file)",
    )
    parser.add_argument(
        "--storage-path",
        type=str,
        default=None,
        help="Directory for the file backend (default: CASUAL_RECORDS_STORAGE_PATH)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: CASUAL_RECORDS_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    ingest = subparsers.add_parser("ingest", help="Extract a record from a file and store it")
    ingest.add_argument("path", help="File to ingest")
    ingest.add_argument("--type", choices=RECORD_TYPES, default=None, help="Override the detected type")
    ingest.add_argument("--title", default=None, help="Record title")
    ingest.add_argument("--description", default=None, help="Record description")
    ingest.add_argument("--tag", action="append", default=None, help="Tag (repeatable)")

    search = subparsers.add_parser("search", help="Search records by free text")
    search.add_argument("query", help="Search query")
    search.add_argument("--type", choices=RECORD_TYPES, default=None, help="Only records of this type")
    search.add_argument("--tag", default=None, help="Only records with this tag")
    search.add_argument(
        "--filter", action="append", default=None, metavar="KEY=VALUE", help="Metadata filter (repeatable)"
    )
    search.add_argument("--limit", type=int, default=None, help="Maximum results (<= 0 for all)")

    list_parser = subparsers.add_parser("list", help="List stored records")
    list_parser.add_argument("--type", choices=RECORD_TYPES, default=None, help="Only records of this type")

    get = subparsers.add_parser("get", help="Show one record as JSON")
    get.add_argument("id", help="Record ID")

    delete = subparsers.add_parser("delete", help="Delete a record")
    delete.add_argument("id", help="Record ID")

    scrape = subparsers.add_parser("scrape", help="Scrape local folders and ingest their files")
    scrape.add_argument("paths", nargs="*", help="Folders to scrape (default: CASUAL_RECORDS_SOURCE_PATH)")
    scrape.add_argument("--timeout", type=float, default=None, help="Time limit in seconds")

    subparsers.add_parser("reindex", help="Rebuild the search index from the record store")
    subparsers.add_parser("help", help="Show this help message")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the casual-records CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        parser.print_help()
        return 0 if args.command == "help" else 1

    try:
        config = RecordsConfig.from_env(args.env_file)
        overrides = {
            "storage_backend": args.backend,
            "storage_path": args.storage_path,
            "log_level": args.log_level,
        }
        config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        service = RecordService.from_config(config)
    except RecordError as e:
        logger.error(f"Failed to initialize record service: {e}")
        return 1

    try:
        return asyncio.run(run_command(service, config, args))
    except (RecordError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
