"""CLI for tripbatch - batch trip ingestion from ZIP archives."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import yaml

from .archive.reader import ArchiveHandle
from .archive.template import build_template_archive
from .archive.validate import validate_zip_structure
from .archive.walker import parse
from .config import TripBatchConfig, load_config
from .core.errors import JOB_EXPIRED_MESSAGE, BatchError, ManifestSchemaError, MissingManifest
from .core.model import BatchJob, ParsedBatch
from .logconf import configure_logging
from .runtime import build_runtime

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.2


def _read_archive(path: Path, config: TripBatchConfig) -> bytes:
    """Read an upload from disk, enforcing the archive size limit."""
    if not path.exists():
        raise FileNotFoundError(f"Archive not found: {path}")
    if not path.name.lower().endswith(".zip"):
        raise ValueError("Only .zip archives are supported")
    size = path.stat().st_size
    if size > config.limits.max_archive_bytes:
        raise ValueError(
            f"Archive too large: {size} bytes (max {config.limits.max_archive_mb}MB)"
        )
    return path.read_bytes()


def _print_fatal(e: BatchError) -> None:
    if isinstance(e, ManifestSchemaError):
        print("Error: viaggi.json does not match the manifest schema:", file=sys.stderr)
        for violation in e.violations:
            print(f"  - {violation}", file=sys.stderr)
    elif isinstance(e, MissingManifest):
        for err in e.errors:
            print(f"Error: {err}", file=sys.stderr)
    else:
        print(f"Error: {e}", file=sys.stderr)


def summarize_batch(batch: ParsedBatch) -> dict[str, Any]:
    """Human-oriented view of a parsed batch (no binary content)."""
    trips = []
    for trip in batch.trips:
        trips.append({
            "title": trip.title,
            "folder": trip.folder_name or ".",
            "destination": trip.destination,
            "seasons": trip.recommended_seasons,
            "travel_date": trip.travel_date.isoformat() if trip.travel_date else None,
            "hero": trip.hero.filename if trip.hero else None,
            "media": [m.filename for m in trip.media],
            "gpx": trip.gpx_file.filename if trip.gpx_file else None,
            "stages": [
                {
                    "order_index": s.order_index,
                    "title": s.title,
                    "folder": s.folder_name,
                    "media": [m.filename for m in s.media],
                    "gpx": s.gpx_file.filename if s.gpx_file else None,
                }
                for s in trip.stages
            ],
        })
    return {"multi_trip": batch.is_multi, "trip_count": len(trips), "trips": trips}


def cmd_template(args: argparse.Namespace, config: TripBatchConfig) -> int:
    """Write the example archive."""
    out = Path(args.out)
    out.write_bytes(build_template_archive())
    if not args.quiet:
        print(f"Template written to {out}")
    return 0


def cmd_validate(args: argparse.Namespace, config: TripBatchConfig) -> int:
    """Check structure and manifest without touching storage."""
    try:
        handle = ArchiveHandle.load(_read_archive(Path(args.archive), config))
        errors = validate_zip_structure(handle)
        if errors:
            raise MissingManifest(errors)
        batch = parse(handle)
    except BatchError as e:
        if args.json:
            violations = [str(v) for v in getattr(e, "violations", [])]
            print(json.dumps({"valid": False, "error": str(e), "violations": violations}, indent=2))
        else:
            _print_fatal(e)
        return 1

    if args.json:
        print(json.dumps({"valid": True, "trips": len(batch.trips)}, indent=2))
    elif not args.quiet:
        print(f"OK: {len(batch.trips)} trip(s)")
    return 0


def cmd_plan(args: argparse.Namespace, config: TripBatchConfig) -> int:
    """Parse an archive and print what would be created."""
    try:
        handle = ArchiveHandle.load(_read_archive(Path(args.archive), config))
        errors = validate_zip_structure(handle)
        if errors:
            raise MissingManifest(errors)
        batch = parse(handle)
    except BatchError as e:
        _print_fatal(e)
        return 1

    summary = summarize_batch(batch)
    if args.json:
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    else:
        print(yaml.safe_dump(summary, sort_keys=False, allow_unicode=True), end="")
    return 0


def _print_job(job: BatchJob) -> None:
    print(f"Job {job.id}: {job.status}")
    print(f"  Trips: {job.processed_trips}/{job.total_trips} created")
    if job.result:
        for trip_id in job.result.created_trip_ids:
            print(f"  + {trip_id}")
        for err in job.result.errors:
            where = f"trip {err.trip_index + 1}" if err.trip_index is not None else "batch"
            print(f"  ! {where}: {err.message}")
    if job.error:
        print(f"  ! {job.error}")


def cmd_apply(args: argparse.Namespace, config: TripBatchConfig) -> int:
    """Run an archive through the batch runner and wait for the result."""
    if not args.confirm:
        print("Error: --confirm required to create trips", file=sys.stderr)
        return 1

    rt = build_runtime(
        storage_path=args.storage,
        db_path=args.db,
        config_path=args.config,
    )
    try:
        job_id = rt.runner.submit(_read_archive(Path(args.archive), config), user_id=args.user)
    except BatchError as e:
        _print_fatal(e)
        return 1

    last_seen = -1
    while True:
        job = rt.tracker.get(job_id)
        if job is None:
            print(f"Error: {JOB_EXPIRED_MESSAGE}", file=sys.stderr)
            return 1
        if not args.quiet and not args.json and job.processed_trips + job.failed_trips != last_seen:
            last_seen = job.processed_trips + job.failed_trips
            progress = job.progress()
            print(f"[{progress['percentage']:3d}%] {last_seen}/{job.total_trips} trip(s) handled")
        if job.is_complete:
            break
        time.sleep(POLL_INTERVAL)

    if args.json:
        print(json.dumps(job.to_dict(), indent=2, ensure_ascii=False))
    elif not args.quiet:
        _print_job(job)

    if job.status == "failed":
        return 1
    return 2 if job.has_errors else 0


def cmd_ls(args: argparse.Namespace, config: TripBatchConfig) -> int:
    """List trips in the repository."""
    rt = build_runtime(storage_path=args.storage, db_path=args.db, config_path=args.config)
    trips = rt.repository.list_trips()
    if args.json:
        print(json.dumps(trips, indent=2, ensure_ascii=False))
        return 0
    for trip in trips:
        print(f"{trip['id']}\t{trip['slug']}\t{trip['stage_count']} stage(s)\t{trip['title']}")
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tripbatch", description="Batch trip ingestion from ZIP archives"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: ./tripbatch.toml)",
    )
    parser.add_argument(
        "--storage",
        type=Path,
        default=None,
        help="Directory for uploaded assets (overrides config)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to SQLite trip database (overrides config)",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level (overrides config)"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_template = subparsers.add_parser("template", help="Write an example archive")
    parser_template.add_argument(
        "out", nargs="?", default="tripbatch-template.zip",
        help="Output path (default: tripbatch-template.zip)"
    )

    parser_validate = subparsers.add_parser("validate", help="Validate an archive")
    parser_validate.add_argument("archive", help="ZIP archive to check")

    parser_plan = subparsers.add_parser("plan", help="Show what an archive would create")
    parser_plan.add_argument("archive", help="ZIP archive to parse")

    parser_apply = subparsers.add_parser("apply", help="Create trips from an archive")
    parser_apply.add_argument("archive", help="ZIP archive to import")
    parser_apply.add_argument("--user", default=None, help="Owner user id for created trips")
    parser_apply.add_argument(
        "--confirm", action="store_true", help="Required to actually create trips"
    )

    subparsers.add_parser("ls", help="List trips in the database")

    args = parser.parse_args()

    config = load_config(config_path=args.config)
    configure_logging(
        level=args.log_level or config.logging.level,
        filename=config.logging.file,
        structured=config.logging.structured,
    )

    handlers = {
        "template": cmd_template,
        "validate": cmd_validate,
        "plan": cmd_plan,
        "apply": cmd_apply,
        "ls": cmd_ls,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, config)
            sys.exit(exit_code)
        except Exception as e:
            logger.debug("Command %s failed", args.cmd, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
