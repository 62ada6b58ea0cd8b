#!/usr/bin/env python3
"""Script to build the administration / track / station hierarchy.

Two modes:

    template  Create administrations, tracks, and stations from a JSON template,
              then optionally load participant CSVs from a directory.
    fan-out   Give every existing administration N tracks of M stations each.

Existing data is only removed when --wipe (template) or --reset (fan-out) is given.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from osce_admin.core.logging_config import setup_logging
from osce_admin.dependencies.database import get_sessionmanager, initialize_db
from osce_admin.models import ParticipantKind
from osce_admin.schemas.bootstrap import BootstrapTemplate
from osce_admin.services.bootstrap import (
    HierarchyCreationFailure,
    administrations_from_template,
    clear_tracks_and_stations,
    count_entities,
    create_hierarchy,
    fan_out_hierarchy,
    wipe_all,
)
from osce_admin.services.collections.base import CollectionError
from osce_admin.services.collections.factory import CollectionSet, get_collection_set
from osce_admin.services.participant_upload import PARTICIPANT_LAYOUTS, InvalidInputFormat, ingest_participants

logger = logging.getLogger(__name__)

PARTICIPANT_FILES = {
    ParticipantKind.CLIENT: "standardized_clients.csv",
    ParticipantKind.EXAMINER: "examiners.csv",
    ParticipantKind.EXAMINEE: "examinees.csv",
}


def load_template(path: Path) -> BootstrapTemplate:
    """Read and validate a bootstrap template file."""
    with open(path, encoding="utf-8") as f:
        return BootstrapTemplate.model_validate(json.load(f))


async def upload_participants(collections: CollectionSet, participants_dir: Path) -> dict[str, int]:
    """Ingest the participant CSV files found in a directory. Missing files are skipped."""
    uploaded = {}
    for kind, filename in PARTICIPANT_FILES.items():
        path = participants_dir / filename
        if not path.exists():
            logger.warning(f"Participant file not found, skipping: {path}")
            continue

        report = await ingest_participants(
            collections.participants(kind), PARTICIPANT_LAYOUTS[kind], path.read_bytes(), "text/csv"
        )
        for row, reason in report.failures:
            logger.warning(f"{filename} row {row.row_number} failed: {reason}")
        logger.info(f"Uploaded {len(report.successes)} {kind.value}s ({len(report.failures)} failed)")
        uploaded[kind.value] = len(report.successes)
    return uploaded


async def run_template(collections: CollectionSet, args: argparse.Namespace) -> None:
    template = load_template(args.template)

    if args.wipe:
        logger.info("Clearing existing data...")
        await wipe_all(collections)

    summary = await create_hierarchy(collections, administrations_from_template(template, args.year))
    logger.info(
        f"Created {summary.administrations} administrations, {summary.tracks} tracks, {summary.stations} stations"
    )

    if args.participants_dir is not None:
        await upload_participants(collections, args.participants_dir)


async def run_fan_out(collections: CollectionSet, args: argparse.Namespace) -> None:
    if args.reset:
        logger.info("Clearing existing tracks and stations...")
        await clear_tracks_and_stations(collections)

    summary = await fan_out_hierarchy(collections, args.tracks, args.stations)
    logger.info(f"Created {summary.tracks} tracks and {summary.stations} stations for {summary.administrations} administrations")


async def run(args: argparse.Namespace, collections: CollectionSet) -> int:
    """
    Run one setup command against a collection set.

    Returns:
        Process exit status: 0 on success, 1 if the setup failed part-way or could not start
    """
    try:
        if args.command == "template":
            await run_template(collections, args)
        else:
            await run_fan_out(collections, args)
        summary = await count_entities(collections)
    except (
        HierarchyCreationFailure,
        InvalidInputFormat,
        CollectionError,
        OSError,
        ValueError,
        ValidationError,
    ) as e:
        logger.error(f"Error during setup: {e}", exc_info=e)
        return 1

    logger.info("Setup completed successfully!")
    print(f"Summary: {json.dumps(summary)}")
    return 0


async def main_async(args: argparse.Namespace) -> int:
    sessionmanager = get_sessionmanager()
    async with initialize_db(sessionmanager):
        return await run(args, get_collection_set("sql", sessionmanager))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Set up administrations, tracks, and stations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    template = subparsers.add_parser("template", help="Create the hierarchy from a JSON template")
    template.add_argument("--template", type=Path, required=True, help="Path to the administrations template JSON")
    template.add_argument(
        "--participants-dir",
        type=Path,
        default=None,
        help="Directory holding standardized_clients.csv, examiners.csv and examinees.csv",
    )
    template.add_argument("--year", type=int, default=None, help="Year used in generated names (defaults to settings)")
    template.add_argument(
        "--wipe",
        action="store_true",
        help="Delete ALL administrations, tracks, stations and participants first",
    )

    fan_out = subparsers.add_parser("fan-out", help="Give every existing administration N tracks of M stations")
    fan_out.add_argument("--tracks", type=int, default=2, help="Tracks per administration")
    fan_out.add_argument("--stations", type=int, default=3, help="Stations per track")
    fan_out.add_argument(
        "--reset",
        action="store_true",
        help="Delete all tracks and stations and empty every administration's track list first",
    )
    return parser


def main() -> None:
    """Run setup."""
    setup_logging()
    args = build_parser().parse_args()
    try:
        status = asyncio.run(main_async(args))
    except Exception as e:
        logger.error(f"Error during setup: {e}", exc_info=e)
        print(f"Error during setup: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
