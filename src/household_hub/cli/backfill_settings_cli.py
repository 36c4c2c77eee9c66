"""
Command-line backfill of default family settings.

Creates the default settings record (every feature enabled, default AI settings) for
each existing family that has none. Families provisioned concurrently while the
backfill runs are counted as already having settings.

Usage:
    household-hub-backfill --dry-run   # report only
    household-hub-backfill             # create missing records

Exits with status 1 if any family could not be processed.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError, PyMongoError

from household_hub.database import db_manager
from household_hub.database.family_settings_repository import FamilySettingsRepository
from household_hub.managers.logging_manager import get_logger

logger = get_logger(prefix="[BackfillCLI]")


class BackfillStats(BaseModel):
    total_families: int = 0
    families_with_settings: int = 0
    families_without_settings: int = 0
    settings_created: int = 0
    errors: int = 0


async def backfill_family_settings(
    repository: FamilySettingsRepository, dry_run: bool = False
) -> BackfillStats:
    """
    Create default settings for every family that lacks them.

    Args:
        repository: Settings repository bound to a connected database manager.
        dry_run: Report what would be created without writing.

    Returns:
        BackfillStats: Counters for the run.
    """
    stats = BackfillStats()
    logger.info("Starting family settings backfill%s", " (DRY RUN)" if dry_run else "")

    stats.total_families = await repository.count_families()
    logger.info("Found %d families to check", stats.total_families)

    async for family_id in repository.find_family_ids_without_settings():
        if dry_run:
            stats.families_without_settings += 1
            logger.info("[DRY RUN] Would create default settings for family %s", family_id)
            continue

        try:
            await repository.create_default_settings(family_id)
        except DuplicateKeyError:
            logger.debug("Family %s received settings concurrently, skipping", family_id)
            continue
        except PyMongoError as e:
            stats.families_without_settings += 1
            stats.errors += 1
            logger.error("Error processing family %s: %s", family_id, e)
            continue

        stats.families_without_settings += 1
        stats.settings_created += 1
        logger.info("Created default settings for family %s", family_id)

    stats.families_with_settings = stats.total_families - stats.families_without_settings

    logger.info("Backfill summary: %s", stats.model_dump())
    if stats.errors:
        logger.warning("Errors encountered: %d", stats.errors)
    return stats


async def run(dry_run: bool) -> bool:
    """Connect, backfill and disconnect. Returns True when no family failed."""
    await db_manager.connect()
    try:
        stats = await backfill_family_settings(FamilySettingsRepository(db_manager), dry_run=dry_run)
    finally:
        await db_manager.disconnect()
    return stats.errors == 0


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Create default settings for families that have none",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report families without settings but do not create anything",
    )
    args = parser.parse_args(argv)

    try:
        success = asyncio.run(run(dry_run=args.dry_run))
    except PyMongoError as e:
        logger.error("Fatal error during backfill: %s", e)
        sys.exit(1)

    if success:
        logger.info("Backfill completed successfully")
    else:
        logger.error("Backfill completed with errors")
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
