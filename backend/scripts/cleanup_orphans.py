import asyncio
import os
import sys
import logging
import argparse
from typing import List

from sqlalchemy import select

# Add backend to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from photon.core.database import AsyncSessionLocal
from photon.models.image import Image
from photon.services.storage_factory import get_storage_service
from photon.services.storage_interface import StorageInterface, discard_file

logger = logging.getLogger(__name__)


def find_orphans(stored_keys: List[str], referenced_keys: set) -> List[str]:
    """Stored objects no image row points at."""
    return [key for key in stored_keys if key not in referenced_keys]


async def cleanup(db, storage: StorageInterface, dry_run: bool = True) -> List[str]:
    """
    Delete stored files left behind by uploads whose metadata never persisted
    (or replacements whose old file failed to delete). Returns the orphan keys.
    """
    result = await db.execute(select(Image.storage_key))
    referenced = set(result.scalars().all())
    logger.info(f"Found {len(referenced)} referenced files in database.")

    stored = [f["file_id"] for f in storage.list_files()]
    logger.info(f"Found {len(stored)} files in storage.")

    orphans = find_orphans(stored, referenced)
    if not orphans:
        logger.info("No orphans found. Everything is clean!")
        return orphans

    for key in orphans:
        logger.warning(f"Orphaned file found: {key}")

    if dry_run:
        logger.info("Dry run complete. No files were deleted.")
        return orphans

    logger.info(f"Deleting {len(orphans)} orphaned files...")
    failed = 0
    for key in orphans:
        if not discard_file(storage, key).ok:
            failed += 1
    logger.info(f"Cleanup complete. {len(orphans) - failed} deleted, {failed} failed.")
    return orphans


async def main(dry_run=True):
    mode = "DRY RUN" if dry_run else "LIVE DELETE"
    logger.info(f"Starting cleanup in {mode} mode.")

    storage = get_storage_service()
    async with AsyncSessionLocal() as db:
        await cleanup(db, storage, dry_run=dry_run)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    parser = argparse.ArgumentParser(description="Cleanup orphaned storage files.")
    parser.add_argument("--confirm", action="store_true", help="Perform actual deletion (default is dry run).")
    args = parser.parse_args()

    asyncio.run(main(dry_run=not args.confirm))
