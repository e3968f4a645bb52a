#!/usr/bin/env python3
"""
backfill_ata_chapter_codes.py

Fills logbook_entries.ata_chapter_code for rows written before the column
existed, reading the chapter out of the legacy skills_practiced list.

Rows whose legacy value carries no "<code> -" part (an unmapped code at
write time) cannot be recovered and are only counted.

Usage (from backend/):
  python -m apprenticedb.scripts.backfill_ata_chapter_codes --dry-run
  python -m apprenticedb.scripts.backfill_ata_chapter_codes
"""

from __future__ import annotations

import argparse
import logging
from typing import Tuple

from sqlalchemy.orm import Session

from apprenticedb.database import SessionLocal
from apprenticedb.apps.logbook import ata
from apprenticedb.apps.logbook.models import LogbookEntry

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


def backfill_chapter_codes(db: Session, *, dry_run: bool = False) -> Tuple[int, int]:
    """Returns (updated, unreadable)."""
    updated = 0
    unreadable = 0

    query = (
        db.query(LogbookEntry)
        .filter(LogbookEntry.ata_chapter_code.is_(None))
        .order_by(LogbookEntry.id)
    )
    for entry in query.yield_per(BATCH_SIZE):
        code = ata.code_from_legacy_skills(entry.skills_practiced)
        if code is None:
            unreadable += 1
            continue
        entry.ata_chapter_code = code
        updated += 1

    if dry_run:
        db.rollback()
    else:
        db.commit()

    logger.info(
        "ATA chapter backfill finished",
        extra={"updated": updated, "unreadable": unreadable, "dry_run": dry_run},
    )
    return updated, unreadable


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        updated, unreadable = backfill_chapter_codes(db, dry_run=args.dry_run)
        print("OK: updated =", updated, "unreadable =", unreadable, "dry_run =", args.dry_run)
    finally:
        db.close()


if __name__ == "__main__":
    main()
