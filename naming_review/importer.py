"""
Command-line loader for the legacy approved-names sheet.

Usage: naming-review-import <file.csv> [--replace]

The CSV is a plain export of the sheet with its header row.
"""
import argparse
import asyncio
import csv
import logging
from pathlib import Path
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from naming_review.config import settings
from naming_review.schemas.approved_name import LegacyImportResult
from naming_review.services.approved_names import import_legacy_names

logger = logging.getLogger(__name__)


def read_sheet(path: Path) -> list[dict]:
    # utf-8-sig strips the BOM spreadsheet exports often start with
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return list(csv.DictReader(handle))


async def import_csv(path: Path, replace: bool = False, database_url: Optional[str] = None) -> LegacyImportResult:
    engine = create_async_engine(database_url or settings.database_url, echo=settings.debug)
    async_session = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        rows = read_sheet(path)
        async with async_session() as db:
            return await import_legacy_names(db, rows, replace=replace)
    finally:
        await engine.dispose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Import the legacy approved-names sheet")
    parser.add_argument("csv_file", type=Path)
    parser.add_argument("--replace", action="store_true", help="Remove previously imported legacy rows first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if not args.csv_file.is_file():
        print(f"File not found: {args.csv_file}")
        return 1

    result = asyncio.run(import_csv(args.csv_file, replace=args.replace))
    print(f"Imported {result.imported}, skipped {result.skipped}, removed {result.removed}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
