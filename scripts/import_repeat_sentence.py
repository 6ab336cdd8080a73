# scripts/import_repeat_sentence.py
"""Bulk-imports Repeat Sentence rows from CSV into the repeatsentence collection."""
import argparse
import asyncio
import os
import sys

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from app.models.tables import Base
from app.services.importer import build_repeat_sentence_items, import_repeat_sentences, read_csv_rows
from app.utils.config import settings
from app.utils.db import AsyncSessionLocal, init_models
from app.utils.logger import configure_logger, get_logger

logger = get_logger("scripts.import_repeat_sentence")


async def main(csv_path: str) -> int:
    if not os.path.exists(csv_path):
        logger.error(f"Data file not found: {csv_path}")
        return 1

    await init_models(Base)

    logger.info(f"Reading CSV... {csv_path}")
    rows = read_csv_rows(csv_path)
    logger.info(f"Rows read: {len(rows)}")

    plan = build_repeat_sentence_items(rows)
    logger.info(f"Valid rows after normalization: {len(plan.items)}")
    logger.info(f"Rows skipped (missing ID or text): {plan.skipped}")
    logger.info(f"Duplicate (ID + text) rows removed: {plan.duplicates_removed}")
    if not plan.items:
        logger.info("Nothing valid to import. Stopping.")
        return 0

    async with AsyncSessionLocal() as session:
        summary = await import_repeat_sentences(session, plan, import_source=csv_path)

    print("\n=== IMPORT RESULT ===")
    print(f"Upserted: {summary.upserted}")
    print(f"- Inserted: {summary.inserted}")
    print(f"- Updated (already present): {summary.updated}")
    print(f"Batches committed: {summary.batches}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--csv", default=settings.repeat_sentence_csv_path, help="Path to the repeat sentence CSV.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()
    if args.verbose:
        configure_logger("DEBUG")
    try:
        sys.exit(asyncio.run(main(args.csv)))
    except Exception as e:
        logger.exception(f"Import failed: {e}")
        sys.exit(1)
