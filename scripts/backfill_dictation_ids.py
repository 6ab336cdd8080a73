# scripts/backfill_dictation_ids.py
"""Back-fills the ID of write-from-dictation items by matching their text against a CSV lookup."""
import argparse
import asyncio
import os
import sys

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from app.models.tables import Base
from app.services.importer import backfill_dictation_ids, load_question_number_map, sync_hidden_flags
from app.utils.config import settings
from app.utils.db import AsyncSessionLocal, init_models
from app.utils.logger import configure_logger, get_logger

logger = get_logger("scripts.backfill")


async def main(csv_path: str, sync_hidden: bool) -> int:
    await init_models(Base)
    mapping = load_question_number_map(csv_path)

    async with AsyncSessionLocal() as session:
        summary = await backfill_dictation_ids(session, mapping)
        if sync_hidden:
            hidden, visible = await sync_hidden_flags(session)
            logger.info(f"Visibility synced: {hidden} hidden, {visible} visible.")

    print("\n=== Update Summary ===")
    print(f"Total documents processed: {summary.processed}")
    print(f"Documents updated with ID: {summary.updated}")
    print(f"Documents not found in CSV: {summary.not_found}")
    if summary.not_found_texts:
        print("\nFirst 10 texts not found in CSV:")
        for index, text in enumerate(summary.not_found_texts[:10], start=1):
            print(f"{index}. {text}...")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--csv", default=settings.dictation_id_csv_path, help="CSV with QuestionNo and Content columns.")
    parser.add_argument("--sync-hidden", action="store_true", help="Also hide items whose occurrence is 0.")
    parser.add_argument("--verbose", action="store_true", help="Log every matched and unmatched text.")
    args = parser.parse_args()
    if args.verbose:
        configure_logger("DEBUG")
    try:
        sys.exit(asyncio.run(main(args.csv, args.sync_hidden)))
    except FileNotFoundError as e:
        logger.error(f"Lookup CSV not found: {e}")
        sys.exit(1)
