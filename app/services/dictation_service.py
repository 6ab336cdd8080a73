# app/services/dictation_service.py
import csv
import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import DictationFilter, DictationSort
from app.models.question import DictationBulkResult, DictationItem, DictationItemIn, DictationItemUpdate
from app.models.tables import AudioSampleRecord
from app.utils.config import settings
from app.utils.logger import logger

WFD_COLLECTION = "writefromdictation"
REPEAT_SENTENCE_COLLECTION = "repeatsentence"
DEFAULT_TOPIC = "General"


class DictationService:
    """Reads and maintains the write-from-dictation collection."""

    async def load_seed_items(self, session: AsyncSession, csv_path: Optional[str] = None) -> int:
        csv_path = csv_path if csv_path is not None else settings.dictation_seed_path
        existing = await session.scalar(
            select(func.count()).select_from(AudioSampleRecord).filter_by(collection=WFD_COLLECTION)
        )
        if existing:
            logger.info(f"{WFD_COLLECTION} already holds {existing} items; skipping seed.")
            return 0

        loaded = 0
        try:
            with open(csv_path, mode="r", encoding="utf-8") as csvfile:
                for row in csv.DictReader(csvfile):
                    text = (row.get("text") or "").strip()
                    if not text:
                        logger.warning(f"Skipping dictation row without text: {row}")
                        continue
                    try:
                        occurrence = int(row.get("occurrence") or 0)
                        audio = json.loads(row["audio"]) if row.get("audio") else {}
                    except (ValueError, TypeError) as e:
                        logger.error(f"Skipping dictation row {row}: {e}")
                        continue
                    record = AudioSampleRecord(
                        collection=WFD_COLLECTION,
                        text=text,
                        audio=audio,
                        occurrence=occurrence,
                        is_hidden=(row.get("is_hidden") or "").strip().lower() == "true",
                        question_type=(row.get("question_type") or "").strip() or None,
                        topic=(row.get("topic") or "").strip() or None,
                        vietnamese_translation=(row.get("vietnamese_translation") or "").strip() or None,
                        reference_id=(row.get("reference_id") or "").strip() or None,
                    )
                    if (row.get("id") or "").strip():
                        record.id = row["id"].strip()
                    session.add(record)
                    loaded += 1
            await session.commit()
        except FileNotFoundError:
            logger.error(f"Dictation seed file not found at: {csv_path}")
            return 0

        logger.info(f"Seeded {loaded} dictation items from {csv_path}.")
        return loaded

    async def list_visible(self, session: AsyncSession) -> List[DictationItem]:
        result = await session.execute(
            select(AudioSampleRecord)
            .filter_by(collection=WFD_COLLECTION, is_hidden=False)
            .order_by(AudioSampleRecord.created_at, AudioSampleRecord.id)
        )
        return [DictationItem.model_validate(r) for r in result.scalars().all()]

    async def list_items(
        self,
        session: AsyncSession,
        filter_option: DictationFilter = DictationFilter.ALL,
        topic: str = "All",
        sort: DictationSort = DictationSort.OCCURRENCE,
    ) -> List[DictationItem]:
        items = await self.list_visible(session)

        if filter_option != DictationFilter.ALL:
            items = [i for i in items if i.question_type == filter_option.value]
        if topic != "All":
            items = [i for i in items if (i.topic or DEFAULT_TOPIC) == topic]

        if sort == DictationSort.ALPHABETICAL:
            items.sort(key=lambda i: i.text.lower())
        elif sort == DictationSort.NEWEST:
            items.sort(key=lambda i: i.created_at or datetime.min, reverse=True)
        elif sort == DictationSort.EASY_TO_DIFFICULT:
            items.sort(key=lambda i: len(i.text))
        else:
            items.sort(key=lambda i: i.occurrence, reverse=True)
        return items

    async def get_item(self, session: AsyncSession, item_id: str) -> Optional[DictationItem]:
        record = await self._get_record(session, item_id)
        return DictationItem.model_validate(record) if record is not None else None

    async def _get_record(self, session: AsyncSession, item_id: str) -> Optional[AudioSampleRecord]:
        record = await session.get(AudioSampleRecord, item_id)
        if record is None or record.collection != WFD_COLLECTION:
            return None
        return record

    async def bulk_upsert(self, session: AsyncSession, items: List[DictationItemIn]) -> DictationBulkResult:
        """
        Replaces the practice list with `items`, matched on text.

        Known texts get the new occurrence and a fresh timestamp, unknown texts are
        added, and every item with an occurrence of 0 is hidden. Items that are not
        in the upload at all are hidden too; nothing is deleted.
        """
        result = await session.execute(select(AudioSampleRecord).filter_by(collection=WFD_COLLECTION))
        existing = {record.text: record for record in result.scalars().all()}
        uploaded = set()
        summary = DictationBulkResult()
        now = datetime.utcnow()

        for item in items:
            uploaded.add(item.text)
            record = existing.get(item.text)
            if record is not None:
                record.occurrence = item.occurrence
                record.created_at = now
                record.is_hidden = item.occurrence == 0
                summary.updated += 1
            else:
                record = AudioSampleRecord(
                    collection=WFD_COLLECTION,
                    text=item.text,
                    audio=item.audio,
                    occurrence=item.occurrence,
                    created_at=now,
                    is_hidden=item.occurrence == 0,
                )
                session.add(record)
                existing[item.text] = record
                summary.added += 1

        for text, record in existing.items():
            if text not in uploaded and not record.is_hidden:
                record.is_hidden = True
                summary.hidden += 1

        await session.commit()
        logger.info(
            f"Bulk dictation upload: {summary.added} added, {summary.updated} updated, {summary.hidden} hidden."
        )
        return summary

    async def update_item(
        self, session: AsyncSession, item_id: str, update: DictationItemUpdate
    ) -> Optional[DictationItem]:
        record = await self._get_record(session, item_id)
        if record is None:
            return None
        for field, value in update.model_dump(exclude_unset=True).items():
            if value is None and field in ("text", "audio", "occurrence", "is_hidden"):
                continue
            setattr(record, field, value)
        await session.commit()
        await session.refresh(record)
        logger.info(f"Updated dictation item {item_id}.")
        return DictationItem.model_validate(record)

    async def set_hidden(self, session: AsyncSession, item_id: str, hidden: bool) -> Optional[DictationItem]:
        return await self.update_item(session, item_id, DictationItemUpdate(is_hidden=hidden))

    async def delete_item(self, session: AsyncSession, item_id: str) -> bool:
        record = await self._get_record(session, item_id)
        if record is None:
            return False
        await session.delete(record)
        await session.commit()
        logger.info(f"Deleted dictation item {item_id}.")
        return True


dictation_service = DictationService()
