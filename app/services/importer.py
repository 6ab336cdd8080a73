# app/services/importer.py
"""Bulk maintenance jobs over the audio-sample collections."""
import csv
import hashlib
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tables import AudioSampleRecord
from app.services.dictation_service import REPEAT_SENTENCE_COLLECTION, WFD_COLLECTION
from app.utils.logger import logger

BATCH_SIZE = 450
EXISTENCE_CHUNK_SIZE = 200
DEFAULT_VOICES = ("Brian", "Olivia", "Joanna")

_WHITESPACE = re.compile(r"\s+")


def normalize_text(value) -> str:
    text = "" if value is None else str(value)
    text = text.replace("\ufeff", "").replace("\ufffd", " ")
    text = text.replace("\u00a0", " ").replace("\u202f", " ")
    return _WHITESPACE.sub(" ", text).strip()


def strip_wrapping_quotes(value) -> str:
    text = "" if value is None else str(value)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _first_present(row: Dict[str, str], *keys: str, default: str = "") -> str:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return default


def read_csv_rows(path: str, encoding: str = "latin-1") -> List[Dict[str, str]]:
    with open(path, mode="r", encoding=encoding, newline="") as csvfile:
        return list(csv.DictReader(csvfile))


def repeat_sentence_doc_id(reference_id: str, text: str) -> str:
    key = f"{reference_id}|||{text}"
    return "rs_" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:28]


@dataclass
class ImportItem:
    doc_id: str
    line: int
    reference_id: str
    text: str
    question_type: str


@dataclass
class ImportPlan:
    items: List[ImportItem]
    skipped: int
    duplicates_removed: int


@dataclass
class ImportSummary:
    upserted: int = 0
    inserted: int = 0
    updated: int = 0
    batches: int = 0


def build_repeat_sentence_items(rows: List[Dict[str, str]]) -> ImportPlan:
    """Normalizes CSV rows, drops rows without ID or text and de-duplicates on (ID, text)."""
    unique: Dict[str, ImportItem] = {}
    skipped = 0
    for index, row in enumerate(rows):
        reference_id = normalize_text(_first_present(row, "QuestionNo", "questionNo", "ID")).upper()
        question_type = normalize_text(_first_present(row, "Type", "type", default="RS")).upper() or "RS"
        text = normalize_text(strip_wrapping_quotes(_first_present(row, "Content", "content", "Text")))

        if not reference_id or not text:
            skipped += 1
            continue

        key = f"{reference_id}|||{text}"
        if key not in unique:
            unique[key] = ImportItem(
                doc_id=repeat_sentence_doc_id(reference_id, text),
                line=index + 2,  # header is line 1
                reference_id=reference_id,
                text=text,
                question_type=question_type,
            )
    return ImportPlan(
        items=list(unique.values()),
        skipped=skipped,
        duplicates_removed=len(rows) - skipped - len(unique),
    )


async def _existing_ids(session: AsyncSession, doc_ids: List[str]) -> set:
    found = set()
    for start in range(0, len(doc_ids), EXISTENCE_CHUNK_SIZE):
        chunk = doc_ids[start:start + EXISTENCE_CHUNK_SIZE]
        result = await session.execute(select(AudioSampleRecord.id).where(AudioSampleRecord.id.in_(chunk)))
        found.update(result.scalars().all())
    return found


async def import_repeat_sentences(
    session: AsyncSession,
    plan: ImportPlan,
    import_source: str = "data/repeatsentence.csv",
) -> ImportSummary:
    """Upserts the planned items, committing every BATCH_SIZE records."""
    summary = ImportSummary()
    if not plan.items:
        logger.warning("No valid rows to import.")
        return summary

    existing = await _existing_ids(session, [item.doc_id for item in plan.items])
    logger.info(f"Already present before import: {len(existing)}")

    pending = 0
    for item in plan.items:
        record = await session.get(AudioSampleRecord, item.doc_id)
        if record is None:
            record = AudioSampleRecord(
                id=item.doc_id,
                collection=REPEAT_SENTENCE_COLLECTION,
                audio={voice: "" for voice in DEFAULT_VOICES},
            )
            session.add(record)
        record.reference_id = item.reference_id
        record.text = item.text
        record.occurrence = 1
        record.is_hidden = False
        record.question_type = item.question_type
        record.import_source = import_source

        pending += 1
        if pending == BATCH_SIZE:
            await session.commit()
            summary.batches += 1
            logger.info(f"Committed batch #{summary.batches} ({pending} records)")
            pending = 0

    if pending:
        await session.commit()
        summary.batches += 1
        logger.info(f"Committed batch #{summary.batches} ({pending} records)")

    summary.upserted = len(plan.items)
    summary.updated = len(existing)
    summary.inserted = summary.upserted - summary.updated
    return summary


def load_question_number_map(path: str, encoding: str = "utf-8") -> Dict[str, str]:
    """Maps trimmed CSV `Content` to trimmed `QuestionNo`."""
    mapping = {}
    for row in read_csv_rows(path, encoding=encoding):
        content = (row.get("Content") or "").strip()
        question_no = (row.get("QuestionNo") or "").strip()
        if content:
            mapping[content] = question_no
    logger.info(f"CSV file processed. Found {len(mapping)} questions.")
    return mapping


@dataclass
class BackfillSummary:
    processed: int = 0
    updated: int = 0
    not_found: int = 0
    not_found_texts: List[str] = field(default_factory=list)


async def backfill_dictation_ids(session: AsyncSession, mapping: Dict[str, str]) -> BackfillSummary:
    """Sets reference_id on every dictation item whose trimmed text appears in the mapping."""
    result = await session.execute(select(AudioSampleRecord).filter_by(collection=WFD_COLLECTION))
    records = result.scalars().all()
    summary = BackfillSummary(processed=len(records))

    for record in records:
        text = (record.text or "").strip()
        question_no: Optional[str] = mapping.get(text)
        if question_no is not None:
            record.reference_id = question_no
            summary.updated += 1
            logger.debug(f"Matched: {text[:50]!r} -> {question_no}")
        else:
            summary.not_found += 1
            summary.not_found_texts.append(text[:100])
            logger.debug(f"Not found in CSV: {text[:50]!r}")

    await session.commit()
    return summary


async def sync_hidden_flags(session: AsyncSession) -> Tuple[int, int]:
    """Hides dictation items that never occurred and shows the rest. Returns (hidden, visible)."""
    result = await session.execute(select(AudioSampleRecord).filter_by(collection=WFD_COLLECTION))
    hidden = visible = 0
    for record in result.scalars().all():
        record.is_hidden = (record.occurrence or 0) == 0
        if record.is_hidden:
            hidden += 1
        else:
            visible += 1
    await session.commit()
    return hidden, visible
