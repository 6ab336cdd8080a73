# app/services/shadowing_service.py
import csv
import os
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tables import ShadowingParagraph
from app.utils.config import settings
from app.utils.logger import logger

AVAILABLE_VOICES = ["brian", "joanna", "olivia"]
PUBLIC_PREFIX = "/shadowingsource"


class ListingDirectoryNotFound(FileNotFoundError):
    pass


def parse_audio_filename(filename: str) -> Optional[tuple]:
    """Splits `{number}_{voice}_{text}.mp3` into (number, voice, text); None if it does not fit."""
    if not filename.endswith(".mp3"):
        return None
    parts = filename.split("_")
    if len(parts) < 3:
        return None
    try:
        number = int(parts[0])
    except ValueError:
        return None
    voice = parts[1].lower()
    text = "_".join(parts[2:]).replace(".mp3", "").replace("_", " ")
    return number, voice, text


def build_sentence_listing(directory: str, public_dir: str, listing_id: str, name: str) -> dict:
    """Groups the mp3 files of a directory into numbered sentences with one URL per voice."""
    if not os.path.isdir(directory):
        raise ListingDirectoryNotFound(directory)

    sentences: Dict[int, dict] = {}
    for filename in sorted(os.listdir(directory)):
        parsed = parse_audio_filename(filename)
        if parsed is None:
            if filename.endswith(".mp3"):
                logger.warning(f"Skipping audio file with unexpected name: {filename}")
            continue
        number, voice, text = parsed
        sentence = sentences.setdefault(number, {"number": number, "text": text, "voices": {}})
        sentence["voices"][voice] = f"{PUBLIC_PREFIX}/{public_dir}/{filename}"

    ordered = [sentences[n] for n in sorted(sentences)]
    return {
        "id": listing_id,
        "name": name,
        "sentences": ordered,
        "fullText": " ".join(s["text"] for s in ordered),
        "availableVoices": AVAILABLE_VOICES,
    }


def describe_image_listing() -> dict:
    return build_sentence_listing(
        os.path.join(settings.shadowing_source_dir, "di"), "di",
        "describe-image-1", "Describe Image Practice",
    )


def retell_lecture_listing() -> dict:
    return build_sentence_listing(
        os.path.join(settings.shadowing_source_dir, "retelllecture"), "retelllecture",
        "retell-lecture-1", "Retell Lecture Practice",
    )


async def load_seed_paragraphs(session: AsyncSession, csv_path: Optional[str] = None) -> int:
    csv_path = csv_path if csv_path is not None else settings.shadowing_seed_path
    existing = await session.scalar(select(func.count()).select_from(ShadowingParagraph))
    if existing:
        return 0
    loaded = 0
    try:
        with open(csv_path, mode="r", encoding="utf-8") as csvfile:
            for row in csv.DictReader(csvfile):
                if not (row.get("name") or "").strip():
                    logger.warning(f"Skipping shadowing row without name: {row}")
                    continue
                session.add(ShadowingParagraph(
                    name=row["name"].strip(),
                    text=(row.get("text") or "").strip(),
                    url=(row.get("url") or "").strip() or None,
                ))
                loaded += 1
        await session.commit()
    except FileNotFoundError:
        logger.error(f"Shadowing seed file not found at: {csv_path}")
        return 0
    logger.info(f"Seeded {loaded} shadowing paragraphs from {csv_path}.")
    return loaded


async def get_paragraph_page(session: AsyncSession, page: int, page_size: Optional[int] = None) -> List[dict]:
    page_size = page_size or settings.shadowing_page_size
    result = await session.execute(
        select(ShadowingParagraph)
        .order_by(ShadowingParagraph.name, ShadowingParagraph.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return [{"id": p.id, "text": p.text, "url": p.url, "name": p.name} for p in result.scalars().all()]
