# app/services/question_service.py
import csv
import json
import random
from typing import List, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PLACEMENT_ORDER, QuestionType
from app.models.question import (
    Question,
    QuestionCreate,
    DictationItem,
    BLANK_MARKER,
    normalize_correct_answers,
)
from app.models.tables import QuestionRecord
from app.services.dictation_service import dictation_service
from app.utils.logger import logger
from app.utils.config import settings


class QuestionValidationError(ValueError):
    """Raised when a new question payload is inconsistent."""


def _reject_commas(options) -> None:
    # Answers are stored comma-joined per blank.
    if any("," in option for option in options):
        raise QuestionValidationError("Options cannot contain commas")


class QuestionService:
    def __init__(self):
        logger.info("QuestionService initialized (data loading deferred).")

    async def load_seed_questions(self, session: AsyncSession, csv_path: Optional[str] = None) -> int:
        """Loads questions from the seed CSV when the table is still empty."""
        csv_path = csv_path if csv_path is not None else settings.question_seed_path
        existing = await session.scalar(select(func.count()).select_from(QuestionRecord))
        if existing:
            logger.info(f"Question bank already holds {existing} questions; skipping seed.")
            return 0

        loaded = 0
        try:
            with open(csv_path, mode="r", encoding="utf-8") as csvfile:
                reader = csv.DictReader(csvfile)
                for row in reader:
                    try:
                        question_type = QuestionType(row["type"].strip())
                        options = json.loads(row["options"]) if row.get("options") else None
                        correct_answers = json.loads(row["correct_answers"]) if row.get("correct_answers") else []
                        record = QuestionRecord(
                            type=question_type.value,
                            content=row["content"].strip(),
                            options=options,
                            correct_answers=normalize_correct_answers(correct_answers),
                            answer=(row.get("answer") or "").strip() or None,
                            difficulty=(row.get("difficulty") or "").strip() or None,
                            task_number=(row.get("task_number") or "").strip() or None,
                        )
                        if (row.get("id") or "").strip():
                            record.id = row["id"].strip()
                        session.add(record)
                        loaded += 1
                    except (json.JSONDecodeError, TypeError):
                        logger.error(f"Skipping row due to invalid JSON in options/correct_answers: {row}")
                    except ValueError as ve:
                        logger.error(f"Skipping row due to ValueError: {row} - Error: {ve}")
                    except KeyError as ke:
                        logger.error(f"Skipping row due to missing key: {row} - Missing Key: {ke}")
            await session.commit()
        except FileNotFoundError:
            logger.error(f"Question seed file not found at: {csv_path}")
            return 0

        logger.info(f"Seeded {loaded} questions from {csv_path}.")
        if not loaded:
            logger.warning(f"No questions loaded from {csv_path}. Check the file format and content.")
        return loaded

    async def get_all_questions(self, session: AsyncSession, question_type: Optional[QuestionType] = None) -> List[Question]:
        query = select(QuestionRecord).order_by(QuestionRecord.created_at, QuestionRecord.id)
        if question_type is not None:
            query = query.filter_by(type=question_type.value)
        result = await session.execute(query)
        return [Question.model_validate(r) for r in result.scalars().all()]

    async def get_question_by_id(self, session: AsyncSession, question_id: str) -> Optional[Question]:
        record = await session.get(QuestionRecord, question_id)
        return Question.model_validate(record) if record else None

    async def get_questions_by_ids(self, session: AsyncSession, question_ids: List[str]) -> Dict[str, Question]:
        if not question_ids:
            return {}
        result = await session.execute(select(QuestionRecord).where(QuestionRecord.id.in_(question_ids)))
        return {r.id: Question.model_validate(r) for r in result.scalars().all()}

    def validate_question(self, payload: QuestionCreate) -> None:
        """Checks the payload against the rules of its question type."""
        if not payload.content.strip():
            raise QuestionValidationError("Please enter the question content")

        blank_count = payload.content.count(BLANK_MARKER)

        if payload.type == QuestionType.RWFIB:
            if blank_count == 0:
                raise QuestionValidationError(f"Content must contain at least one blank ({BLANK_MARKER})")
            groups = payload.options if isinstance(payload.options, dict) else None
            if groups is None or len(groups) != blank_count:
                raise QuestionValidationError("Please provide one option group per blank")
            _reject_commas(option for group in groups.values() for option in group)
            if len(payload.correct_answers) != blank_count:
                raise QuestionValidationError("Please select correct answers for all blanks")
            for index, correct in enumerate(payload.correct_answers):
                group = groups.get(str(index)) or []
                if len(group) < 2:
                    raise QuestionValidationError(f"Blank {index + 1} needs at least 2 options")
                if correct not in group:
                    raise QuestionValidationError(f"Correct answer for blank {index + 1} must be one of its options")

        elif payload.type == QuestionType.RFIB:
            if not payload.task_number:
                raise QuestionValidationError("Please enter a task number")
            if blank_count == 0:
                raise QuestionValidationError(f"Content must contain at least one blank ({BLANK_MARKER})")
            options = payload.options if isinstance(payload.options, list) else []
            if len(options) < blank_count * 2:
                raise QuestionValidationError(f"Please provide at least {blank_count * 2} options for the blanks")
            _reject_commas(options)
            if len(payload.correct_answers) != blank_count:
                raise QuestionValidationError("Please select correct answers for all blanks")
            if any(answer not in options for answer in payload.correct_answers):
                raise QuestionValidationError("All correct answers must be from the options list")

        elif payload.type == QuestionType.WFD:
            if not (payload.answer or "").strip():
                raise QuestionValidationError("Please enter the dictation answer")

    async def create_question(self, session: AsyncSession, payload: QuestionCreate) -> Question:
        self.validate_question(payload)
        record = QuestionRecord(
            type=payload.type.value,
            content=payload.content.strip(),
            options=payload.options,
            correct_answers=payload.correct_answers,
            answer=payload.answer,
            difficulty=payload.difficulty,
            task_number=payload.task_number,
        )
        session.add(record)
        await session.commit()
        await session.refresh(record)
        logger.info(f"Added {record.type} question {record.id}.")
        return Question.model_validate(record)

    async def pick_placement_questions(self, session: AsyncSession, per_type: Optional[int] = None) -> List[Question]:
        """
        Draws up to `per_type` random questions of each type, in placement order,
        and numbers them so each type keeps its own block (1-3, 4-6, 7-9, 10-12).
        """
        per_type = per_type or settings.questions_per_type
        picked: List[Question] = []
        for block, question_type in enumerate(PLACEMENT_ORDER):
            if question_type == QuestionType.WFD:
                pool = [dictation_item_to_question(item) for item in await dictation_service.list_visible(session)]
            else:
                pool = await self.get_all_questions(session, question_type)
            chosen = random.sample(pool, min(per_type, len(pool)))
            for offset, question in enumerate(chosen):
                picked.append(question.model_copy(update={"question_number": block * per_type + offset + 1}))
        logger.debug(f"Picked {len(picked)} placement questions.")
        return picked


def dictation_item_to_question(item: DictationItem) -> Question:
    return Question(
        id=item.id,
        type=QuestionType.WFD,
        content=item.text,
        answer=item.text,
        audio=item.audio or None,
    )


question_service = QuestionService()
