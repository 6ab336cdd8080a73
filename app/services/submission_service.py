# app/services/submission_service.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import QuestionType
from app.models.submission import (
    Answer,
    PersonalInfo,
    Submission,
    SubmissionDetail,
    SubmissionSummary,
)
from app.models.tables import AnswerRecord, SubmissionRecord
from app.services.dictation_service import dictation_service
from app.services.question_service import question_service, dictation_item_to_question
from app.services.scoring import score_submission
from app.utils.logger import logger


def _personal_info(record: SubmissionRecord) -> PersonalInfo:
    return PersonalInfo(
        full_name=record.full_name,
        email=record.email,
        phone=record.phone,
        target=record.target,
    )


def to_submission(record: SubmissionRecord) -> Submission:
    return Submission(
        id=record.id,
        personal_info=_personal_info(record),
        created_at=record.created_at,
        status=record.status,
        notes=record.notes,
        answers=[Answer.model_validate(a) for a in record.answers],
    )


class SubmissionService:
    async def create_submission(self, session: AsyncSession, personal_info: PersonalInfo, answers: List[Answer]) -> str:
        record = SubmissionRecord(
            full_name=personal_info.full_name.strip(),
            email=personal_info.email.strip(),
            phone=personal_info.phone.strip(),
            target=personal_info.target.strip(),
            status="completed",
        )
        record.answers = [AnswerRecord(**answer.model_dump()) for answer in answers]
        session.add(record)
        await session.commit()
        logger.info(f"Stored submission {record.id} with {len(answers)} answers.")
        return record.id

    async def _load(self, session: AsyncSession, submission_id: str) -> Optional[SubmissionRecord]:
        result = await session.execute(
            select(SubmissionRecord)
            .where(SubmissionRecord.id == submission_id)
            .options(selectinload(SubmissionRecord.answers))
        )
        return result.scalars().first()

    async def list_submissions(self, session: AsyncSession) -> List[SubmissionSummary]:
        result = await session.execute(select(SubmissionRecord).order_by(SubmissionRecord.created_at.desc()))
        return [
            SubmissionSummary(
                id=r.id,
                personal_info=_personal_info(r),
                created_at=r.created_at,
                status=r.status,
                notes=r.notes,
            )
            for r in result.scalars().all()
        ]

    async def get_submission(self, session: AsyncSession, submission_id: str) -> Optional[SubmissionDetail]:
        record = await self._load(session, submission_id)
        if record is None:
            return None
        submission = to_submission(record)

        question_ids = [a.question_id for a in submission.answers]
        bank = await question_service.get_questions_by_ids(session, question_ids)
        for answer in submission.answers:
            if answer.question_type == QuestionType.WFD.value and answer.question_id not in bank:
                item = await dictation_service.get_item(session, answer.question_id)
                if item is not None:
                    bank[item.id] = dictation_item_to_question(item)

        scores = score_submission(submission, bank)
        return SubmissionDetail(**submission.model_dump(), scores=scores)

    async def update_notes(self, session: AsyncSession, submission_id: str, notes: str) -> bool:
        record = await session.get(SubmissionRecord, submission_id)
        if record is None:
            return False
        record.notes = notes
        await session.commit()
        logger.info(f"Updated notes on submission {submission_id}.")
        return True

    async def delete_submission(self, session: AsyncSession, submission_id: str) -> bool:
        record = await self._load(session, submission_id)
        if record is None:
            return False
        await session.delete(record)
        await session.commit()
        logger.info(f"Deleted submission {submission_id}.")
        return True


submission_service = SubmissionService()
