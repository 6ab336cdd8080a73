# app/state_manager.py
import uuid
from typing import Dict

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.exam_flow import ExamSession
from app.services.question_service import question_service
from app.utils.config import settings
from app.utils.logger import logger

# In-memory placement-test sessions, keyed by session id. Lost on restart.
exam_sessions: Dict[str, ExamSession] = {}


def _drop(exam: ExamSession) -> None:
    if exam.pending_upload is not None and not exam.pending_upload.done():
        exam.pending_upload.cancel()


def sweep_idle_exam_sessions() -> int:
    """Drops sessions nobody has touched within the idle TTL. Returns how many were dropped."""
    idle = [
        session_id for session_id, exam in exam_sessions.items()
        if exam.idle_seconds() > settings.session_idle_ttl_seconds
    ]
    for session_id in idle:
        _drop(exam_sessions.pop(session_id))
    if idle:
        logger.info(f"Dropped {len(idle)} idle exam session(s).")
    return len(idle)


async def create_exam_session(session: AsyncSession) -> ExamSession:
    """Draws a fresh question set and registers a new session in the collecting-info phase."""
    sweep_idle_exam_sessions()
    questions = await question_service.pick_placement_questions(session)
    if not questions:
        raise HTTPException(
            status_code=404,
            detail="No questions available. Please add questions in the manage questions page.",
        )
    exam = ExamSession(session_id=uuid.uuid4().hex, questions=questions)
    exam_sessions[exam.session_id] = exam
    logger.info(f"Created exam session {exam.session_id} with {len(questions)} questions.")
    return exam


def get_exam_session(session_id: str) -> ExamSession:
    exam = exam_sessions.get(session_id)
    if exam is None:
        raise HTTPException(status_code=404, detail="Exam session not found")
    return exam


def release_exam_session(session_id: str) -> None:
    """Removes a finished session; unknown ids are ignored."""
    exam = exam_sessions.pop(session_id, None)
    if exam is not None:
        _drop(exam)
        logger.debug(f"Released exam session {session_id}.")


def discard_exam_session(session_id: str) -> None:
    exam = exam_sessions.pop(session_id, None)
    if exam is None:
        raise HTTPException(status_code=404, detail="Exam session not found")
    _drop(exam)
    logger.info(f"Discarded exam session {session_id}.")
