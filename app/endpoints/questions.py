# app/endpoints/questions.py
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models.enums import QuestionType
from app.models.question import Question, QuestionCreate
from app.services.question_service import question_service, QuestionValidationError
from app.utils.db import get_db
from app.utils.logger import logger

router = APIRouter()

@router.get("/", response_model=List[Question])
async def get_all_questions(type: Optional[QuestionType] = None, db: AsyncSession = Depends(get_db)):
    questions = await question_service.get_all_questions(db, type)
    if not questions:
        raise HTTPException(status_code=404, detail="No questions found or loaded.")
    return questions

@router.get("/{question_id}", response_model=Question)
async def get_question(question_id: str, db: AsyncSession = Depends(get_db)):
    question = await question_service.get_question_by_id(db, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question

@router.post("/", response_model=Question, status_code=201)
async def create_question(payload: QuestionCreate, db: AsyncSession = Depends(get_db)):
    """Adds a question to the bank after checking it against the rules of its type."""
    try:
        return await question_service.create_question(db, payload)
    except QuestionValidationError as e:
        logger.info(f"Rejected {payload.type.value} question: {e}")
        raise HTTPException(status_code=400, detail=str(e))
