# app/endpoints/submissions.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models.submission import NotesUpdate, SubmissionDetail, SubmissionSummary
from app.services.submission_service import submission_service
from app.utils.db import get_db
from app.utils.logger import logger

router = APIRouter()

@router.get("/", response_model=List[SubmissionSummary])
async def list_submissions(db: AsyncSession = Depends(get_db)):
    """Lists submissions, newest first."""
    return await submission_service.list_submissions(db)

@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_submission(submission_id: str, db: AsyncSession = Depends(get_db)):
    """Returns a submission with its answers and per-category scores."""
    submission = await submission_service.get_submission(db, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission

@router.put("/{submission_id}/notes")
async def update_notes(submission_id: str, update: NotesUpdate, db: AsyncSession = Depends(get_db)):
    if not await submission_service.update_notes(db, submission_id, update.notes):
        raise HTTPException(status_code=404, detail="Submission not found")
    return {"id": submission_id, "notes": update.notes}

@router.delete("/{submission_id}", status_code=204)
async def delete_submission(submission_id: str, db: AsyncSession = Depends(get_db)):
    logger.debug(f"Deleting submission {submission_id}")
    if not await submission_service.delete_submission(db, submission_id):
        raise HTTPException(status_code=404, detail="Submission not found")
    return Response(status_code=204)
