# app/endpoints/pdf.py
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.services.pdf_report import render_submission_report, render_test_pdf
from app.services.submission_service import submission_service
from app.utils.db import get_db
from app.utils.logger import logger

router = APIRouter()

class PdfRequest(BaseModel):
    submission_id: Optional[str] = None

@router.post("/generate-pdf")
async def generate_pdf(request: Optional[PdfRequest] = None, db: AsyncSession = Depends(get_db)):
    """Returns a PDF attachment: a submission report, or a test page when no submission is given."""
    if request is not None and request.submission_id:
        submission = await submission_service.get_submission(db, request.submission_id)
        if not submission:
            raise HTTPException(status_code=404, detail="Submission not found")
        content = render_submission_report(submission)
        filename = f"submission_{submission.id}.pdf"
    else:
        content = render_test_pdf()
        filename = "test.pdf"

    logger.info(f"Generated {filename} ({len(content)} bytes).")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
