# app/endpoints/dictation.py
from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models.enums import DictationFilter, DictationSort
from app.models.question import DictationBulkResult, DictationItem, DictationItemIn, DictationItemUpdate
from app.services.dictation_scoring import DictationResult, evaluate_write_from_dictation, score_percentage
from app.services.dictation_service import dictation_service
from app.utils.db import get_db

router = APIRouter()

class DictationCheckRequest(BaseModel):
    answer: str

class DictationCheckResponse(DictationResult):
    percentage: Optional[float] = None
    correct_text: str

class HiddenUpdate(BaseModel):
    is_hidden: bool

@router.get("/", response_model=List[DictationItem])
async def list_dictation_items(
    filter: DictationFilter = DictationFilter.ALL,
    topic: str = "All",
    sort: DictationSort = DictationSort.OCCURRENCE,
    db: AsyncSession = Depends(get_db),
):
    return await dictation_service.list_items(db, filter, topic, sort)

@router.get("/{item_id}", response_model=DictationItem)
async def get_dictation_item(item_id: str, db: AsyncSession = Depends(get_db)):
    item = await dictation_service.get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Dictation item not found")
    return item

@router.post("/{item_id}/check", response_model=DictationCheckResponse)
async def check_dictation_answer(item_id: str, request: DictationCheckRequest, db: AsyncSession = Depends(get_db)):
    """Scores a practice answer word by word and returns display tokens for the feedback view."""
    item = await dictation_service.get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Dictation item not found")
    result = evaluate_write_from_dictation(item.text, request.answer)
    return DictationCheckResponse(
        **result.model_dump(),
        percentage=score_percentage(result),
        correct_text=item.text,
    )

@router.post("/bulk", response_model=DictationBulkResult)
async def bulk_upload_dictation_items(items: List[DictationItemIn], db: AsyncSession = Depends(get_db)):
    """
    Uploads the full practice list. Texts already present get the new occurrence;
    anything left out of the upload, or with an occurrence of 0, is hidden.
    """
    if not items:
        raise HTTPException(status_code=400, detail="Please provide at least one dictation item")
    return await dictation_service.bulk_upsert(db, items)

@router.put("/{item_id}", response_model=DictationItem)
async def update_dictation_item(item_id: str, update: DictationItemUpdate, db: AsyncSession = Depends(get_db)):
    item = await dictation_service.update_item(db, item_id, update)
    if not item:
        raise HTTPException(status_code=404, detail="Dictation item not found")
    return item

@router.put("/{item_id}/hidden", response_model=DictationItem)
async def set_dictation_item_hidden(item_id: str, request: HiddenUpdate, db: AsyncSession = Depends(get_db)):
    item = await dictation_service.set_hidden(db, item_id, request.is_hidden)
    if not item:
        raise HTTPException(status_code=404, detail="Dictation item not found")
    return item

@router.delete("/{item_id}", status_code=204)
async def delete_dictation_item(item_id: str, db: AsyncSession = Depends(get_db)):
    if not await dictation_service.delete_item(db, item_id):
        raise HTTPException(status_code=404, detail="Dictation item not found")
    return Response(status_code=204)
