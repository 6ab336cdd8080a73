# app/endpoints/shadowing.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.services import shadowing_service
from app.utils.db import get_db
from app.utils.logger import logger

router = APIRouter()

@router.get("/shadowing")
async def list_shadowing_paragraphs(page: int = 1, db: AsyncSession = Depends(get_db)):
    if page < 1:
        raise HTTPException(status_code=400, detail="page must be 1 or greater")
    return await shadowing_service.get_paragraph_page(db, page)

@router.get("/describe-image-shadowing")
async def describe_image_shadowing():
    try:
        return shadowing_service.describe_image_listing()
    except shadowing_service.ListingDirectoryNotFound:
        raise HTTPException(status_code=404, detail="Describe Image directory not found")
    except OSError as e:
        logger.exception(f"Error reading describe image files: {e}")
        raise HTTPException(status_code=500, detail="Failed to read describe image files")

@router.get("/retell-lecture")
async def retell_lecture():
    try:
        return shadowing_service.retell_lecture_listing()
    except shadowing_service.ListingDirectoryNotFound:
        raise HTTPException(status_code=404, detail="Retell lecture directory not found")
    except OSError as e:
        logger.exception(f"Error reading retell lecture files: {e}")
        raise HTTPException(status_code=500, detail="Failed to read retell lecture files")
