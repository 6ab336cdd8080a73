# app/endpoints/scrape.py
import httpx
from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from typing import Optional

from app.services import scraper
from app.utils.config import settings
from app.utils.logger import logger

router = APIRouter()

@router.get("/scrape")
async def scrape_page(url: Optional[str] = None):
    """Fetches a practice page and extracts its audio source and read-aloud passage."""
    if not url or not url.strip():
        raise HTTPException(status_code=400, detail="URL parameter is required")
    try:
        clean_url = scraper.normalize_url(url)
    except scraper.InvalidScrapeUrl as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await scraper.scrape(clean_url)
    except httpx.HTTPError as e:
        logger.error(f"Scraping error for {clean_url}: {e}")
        content = {"error": "Failed to scrape the webpage"}
        if not settings.is_production:
            content["details"] = str(e)
        return JSONResponse(status_code=500, content=content)
