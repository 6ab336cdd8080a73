# app/services/scraper.py
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from app.utils.config import settings
from app.utils.logger import logger


class InvalidScrapeUrl(ValueError):
    pass


def normalize_url(raw_url: str) -> str:
    """Trims the URL, defaults the scheme to https and checks it has a host."""
    url = raw_url.strip()
    if not url.startswith("http://") and not url.startswith("https://"):
        url = "https://" + url
    try:
        parsed = urlparse(url)
        parsed.port
    except ValueError:
        raise InvalidScrapeUrl(f"Invalid URL format: {url}")
    if not parsed.hostname or any(ch.isspace() for ch in parsed.netloc):
        raise InvalidScrapeUrl(f"Invalid URL format: {url}")
    return url


async def fetch_page(url: str) -> str:
    async with httpx.AsyncClient(
        timeout=settings.scrape_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.scrape_user_agent},
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


def extract_practice_content(html: str, base_url: str) -> dict:
    soup = BeautifulSoup(html, "html.parser")

    audio_src: Optional[str] = None
    audio = soup.select_one('audio[data-testid="audio"]')
    if audio is not None and audio.get("src"):
        audio_src = urljoin(base_url, audio["src"])
    else:
        logger.debug(f"Audio element not found on {base_url}")

    ra_body: Optional[str] = None
    body = soup.select_one("div.ra-body")
    if body is not None:
        ra_body = body.get_text().strip() or None
    else:
        logger.debug(f"RA body element not found on {base_url}")

    return {"audioSrc": audio_src, "raBodyContent": ra_body}


async def scrape(url: str) -> dict:
    logger.info(f"Scraping URL: {url}")
    html = await fetch_page(url)
    return extract_practice_content(html, url)
