# app/services/recording_store.py
import asyncio
import time
from pathlib import Path
from typing import Optional

from app.utils.config import settings
from app.utils.logger import logger

RECORDINGS_URL_PREFIX = "/recordings"


def extension_for(content_type: Optional[str]) -> str:
    content_type = content_type or ""
    if "webm" in content_type:
        return ".webm"
    if "mp4" in content_type:
        return ".mp4"
    return ".ogg"


def recording_filename(question_number: int, content_type: Optional[str], timestamp_ms: Optional[int] = None) -> str:
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"placement_test_ra_{question_number}_{timestamp_ms}{extension_for(content_type)}"


class RecordingStore:
    """Writes placement-test recordings under the recordings directory."""

    def __init__(self, directory: Optional[str] = None):
        self._directory = directory

    @property
    def directory(self) -> Path:
        return Path(self._directory or settings.recordings_dir)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    async def save(self, data: bytes, filename: str) -> str:
        """Stores the audio and returns the URL it is served from."""
        self.ensure_directory()
        target = self.directory / filename
        await asyncio.to_thread(target.write_bytes, data)
        logger.info(f"Stored recording {filename} ({len(data)} bytes).")
        return f"{RECORDINGS_URL_PREFIX}/{filename}"


recording_store = RecordingStore()
