# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
import shutil
import os
import sys
import tempfile
import logging

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, PROJECT_ROOT)

# --- Test data and scratch locations ---
TEST_QUESTIONS_CSV = os.path.join(PROJECT_ROOT, "data", "test_questions.csv")
TEST_DICTATION_CSV = os.path.join(PROJECT_ROOT, "data", "test_writefromdictation.csv")
TEST_SHADOWING_CSV = os.path.join(PROJECT_ROOT, "data", "test_shadowing.csv")
TEST_TMP_DIR = tempfile.mkdtemp(prefix="pte_practice_test_")

# The engine is built at import time, so the environment must be set before any app import.
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(TEST_TMP_DIR, 'test.db')}"
os.environ["QUESTION_SEED_PATH"] = TEST_QUESTIONS_CSV
os.environ["DICTATION_SEED_PATH"] = TEST_DICTATION_CSV
os.environ["SHADOWING_SEED_PATH"] = TEST_SHADOWING_CSV
os.environ["RECORDINGS_DIR"] = os.path.join(TEST_TMP_DIR, "recordings")
os.environ["SHADOWING_SOURCE_DIR"] = os.path.join(TEST_TMP_DIR, "shadowingsource")
os.environ["ENVIRONMENT"] = "development"

from app.utils.config import settings
from app.utils.db import AsyncSessionLocal
from app.state_manager import exam_sessions


@pytest.fixture(scope="session", autouse=True)
def check_test_data():
    for path in (TEST_QUESTIONS_CSV, TEST_DICTATION_CSV, TEST_SHADOWING_CSV):
        if not os.path.exists(path):
            pytest.fail(f"Test data file not found at: {path}")
    logger.info(f"Using database {settings.database_url}")
    yield
    shutil.rmtree(TEST_TMP_DIR, ignore_errors=True)


# --- TestClient Fixture ---
@pytest.fixture(scope="session")
def client(check_test_data):
    """
    Creates the TestClient after the environment points at the test data.
    Startup seeds the question bank, dictation items and shadowing paragraphs.
    """
    from app.main import app
    logger.info("Creating TestClient instance for the session.")
    with TestClient(app) as c:
        yield c


@pytest.fixture
def run_db(client):
    """Runs `fn(session)` on the app's event loop and returns its result."""
    def _run(fn):
        async def _with_session():
            async with AsyncSessionLocal() as session:
                return await fn(session)
        return client.portal.call(_with_session)
    return _run


# --- State Reset Fixture ---
@pytest.fixture(autouse=True)
def reset_exam_sessions():
    exam_sessions.clear()
    yield
    exam_sessions.clear()


class FakeClock:
    """Manually advanced replacement for time.monotonic."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()
