# FastAPI entry point; wires routers, startup seeding and the application error handler
# app/main.py
import os
import sys
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Add project root to sys.path to allow for absolute imports
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Import routers and services
from app.endpoints import (
    questions as questions_router,
    dictation as dictation_router,
    placement_test as placement_test_router,
    submissions as submissions_router,
    shadowing as shadowing_router,
    scrape as scrape_router,
    pdf as pdf_router,
)
from app.services.dictation_service import dictation_service
from app.services.question_service import question_service
from app.services.recording_store import RECORDINGS_URL_PREFIX, recording_store
from app.services.shadowing_service import PUBLIC_PREFIX, load_seed_paragraphs
from app.utils.config import settings
from app.utils.logger import logger
from app.utils.db import AsyncSessionLocal, init_models
from app.models.tables import Base

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("PTE Practice API starting up...")

    # Create database tables if they don't exist
    await init_models(Base)

    logger.info("Seeding question bank and practice material...")
    async with AsyncSessionLocal() as session:
        await question_service.load_seed_questions(session)
        await dictation_service.load_seed_items(session)
        await load_seed_paragraphs(session)

    recording_store.ensure_directory()
    logger.info("Startup complete.")
    yield
    # On shutdown
    logger.info("PTE Practice API shutting down...")

# --- FastAPI App Initialization ---
app = FastAPI(
    title="PTE Practice API",
    description="Placement test, shadowing and dictation practice backend.",
    version="1.0.0",
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your frontend's domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Unhandled errors ---
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Logs any exception that escaped an endpoint and tells the client to reload."""
    logger.exception(f"Uncaught error on {request.method} {request.url.path}: {exc}")
    content = {
        "error": "Something went wrong",
        "message": str(exc) or "An unexpected error occurred",
        "reload": True,
    }
    if not settings.is_production:
        content["trace"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=500, content=content)

# --- API Routers ---
app.include_router(questions_router.router, prefix="/questions", tags=["Questions"])
app.include_router(dictation_router.router, prefix="/dictation", tags=["Write From Dictation"])
app.include_router(placement_test_router.router, prefix="/placement-test", tags=["Placement Test"])
app.include_router(submissions_router.router, prefix="/submissions", tags=["Submissions"])
app.include_router(shadowing_router.router, prefix="/api", tags=["Shadowing"])
app.include_router(scrape_router.router, prefix="/api", tags=["Scraper"])
app.include_router(pdf_router.router, prefix="/api", tags=["PDF"])

# --- Static audio ---
app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.shadowing_source_dir, check_dir=False), name="shadowingsource")
app.mount(RECORDINGS_URL_PREFIX, StaticFiles(directory=settings.recordings_dir, check_dir=False), name="recordings")

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {"message": "Welcome to the PTE Practice API"}
