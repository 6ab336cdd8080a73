# app/utils/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file before defining settings
load_dotenv()

class Settings(BaseSettings):
    # Database and runtime
    database_url: str = "sqlite+aiosqlite:///./pte_practice.db"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    environment: str = os.getenv("ENVIRONMENT", "development").lower()

    # Seed data loaded at startup when the tables are empty
    question_seed_path: str = "data/questions.csv"
    dictation_seed_path: str = "data/writefromdictation.csv"
    shadowing_seed_path: str = "data/shadowing.csv"

    # Static audio
    shadowing_source_dir: str = "public/shadowingsource"
    recordings_dir: str = "recordings"

    # Placement test
    questions_per_type: int = 3
    prep_seconds: int = 35
    record_seconds: int = 40
    max_blanks: int = 10
    # Sessions untouched for this long are dropped when the next one is created
    session_idle_ttl_seconds: int = 4 * 60 * 60

    # Shadowing listing
    shadowing_page_size: int = 10

    # Scraper
    scrape_timeout_seconds: float = 30.0
    scrape_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    # Maintenance scripts
    repeat_sentence_csv_path: str = "data/repeatsentence.csv"
    dictation_id_csv_path: str = "data/questions_lookup.csv"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

settings = Settings()

if settings.questions_per_type < 1:
    raise ValueError("QUESTIONS_PER_TYPE must be at least 1")
