# app/utils/db.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from app.utils.config import settings

# Create an async engine
engine = create_async_engine(
    settings.database_url,
    echo=False,  # Set to True to see SQL queries
)

if engine.dialect.name == "sqlite":
    # SQLite leaves foreign keys off unless asked per connection; answers rely on ON DELETE CASCADE.
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Create a session factory
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def init_models(base) -> None:
    """Creates all tables registered on the declarative base."""
    async with engine.begin() as conn:
        await conn.run_sync(base.metadata.create_all)

async def get_db() -> AsyncSession:
    """
    Dependency to get a database session.
    Ensures the session is closed after the request.
    """
    async with AsyncSessionLocal() as session:
        yield session
