"""
Database connection and session management.
Provides SQLAlchemy engine, session, and base class for models.
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings

def _engine_options(url: str) -> dict:
    """SQLite connections are shared with the threadpool that runs request handlers."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}

# Create SQLAlchemy engine for database connection
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Create session factory for database sessions
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

# Create base class for declarative models
Base = declarative_base()

def get_db():
    """
    Database dependency - Creates and yields a database session.

    The session is automatically closed after the request is processed,
    even if an exception occurs during request handling.

    Yields:
        SQLAlchemy Session: Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def check_database_connection() -> None:
    """
    Run a trivial statement against the database.

    Raises:
        sqlalchemy.exc.OperationalError: If the database is unreachable
    """
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
