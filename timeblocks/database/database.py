"""Database engine and sessions for timeblocks.

The schedule is stored in SQLite. ``DATABASE_URL`` selects the file
(default ``./timeblocks.db``).
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./timeblocks.db")


def _is_sqlite_url(database_url: str) -> bool:
    return (database_url or "").startswith("sqlite")


def get_engine_kwargs(database_url: str) -> dict:
    """create_engine kwargs for a database URL (no connection is made)."""
    kwargs: dict = {"echo": os.getenv("DEBUG", "False").lower() == "true"}
    if _is_sqlite_url(database_url):
        # API requests run in a threadpool and share pooled connections.
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Enable foreign keys (template delete cascades) and WAL on SQLite connections."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_default_templates(db: Session) -> int:
    """Insert the starter templates into an empty catalog.

    Returns:
        Number of templates created
    """
    from timeblocks.database.template_repository import BlockTemplateRepository
    from timeblocks.models.template_factory import default_templates

    repo = BlockTemplateRepository(db)
    if repo.get_all():
        return 0
    templates = default_templates()
    for template in templates:
        repo.create(template)
    return len(templates)


def init_db(seed: bool = True):
    """Initialize database schema and, optionally, the starter templates."""
    # Import models so they register on Base.metadata.
    from timeblocks.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    if seed:
        db = SessionLocal()
        try:
            seed_default_templates(db)
        finally:
            db.close()
