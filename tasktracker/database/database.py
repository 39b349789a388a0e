"""Database connection and session management for the task time tracker.

This module supports both:
- Local SQLite (default)
- PostgreSQL or any other SQLAlchemy URL via `DATABASE_URL`
"""

import os
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

# Database URL - SQLite by default
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tasktracker.db")


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def get_engine_kwargs(database_url: str) -> dict:
    """Return deterministic create_engine kwargs for a DB URL.

    This is separated to allow deterministic unit testing without connecting.
    """
    engine_kwargs: dict = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(database_url):
        # Needed when the FastAPI app shares the engine across threads.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        return engine_kwargs

    engine_kwargs["pool_size"] = int(os.getenv("DB_POOL_SIZE", "5"))
    engine_kwargs["max_overflow"] = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    engine_kwargs["pool_timeout"] = int(os.getenv("DB_POOL_TIMEOUT_SEC", "30"))
    return engine_kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


# Create engine (module-level singleton)
engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Enable foreign keys and WAL on SQLite connections."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative models
Base = declarative_base()


def _sqlite_table_has_column(dbapi_conn, table_name: str, column_name: str) -> bool:
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute(f"PRAGMA table_info({table_name})")
        cols = [row[1] for row in cursor.fetchall()]  # row[1] is column name
        return column_name in cols
    finally:
        cursor.close()


def ensure_legacy_schema_compat(*, engine_override: Engine = None, database_url_override: str = None) -> None:
    """Ensure legacy SQLite DB files are compatible with the current schema.

    Task tables created before the status ledger and burn-down tracking lack
    `status_history` and `remaining_hours`. SQLite `create_all()` does not
    alter existing tables, so the columns are added in place. The rows keep
    NULLs there; `normalize_task` fills them on load.
    """
    database_url = database_url_override or DATABASE_URL
    if not _is_sqlite_url(database_url):
        return

    use_engine = engine_override or engine

    dbapi_conn = use_engine.raw_connection()
    try:
        if _sqlite_table_has_column(dbapi_conn, "tasks", "id"):
            cursor = dbapi_conn.cursor()
            try:
                if not _sqlite_table_has_column(dbapi_conn, "tasks", "status_history"):
                    cursor.execute("ALTER TABLE tasks ADD COLUMN status_history JSON")
                if not _sqlite_table_has_column(dbapi_conn, "tasks", "remaining_hours"):
                    cursor.execute("ALTER TABLE tasks ADD COLUMN remaining_hours FLOAT")
                dbapi_conn.commit()
            finally:
                cursor.close()
    finally:
        dbapi_conn.close()


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database schema.

    - SQLite (default): use `create_all()` and apply minimal legacy patches.
    - Other databases: prefer Alembic migrations when `RUN_MIGRATIONS=true`.
    """
    # Register table definitions on Base.metadata
    from tasktracker.database import models  # noqa: F401

    run_migrations = os.getenv("RUN_MIGRATIONS", "False").lower() == "true"
    if run_migrations and not _is_sqlite_url(DATABASE_URL):
        from alembic import command
        from alembic.config import Config

        alembic_cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
        alembic_cfg.set_main_option("sqlalchemy.url", DATABASE_URL)
        command.upgrade(alembic_cfg, "head")
        return

    Base.metadata.create_all(bind=engine)
    ensure_legacy_schema_compat()

    if not _is_sqlite_url(DATABASE_URL):
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE tasks ADD COLUMN IF NOT EXISTS status_history JSON"))
            conn.execute(text("ALTER TABLE tasks ADD COLUMN IF NOT EXISTS remaining_hours FLOAT"))
