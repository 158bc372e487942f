"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with an in-memory
SQLite fallback under pytest and exposes the FastAPI session dependency.
"""
import os
import sys
import logging
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so also look for the
    pytest module which is imported before collection starts.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    parts = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    missing = [name for name, value in parts.items() if not value]
    if missing:
        if _is_pytest_runtime():
            return _SQLITE_MEMORY_URL
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return (
        f"postgresql://{parts['POSTGRES_USER']}:{parts['POSTGRES_PASSWORD']}"
        f"@{parts['POSTGRES_HOST']}:{parts['POSTGRES_PORT']}/{parts['POSTGRES_DB']}"
    )


# Test override strategy:
# 1. TRACKER_TEST_DB wins when set.
# 2. Under pytest without an explicit test DB, force in-memory SQLite.
explicit_test_db = os.getenv("TRACKER_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
elif _is_pytest_runtime():
    DATABASE_URL = _SQLITE_MEMORY_URL
else:
    DATABASE_URL = _get_database_url()


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # StaticPool keeps the single in-memory database alive across sessions
        kwargs["poolclass"] = StaticPool
    return kwargs


def _create_engine_with_fallback(url: str):
    """Create the engine; under pytest fall back to in-memory SQLite on failure."""
    try:
        return create_engine(url, **_engine_kwargs(url))
    except OperationalError:
        if _is_pytest_runtime() and not explicit_test_db:
            logger.warning("db_engine_fallback: url=%s -> sqlite memory", url.split("@")[-1])
            return create_engine(_SQLITE_MEMORY_URL, **_engine_kwargs(_SQLITE_MEMORY_URL))
        raise


engine = _create_engine_with_fallback(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_SCHEMA_INIT_DONE = False


def _ensure_sqlite_schema():
    """Create tables lazily for SQLite runs, where Alembic is not applied."""
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    if str(engine.url).startswith("sqlite"):
        from tracker.db import models  # local import to avoid a cycle at module load

        models.Base.metadata.create_all(bind=engine)
    _SCHEMA_INIT_DONE = True


def get_db():
    """Dependency to get a database session."""
    _ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
