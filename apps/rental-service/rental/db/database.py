"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with a test
fallback (SQLite in-memory) and exposes the FastAPI session dependency.
"""
import logging
import os
import sys
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    components = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    missing = [name for name, value in components.items() if not value]
    if missing:
        if _is_pytest_runtime():
            return "sqlite+pysqlite:///:memory:"
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return (
        f"postgresql://{components['POSTGRES_USER']}:{components['POSTGRES_PASSWORD']}"
        f"@{components['POSTGRES_HOST']}:{components['POSTGRES_PORT']}/{components['POSTGRES_DB']}"
    )


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest."""
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


# Test override strategy:
# 1. RENTAL_TEST_DB wins when set.
# 2. TEST_DATABASE_URL (set by the e2e fixtures) is used as-is.
# 3. Otherwise under pytest force in-memory SQLite shared through a StaticPool.
explicit_test_db = os.getenv("RENTAL_TEST_DB")
explicit_e2e_db = os.getenv("TEST_DATABASE_URL")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
elif explicit_e2e_db:
    DATABASE_URL = explicit_e2e_db
elif _is_pytest_runtime():
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
else:
    DATABASE_URL = _get_database_url()

if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    _engine_kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
elif DATABASE_URL.startswith("sqlite"):
    _engine_kwargs = {"connect_args": {"check_same_thread": False}}
else:
    _engine_kwargs = {"pool_pre_ping": True}

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_sqlite_schema() -> None:
    """Create all tables on SQLite; PostgreSQL schemas are owned by Alembic."""
    if engine.url.get_backend_name() != "sqlite":
        return
    from rental.db import models  # local import to avoid a cycle at module load

    models.Base.metadata.create_all(bind=engine)


# An in-memory database has no migrations to run; every StaticPool
# connection must see the tables from the start.
if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    init_sqlite_schema()
    logger.debug("sqlite in-memory schema created")


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
