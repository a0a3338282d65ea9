"""
Name: Integration Test DB Setup

Responsibilities:
  - Point the settings at a real PostgreSQL server
  - Run Alembic migrations once per test session
  - Swap the in-memory unit of work for the PostgreSQL one and start every
    test from empty tables

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT = os.getenv("POSTGRES_HOST_PORT", "5432")
DB_NAME = os.getenv("POSTGRES_DB", "clubfunds")
DEFAULT_DATABASE_URL = (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

TABLES = ("audit_trails", "user_roles", "payments", "expenses", "roles", "users")

if os.getenv("RUN_INTEGRATION") == "1":
    os.environ["APP_ENV"] = "integration"
    os.environ.setdefault("DATABASE_URL", DEFAULT_DATABASE_URL)


@pytest.fixture(scope="session", autouse=True)
def apply_migrations() -> None:
    """Run Alembic migrations for integration tests."""
    if os.getenv("RUN_INTEGRATION") != "1":
        return

    from alembic import command
    from alembic.config import Config

    root_dir = Path(__file__).resolve().parents[2]
    config = Config(str(root_dir / "alembic.ini"))
    config.set_main_option("script_location", str(root_dir / "alembic"))

    command.upgrade(config, "head")


@pytest.fixture(scope="session")
def db_pool(apply_migrations):
    from clubfunds.crosscutting.config import get_settings
    from clubfunds.infrastructure.db.pool import close_pool, init_pool

    get_settings.cache_clear()
    settings = get_settings()
    pool = init_pool(
        database_url=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    yield pool
    close_pool()


@pytest.fixture
def uow_factory(db_pool):
    """PostgreSQL units of work over freshly truncated tables."""
    from clubfunds.infrastructure.repositories.postgres import PostgresUnitOfWorkFactory

    with db_pool.connection() as conn:
        conn.execute(f"TRUNCATE {', '.join(TABLES)} CASCADE")

    return PostgresUnitOfWorkFactory(lambda: db_pool)
