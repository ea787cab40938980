"""Schema migrations applied at startup."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from catalog_api.core.logging import get_logger
from catalog_api.db.retry import RetryPolicy

logger = get_logger("catalog_api.db.migrations")

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def build_alembic_config() -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return config


def _upgrade(connection: Connection, config: Config, revision: str) -> None:
    # env.py picks the shared connection up instead of opening its own engine.
    config.attributes["connection"] = connection
    command.upgrade(config, revision)


async def upgrade_schema(engine: AsyncEngine, revision: str = "head") -> None:
    config = build_alembic_config()
    async with engine.begin() as connection:
        await connection.run_sync(_upgrade, config, revision)


async def apply_migrations(engine: AsyncEngine, retry: RetryPolicy | None = None) -> bool:
    """Upgrade the schema to head; failures are logged and the app keeps running.

    Returns True when the schema is up to date.
    """
    retry = retry or RetryPolicy.no_retry()
    logger.info("Applying database migrations", extra={"provider": retry.label})
    try:
        await retry.run(lambda: upgrade_schema(engine))
    except Exception:
        logger.exception("An error occurred while migrating the database; continuing without a verified schema")
        return False
    logger.info("Database migrations applied successfully")
    return True
