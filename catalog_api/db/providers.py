"""Selection of the SQL backend and its engine options."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from catalog_api.core.config import Settings
from catalog_api.core.logging import get_logger
from catalog_api.db.retry import RetryPolicy
from catalog_api.domain.enums import DatabaseProvider

logger = get_logger("catalog_api.db.providers")

# SQLite is the local/test backend; only the server providers retry.
_RETRYING_PROVIDERS = frozenset(
    {DatabaseProvider.sqlserver, DatabaseProvider.mysql, DatabaseProvider.postgresql}
)


@dataclass(frozen=True)
class ProviderProfile:
    provider: DatabaseProvider
    url: str
    retry: RetryPolicy
    engine_options: dict[str, Any] = field(default_factory=dict)

    @property
    def safe_url(self) -> str:
        """Connection URL with the password masked, for logs."""
        return make_url(self.url).render_as_string(hide_password=True)


def resolve_profile(settings: Settings) -> ProviderProfile:
    """Build the engine profile for the configured provider."""
    provider = settings.DATABASE_PROVIDER
    label = provider.value

    if provider in _RETRYING_PROVIDERS:
        retry = RetryPolicy(
            max_attempts=settings.DB_RETRY_MAX_ATTEMPTS,
            base_delay=settings.DB_RETRY_BASE_DELAY_SECONDS,
            max_delay=settings.DB_RETRY_MAX_DELAY_SECONDS,
            label=label,
        )
    else:
        retry = RetryPolicy.no_retry(label=label)

    options: dict[str, Any] = {"echo": settings.SQL_ECHO}
    if provider is DatabaseProvider.sqlite:
        options["poolclass"] = NullPool
    else:
        options["pool_pre_ping"] = True
    if provider is DatabaseProvider.mysql:
        options["pool_recycle"] = 3600

    return ProviderProfile(
        provider=provider,
        url=settings.async_url_for(provider),
        retry=retry,
        engine_options=options,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_async_engine(profile: ProviderProfile) -> AsyncEngine:
    logger.info(
        "Configuring database engine",
        extra={"provider": profile.provider.value, "url": profile.safe_url},
    )
    engine = create_async_engine(profile.url, **profile.engine_options)
    if profile.provider is DatabaseProvider.sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine
