from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Integer, inspect
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseEntity:
    """Identity and audit columns shared by every catalog table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Stays NULL until the first update.
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def touch(self) -> None:
        self.updated_at = utcnow()


def loaded_attribute(instance: Any, name: str, default: Any = None) -> Any:
    """Return ``instance.name`` only if the query already loaded it."""
    if name in inspect(instance).unloaded:
        return default
    return getattr(instance, name)
