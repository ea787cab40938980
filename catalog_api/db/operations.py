"""Common async session helpers."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession


def _coerce_iter(items: Iterable[Any] | None) -> list[Any] | None:
    if not items:
        return None
    return list(items)


def has_pending_changes(session: AsyncSession) -> bool:
    return bool(session.new or session.deleted or session.dirty)


def pending_change_count(session: AsyncSession) -> int:
    """Number of entities the next flush will insert, update or delete."""
    modified = sum(1 for instance in session.dirty if session.is_modified(instance))
    return len(session.new) + modified + len(session.deleted)


async def flush_async(session: AsyncSession, *objects: Any) -> None:
    await session.flush(_coerce_iter(objects))
