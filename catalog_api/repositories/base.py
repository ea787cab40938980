"""Generic repository contract and its SQLAlchemy implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption

from catalog_api.core.exceptions import ConflictError
from catalog_api.core.logging import get_logger
from catalog_api.db.operations import flush_async, has_pending_changes, pending_change_count
from catalog_api.db.retry import RetryPolicy
from catalog_api.db.session_async import commit, rollback
from catalog_api.models.base import BaseEntity

ModelT = TypeVar("ModelT", bound=BaseEntity)

logger = get_logger("catalog_api.repositories")


@runtime_checkable
class Repository(Protocol[ModelT]):
    """CRUD contract over an entity type with integer identity.

    ``add``, ``update`` and ``delete`` only stage work; nothing reaches the
    database until ``save_changes`` commits the unit of work.
    """

    async def get_by_id(self, entity_id: int) -> ModelT | None: ...

    async def get_all(self) -> list[ModelT]: ...

    async def find(self, *criteria: ColumnElement[bool]) -> list[ModelT]: ...

    async def add(self, entity: ModelT) -> ModelT: ...

    async def update(self, entity: ModelT) -> None: ...

    async def delete(self, entity_id: int) -> None: ...

    async def exists(self, entity_id: int) -> bool: ...

    async def save_changes(self) -> int: ...


class SqlAlchemyRepository(Generic[ModelT]):
    """Repository over one mapped class, bound to the request's AsyncSession."""

    def __init__(self, session: AsyncSession, model: type[ModelT], retry: RetryPolicy | None = None):
        self.session = session
        self.model = model
        self.retry = retry or RetryPolicy.no_retry()

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def select(self, *options: ORMOption) -> Select[tuple[ModelT]]:
        stmt = select(self.model)
        if options:
            stmt = stmt.options(*options).execution_options(populate_existing=True)
        return stmt

    async def _fetch(self, stmt: Select[Any]) -> list[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def scalars(self, stmt: Select[Any]) -> list[Any]:
        """Run a read query, retrying transient failures while nothing is staged.

        The rollback between attempts expires every instance the session has
        already loaded, so those are refreshed before the query runs again.
        """
        if has_pending_changes(self.session):
            return await self._fetch(stmt)

        loaded = list(self.session.identity_map.values())
        rolled_back = False

        async def _on_retry() -> None:
            nonlocal rolled_back
            await rollback(self.session)
            rolled_back = True

        async def _run() -> list[Any]:
            if rolled_back:
                for instance in loaded:
                    await self.session.refresh(instance)
            return await self._fetch(stmt)

        return await self.retry.run(_run, on_retry=_on_retry)

    async def get_by_id(self, entity_id: int, *options: ORMOption) -> ModelT | None:
        logger.info(
            "Getting entity by id",
            extra={"entity_type": self.entity_name, "entity_id": entity_id},
        )
        stmt = self.select(*options).where(self.model.id == entity_id)
        rows = await self.scalars(stmt)
        return rows[0] if rows else None

    async def get_all(self, *options: ORMOption) -> list[ModelT]:
        logger.info("Getting all entities", extra={"entity_type": self.entity_name})
        return await self.scalars(self.select(*options).order_by(self.model.id))

    async def find(
        self, *criteria: ColumnElement[bool], options: Sequence[ORMOption] = ()
    ) -> list[ModelT]:
        logger.info("Finding entities with predicate", extra={"entity_type": self.entity_name})
        stmt = self.select(*options).where(*criteria).order_by(self.model.id)
        return await self.scalars(stmt)

    async def add(self, entity: ModelT) -> ModelT:
        logger.info("Adding new entity", extra={"entity_type": self.entity_name})
        self.session.add(entity)
        return entity

    async def update(self, entity: ModelT) -> None:
        logger.info(
            "Updating entity",
            extra={"entity_type": self.entity_name, "entity_id": entity.id},
        )
        entity.touch()
        self.session.add(entity)

    async def delete(self, entity_id: int) -> None:
        logger.info(
            "Deleting entity",
            extra={"entity_type": self.entity_name, "entity_id": entity_id},
        )
        entity = await self.session.get(self.model, entity_id)
        if entity is not None:
            await self.session.delete(entity)

    async def exists(self, entity_id: int) -> bool:
        logger.info(
            "Checking if entity exists",
            extra={"entity_type": self.entity_name, "entity_id": entity_id},
        )
        stmt = select(self.model.id).where(self.model.id == entity_id).limit(1)
        return bool(await self.scalars(stmt))

    async def save_changes(self) -> int:
        """Commit every change staged in the session and return how many entities were written."""
        affected = pending_change_count(self.session)
        logger.info("Saving changes to database", extra={"pending": affected})
        # Only acquiring the connection is retried; a failed flush is not replayed.
        await self.retry.run(self.session.connection)
        try:
            await flush_async(self.session)
            await commit(self.session)
        except IntegrityError as exc:
            await rollback(self.session)
            logger.warning(
                "Save rejected by database constraint",
                extra={"entity_type": self.entity_name, "error": str(exc.orig)},
            )
            raise ConflictError("The change conflicts with existing data") from exc
        return affected
