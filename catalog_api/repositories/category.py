from __future__ import annotations

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_expression

from catalog_api.core.logging import get_logger
from catalog_api.db.retry import RetryPolicy
from catalog_api.models.product import Category, Product
from catalog_api.repositories.base import SqlAlchemyRepository

logger = get_logger("catalog_api.repositories.category")


def _product_count_expression():
    return (
        select(func.count(Product.id))
        .where(Product.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )


class CategoryRepository:
    """Category persistence; generic CRUD is delegated to a SqlAlchemyRepository."""

    def __init__(self, session: AsyncSession, retry: RetryPolicy | None = None):
        self._entities = SqlAlchemyRepository(session, Category, retry=retry)

    # --- generic contract ---
    async def get_by_id(self, category_id: int) -> Category | None:
        return await self._entities.get_by_id(category_id)

    async def get_all(self) -> list[Category]:
        return await self._entities.get_all()

    async def find(self, *criteria: ColumnElement[bool]) -> list[Category]:
        return await self._entities.find(*criteria)

    async def add(self, category: Category) -> Category:
        return await self._entities.add(category)

    async def update(self, category: Category) -> None:
        await self._entities.update(category)

    async def delete(self, category_id: int) -> None:
        await self._entities.delete(category_id)

    async def exists(self, category_id: int) -> bool:
        return await self._entities.exists(category_id)

    async def save_changes(self) -> int:
        return await self._entities.save_changes()

    # --- queries ---
    async def get_with_products(self, category_id: int) -> Category | None:
        logger.info("Getting category including products", extra={"category_id": category_id})
        return await self._entities.get_by_id(category_id, selectinload(Category.products))

    async def get_all_with_product_count(self) -> list[Category]:
        logger.info("Getting all categories with product count")
        return await self._entities.get_all(
            with_expression(Category.product_count, _product_count_expression())
        )

    async def count_products(self, category_id: int) -> int:
        stmt = select(func.count(Product.id)).where(Product.category_id == category_id)
        counts = await self._entities.scalars(stmt)
        return int(counts[0]) if counts else 0
