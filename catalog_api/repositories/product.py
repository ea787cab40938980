from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog_api.core.logging import get_logger
from catalog_api.db.retry import RetryPolicy
from catalog_api.models.product import Product
from catalog_api.repositories.base import SqlAlchemyRepository

logger = get_logger("catalog_api.repositories.product")

_WITH_CATEGORY = (selectinload(Product.category),)


def _includes(include_category: bool) -> tuple:
    return _WITH_CATEGORY if include_category else ()


class ProductRepository:
    """Product persistence; generic CRUD is delegated to a SqlAlchemyRepository."""

    def __init__(self, session: AsyncSession, retry: RetryPolicy | None = None):
        self._entities = SqlAlchemyRepository(session, Product, retry=retry)

    # --- generic contract ---
    async def get_by_id(self, product_id: int, *, include_category: bool = False) -> Product | None:
        return await self._entities.get_by_id(product_id, *_includes(include_category))

    async def get_all(self, *, include_category: bool = True) -> list[Product]:
        return await self._entities.get_all(*_includes(include_category))

    async def find(self, *criteria: ColumnElement[bool], include_category: bool = False) -> list[Product]:
        return await self._entities.find(*criteria, options=_includes(include_category))

    async def add(self, product: Product) -> Product:
        return await self._entities.add(product)

    async def update(self, product: Product) -> None:
        await self._entities.update(product)

    async def delete(self, product_id: int) -> None:
        await self._entities.delete(product_id)

    async def exists(self, product_id: int) -> bool:
        return await self._entities.exists(product_id)

    async def save_changes(self) -> int:
        return await self._entities.save_changes()

    # --- queries ---
    async def get_by_category(self, category_id: int) -> list[Product]:
        logger.info("Getting products by category", extra={"category_id": category_id})
        return await self.find(Product.category_id == category_id, include_category=True)

    async def get_active(self) -> list[Product]:
        logger.info("Getting all active products")
        return await self.find(Product.is_active.is_(True), include_category=True)

    async def get_by_price_range(self, min_price: Decimal, max_price: Decimal) -> list[Product]:
        logger.info(
            "Getting products in price range",
            extra={"min_price": str(min_price), "max_price": str(max_price)},
        )
        return await self.find(
            Product.price >= min_price,
            Product.price <= max_price,
            include_category=True,
        )
