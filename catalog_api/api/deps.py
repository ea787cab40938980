# catalog_api/api/deps.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.db.session_async import get_async_db, provider_profile
from catalog_api.repositories.category import CategoryRepository
from catalog_api.repositories.product import ProductRepository


# Both repositories receive the same request-scoped session, so one
# save_changes() commits everything staged during the request.
def get_product_repository(db: AsyncSession = Depends(get_async_db)) -> ProductRepository:
    return ProductRepository(db, retry=provider_profile.retry)


def get_category_repository(db: AsyncSession = Depends(get_async_db)) -> CategoryRepository:
    return CategoryRepository(db, retry=provider_profile.retry)
