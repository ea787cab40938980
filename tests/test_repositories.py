# tests/test_repositories.py
from decimal import Decimal

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import OperationalError

from catalog_api.core.exceptions import ConflictError
from catalog_api.db.retry import RetryPolicy
from catalog_api.db.session_async import AsyncSessionLocal
from catalog_api.models.product import Category, Product
from catalog_api.repositories.base import Repository, SqlAlchemyRepository
from catalog_api.repositories.category import CategoryRepository
from catalog_api.repositories.product import ProductRepository


async def _seed(session) -> tuple[Category, Category]:
    categories = CategoryRepository(session)
    electronics = await categories.add(Category(name="Electronics", description="Devices"))
    books = await categories.add(Category(name="Books"))
    await categories.save_changes()

    products = ProductRepository(session)
    await products.add(Product(name="Smartphone XYZ", price=Decimal("999.99"), stock=50, category_id=electronics.id))
    await products.add(Product(name="Laptop Pro", price=Decimal("1499.99"), stock=30, category_id=electronics.id))
    await products.add(
        Product(name="Programming Python", price=Decimal("49.99"), stock=100, is_active=False, category_id=books.id)
    )
    await products.save_changes()
    return electronics, books


@pytest.mark.asyncio
async def test_add_is_staged_until_save_changes(async_db_session):
    repo = CategoryRepository(async_db_session)
    category = await repo.add(Category(name="Staged"))

    async with AsyncSessionLocal() as other:
        assert (await other.execute(select(func.count(Category.id)))).scalar_one() == 0

    assert await repo.save_changes() == 1
    assert category.id is not None

    async with AsyncSessionLocal() as other:
        assert (await other.execute(select(func.count(Category.id)))).scalar_one() == 1


@pytest.mark.asyncio
async def test_save_changes_counts_every_staged_entity(async_db_session):
    repo = CategoryRepository(async_db_session)
    await repo.add(Category(name="First"))
    await repo.add(Category(name="Second"))
    await repo.add(Category(name="Third"))
    assert await repo.save_changes() == 3
    assert await repo.save_changes() == 0


@pytest.mark.asyncio
async def test_update_touches_timestamp_and_persists(async_db_session):
    repo = CategoryRepository(async_db_session)
    category = await repo.add(Category(name="Before"))
    await repo.save_changes()
    assert category.updated_at is None

    category.name = "After"
    await repo.update(category)
    assert await repo.save_changes() == 1
    assert category.updated_at is not None

    async with AsyncSessionLocal() as other:
        stored = await CategoryRepository(other).get_by_id(category.id)
        assert stored.name == "After"
        assert stored.updated_at is not None


@pytest.mark.asyncio
async def test_get_all_and_find(async_db_session):
    electronics, _ = await _seed(async_db_session)
    repo = ProductRepository(async_db_session)

    everything = await repo.get_all()
    assert [p.name for p in everything] == ["Smartphone XYZ", "Laptop Pro", "Programming Python"]

    expensive = await repo.find(Product.price > Decimal("1000"))
    assert [p.name for p in expensive] == ["Laptop Pro"]

    in_electronics = await repo.find(Product.category_id == electronics.id)
    assert len(in_electronics) == 2
    assert await repo.find(Product.name == "Missing") == []


@pytest.mark.asyncio
async def test_exists_and_delete(async_db_session):
    await _seed(async_db_session)
    repo = ProductRepository(async_db_session)
    product = (await repo.get_all())[0]

    assert await repo.exists(product.id) is True
    assert await repo.exists(9999) is False

    # Deleting an unknown id stages nothing.
    await repo.delete(9999)
    assert await repo.save_changes() == 0

    await repo.delete(product.id)
    assert await repo.save_changes() == 1
    assert await repo.exists(product.id) is False
    assert await repo.get_by_id(product.id) is None


@pytest.mark.asyncio
async def test_category_is_loaded_only_on_request(async_db_session):
    await _seed(async_db_session)
    product_id = (await ProductRepository(async_db_session).get_all())[0].id

    async with AsyncSessionLocal() as other:
        repo = ProductRepository(other)
        bare = await repo.get_by_id(product_id)
        assert "category" in inspect(bare).unloaded

        full = await repo.get_by_id(product_id, include_category=True)
        assert full.category.name == "Electronics"


@pytest.mark.asyncio
async def test_product_queries(async_db_session):
    electronics, books = await _seed(async_db_session)
    repo = ProductRepository(async_db_session)

    by_category = await repo.get_by_category(books.id)
    assert [p.name for p in by_category] == ["Programming Python"]
    assert by_category[0].category.name == "Books"
    assert await repo.get_by_category(12345) == []

    active = await repo.get_active()
    assert {p.name for p in active} == {"Smartphone XYZ", "Laptop Pro"}

    ranged = await repo.get_by_price_range(Decimal("49.99"), Decimal("999.99"))
    assert {p.name for p in ranged} == {"Smartphone XYZ", "Programming Python"}


@pytest.mark.asyncio
async def test_category_product_counts(async_db_session):
    electronics, books = await _seed(async_db_session)
    await CategoryRepository(async_db_session).add(Category(name="Empty"))
    await async_db_session.commit()

    async with AsyncSessionLocal() as other:
        repo = CategoryRepository(other)
        counts = {c.name: c.product_count for c in await repo.get_all_with_product_count()}
        assert counts == {"Electronics": 2, "Books": 1, "Empty": 0}

        assert await repo.count_products(electronics.id) == 2
        assert await repo.count_products(9999) == 0

        with_products = await repo.get_with_products(books.id)
        assert [p.name for p in with_products.products] == ["Programming Python"]


def _fail_first_execute(monkeypatch, session) -> list[int]:
    calls: list[int] = []
    real_execute = session.execute

    async def flaky_execute(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("SELECT 1", {}, ConnectionResetError("connection reset"))
        return await real_execute(*args, **kwargs)

    monkeypatch.setattr(session, "execute", flaky_execute)
    return calls


@pytest.mark.asyncio
async def test_retried_read_keeps_loaded_entities_usable(async_db_session, monkeypatch):
    electronics, _ = await _seed(async_db_session)
    no_wait = RetryPolicy(max_attempts=3, base_delay=0, max_delay=0)
    products = ProductRepository(async_db_session, retry=no_wait)
    categories = CategoryRepository(async_db_session, retry=no_wait)

    product = (await products.get_all(include_category=False))[0]
    calls = _fail_first_execute(monkeypatch, async_db_session)

    assert await categories.exists(electronics.id) is True
    assert len(calls) == 2

    product.name = "Smartphone XYZ v2"
    await products.update(product)
    assert await products.save_changes() == 1

    async with AsyncSessionLocal() as other:
        stored = await ProductRepository(other).get_by_id(product.id)
        assert stored.name == "Smartphone XYZ v2"
        assert stored.price == Decimal("999.99")


@pytest.mark.asyncio
async def test_reads_with_staged_changes_are_not_retried(async_db_session, monkeypatch):
    repo = CategoryRepository(async_db_session, retry=RetryPolicy(max_attempts=3, base_delay=0, max_delay=0))
    await repo.add(Category(name="Staged"))
    calls = _fail_first_execute(monkeypatch, async_db_session)

    with pytest.raises(OperationalError):
        await repo.get_all()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_foreign_key_blocks_deleting_category_with_products(async_db_session):
    electronics, _ = await _seed(async_db_session)
    repo = CategoryRepository(async_db_session)

    await repo.delete(electronics.id)
    with pytest.raises(ConflictError):
        await repo.save_changes()

    async with AsyncSessionLocal() as other:
        assert await CategoryRepository(other).exists(electronics.id) is True
        assert await CategoryRepository(other).count_products(electronics.id) == 2


@pytest.mark.asyncio
async def test_repositories_satisfy_repository_contract(async_db_session):
    assert isinstance(ProductRepository(async_db_session), Repository)
    assert isinstance(CategoryRepository(async_db_session), Repository)
    assert isinstance(SqlAlchemyRepository(async_db_session, Product), Repository)
