"""init catalog: categories, products and demo data

Revision ID: 3c1d9e2a7b10
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d9e2a7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SEED_CATEGORIES = [
    {"name": "Electronics", "description": "Electronic devices and accessories"},
    {"name": "Books", "description": "Books and publications"},
    {"name": "Clothing", "description": "Apparel and fashion items"},
]

SEED_PRODUCTS = [
    {
        "name": "Smartphone XYZ",
        "description": "Latest smartphone with advanced features",
        "price": Decimal("999.99"),
        "stock": 50,
        "category": "Electronics",
    },
    {
        "name": "Laptop Pro",
        "description": "High-performance laptop for professionals",
        "price": Decimal("1499.99"),
        "stock": 30,
        "category": "Electronics",
    },
    {
        "name": "Programming C#",
        "description": "Comprehensive guide to C# programming",
        "price": Decimal("49.99"),
        "stock": 100,
        "category": "Books",
    },
]


def upgrade() -> None:
    categories = op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
    )

    products = op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("price", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["categories.id"],
            name="fk_products_category_id_categories",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
    )
    op.create_index("ix_products_category_id", "products", ["category_id"])
    op.create_index("ix_products_is_active", "products", ["is_active"])

    # Demo content. Ids come from the database so later inserts never collide.
    now = datetime.now(timezone.utc)
    op.bulk_insert(categories, [{**row, "created_at": now} for row in SEED_CATEGORIES])
    for row in SEED_PRODUCTS:
        category_id = (
            sa.select(categories.c.id)
            .where(categories.c.name == row["category"])
            .scalar_subquery()
        )
        op.execute(
            products.insert().values(
                name=row["name"],
                description=row["description"],
                price=row["price"],
                stock=row["stock"],
                is_active=True,
                category_id=category_id,
                created_at=now,
            )
        )


def downgrade() -> None:
    op.drop_index("ix_products_is_active", table_name="products")
    op.drop_index("ix_products_category_id", table_name="products")
    op.drop_table("products")
    op.drop_table("categories")
