from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, true
from sqlalchemy.orm import Mapped, mapped_column, query_expression, relationship

from catalog_api.db.session import Base
from catalog_api.models.base import BaseEntity


# --- Clasificación ---
class Category(BaseEntity, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Filled only by queries that ask for it (see CategoryRepository).
    product_count: Mapped[int | None] = query_expression()

    # Never cascades: the foreign key restricts deletes of non-empty categories.
    products: Mapped[list["Product"]] = relationship(
        back_populates="category",
        lazy="raise",
        passive_deletes="all",
        order_by="Product.id",
    )


# --- Producto ---
class Product(BaseEntity, Base):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true(), nullable=False, index=True)

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    category: Mapped[Category] = relationship(back_populates="products", lazy="raise")
