from datetime import datetime
from decimal import Decimal

from pydantic import Field

from catalog_api.models.base import loaded_attribute
from catalog_api.models.product import Product
from catalog_api.schemas.common import MAX_PRICE, ApiModel, Money


# --- Product ---
class ProductBase(ApiModel):
    name: str = Field(..., min_length=3, max_length=200)
    description: str | None = Field(None, max_length=1000)
    price: Money = Field(..., ge=Decimal("0.01"), le=MAX_PRICE, max_digits=15, decimal_places=2)
    stock: int = Field(..., ge=0)
    is_active: bool = True
    category_id: int = Field(..., ge=1)

    def apply_to(self, product: Product) -> Product:
        """Full replace of the mutable product fields."""
        for field_name in type(self).model_fields:
            setattr(product, field_name, getattr(self, field_name))
        return product


class CreateProductDto(ProductBase):
    pass


class UpdateProductDto(ProductBase):
    pass


class ProductDto(ApiModel):
    id: int
    name: str
    description: str | None = None
    price: Money
    stock: int
    is_active: bool
    category_id: int
    category_name: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, product: Product) -> "ProductDto":
        category = loaded_attribute(product, "category")
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            is_active=product.is_active,
            category_id=product.category_id,
            category_name=category.name if category is not None else None,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
