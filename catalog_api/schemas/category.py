# catalog_api/schemas/category.py
from datetime import datetime

from pydantic import Field

from catalog_api.models.base import loaded_attribute
from catalog_api.models.product import Category
from catalog_api.schemas.common import ApiModel


# ---------- Category ----------
class CategoryBase(ApiModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str | None = Field(None, max_length=500)

    def apply_to(self, category: Category) -> Category:
        category.name = self.name
        category.description = self.description
        return category


class CreateCategoryDto(CategoryBase):
    pass


class UpdateCategoryDto(CategoryBase):
    pass


class CategoryDto(ApiModel):
    id: int
    name: str
    description: str | None = None
    product_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryDto":
        count = category.product_count
        if count is None:
            products = loaded_attribute(category, "products")
            count = len(products) if products is not None else 0
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            product_count=count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
