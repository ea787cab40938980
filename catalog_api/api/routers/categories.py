from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response, status

from catalog_api.api.deps import get_category_repository
from catalog_api.core.exceptions import ConflictError, ResourceNotFoundError
from catalog_api.core.logging import get_logger
from catalog_api.models.product import Category
from catalog_api.repositories.category import CategoryRepository
from catalog_api.schemas.category import CategoryDto, CreateCategoryDto, UpdateCategoryDto
from catalog_api.schemas.common import MessageResponse

router = APIRouter(prefix="/categories", tags=["categories"])

logger = get_logger("catalog_api.api.categories")

_NOT_FOUND = {404: {"model": MessageResponse}}
_BAD_REQUEST = {400: {"model": MessageResponse}}


def _not_found(category_id: int) -> ResourceNotFoundError:
    logger.warning("Category not found", extra={"category_id": category_id})
    return ResourceNotFoundError(f"Category with ID {category_id} not found")


@router.get("", response_model=list[CategoryDto])
async def get_all_categories(categories: CategoryRepository = Depends(get_category_repository)):
    logger.info("GET /categories - fetching all categories")
    items = [CategoryDto.from_entity(c) for c in await categories.get_all_with_product_count()]
    logger.info("Retrieved categories", extra={"count": len(items)})
    return items


@router.get("/{category_id}", response_model=CategoryDto, responses=_NOT_FOUND)
async def get_category(
    category_id: int = Path(..., description="Category ID"),
    categories: CategoryRepository = Depends(get_category_repository),
):
    category = await categories.get_with_products(category_id)
    if category is None:
        raise _not_found(category_id)
    return CategoryDto.from_entity(category)


@router.post(
    "",
    response_model=CategoryDto,
    status_code=status.HTTP_201_CREATED,
    responses=_BAD_REQUEST,
)
async def create_category(
    payload: CreateCategoryDto,
    request: Request,
    response: Response,
    categories: CategoryRepository = Depends(get_category_repository),
):
    logger.info("POST /categories - creating category", extra={"category_name": payload.name})
    category = await categories.add(payload.apply_to(Category()))
    await categories.save_changes()

    created = await categories.get_with_products(category.id)
    logger.info("Created category", extra={"category_id": category.id})
    response.headers["Location"] = str(request.url_for("get_category", category_id=category.id))
    return CategoryDto.from_entity(created)


@router.put(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_category(
    payload: UpdateCategoryDto,
    category_id: int = Path(..., description="Category ID"),
    categories: CategoryRepository = Depends(get_category_repository),
):
    logger.info("PUT /categories/{id} - updating category", extra={"category_id": category_id})
    category = await categories.get_by_id(category_id)
    if category is None:
        raise _not_found(category_id)

    await categories.update(payload.apply_to(category))
    await categories.save_changes()
    logger.info("Updated category", extra={"category_id": category_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_NOT_FOUND, 409: {"model": MessageResponse}},
)
async def delete_category(
    category_id: int = Path(..., description="Category ID"),
    categories: CategoryRepository = Depends(get_category_repository),
):
    logger.info("DELETE /categories/{id} - deleting category", extra={"category_id": category_id})
    if not await categories.exists(category_id):
        raise _not_found(category_id)

    product_count = await categories.count_products(category_id)
    if product_count:
        logger.warning(
            "Category still has products",
            extra={"category_id": category_id, "product_count": product_count},
        )
        raise ConflictError(
            f"Category with ID {category_id} has {product_count} product(s) and cannot be deleted"
        )

    await categories.delete(category_id)
    await categories.save_changes()
    logger.info("Deleted category", extra={"category_id": category_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
