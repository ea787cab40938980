from decimal import Decimal

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status

from catalog_api.api.deps import get_category_repository, get_product_repository
from catalog_api.core.exceptions import DomainValidationError, ResourceNotFoundError
from catalog_api.core.logging import get_logger
from catalog_api.models.product import Product
from catalog_api.repositories.category import CategoryRepository
from catalog_api.repositories.product import ProductRepository
from catalog_api.schemas.common import MessageResponse
from catalog_api.schemas.product import CreateProductDto, ProductDto, UpdateProductDto

router = APIRouter(prefix="/products", tags=["products"])

logger = get_logger("catalog_api.api.products")

_NOT_FOUND = {404: {"model": MessageResponse}}
_BAD_REQUEST = {400: {"model": MessageResponse}}


def _not_found(product_id: int) -> ResourceNotFoundError:
    logger.warning("Product not found", extra={"product_id": product_id})
    return ResourceNotFoundError(f"Product with ID {product_id} not found")


async def _ensure_category(categories: CategoryRepository, category_id: int) -> None:
    if not await categories.exists(category_id):
        logger.warning("Unknown category referenced", extra={"category_id": category_id})
        raise DomainValidationError(f"Category with ID {category_id} does not exist")


def _to_dtos(products: list[Product]) -> list[ProductDto]:
    return [ProductDto.from_entity(p) for p in products]


# ---------- Lectura ----------
@router.get("", response_model=list[ProductDto])
async def get_all_products(products: ProductRepository = Depends(get_product_repository)):
    logger.info("GET /products - fetching all products")
    items = _to_dtos(await products.get_all(include_category=True))
    logger.info("Retrieved products", extra={"count": len(items)})
    return items


@router.get("/active", response_model=list[ProductDto])
async def get_active_products(products: ProductRepository = Depends(get_product_repository)):
    logger.info("GET /products/active - fetching active products")
    return _to_dtos(await products.get_active())


@router.get("/price-range", response_model=list[ProductDto], responses=_BAD_REQUEST)
async def get_products_by_price_range(
    min_price: Decimal = Query(Decimal("0"), alias="minPrice"),
    max_price: Decimal = Query(Decimal("0"), alias="maxPrice"),
    products: ProductRepository = Depends(get_product_repository),
):
    if min_price < 0 or max_price < 0 or min_price > max_price:
        logger.warning(
            "Invalid price range",
            extra={"min_price": str(min_price), "max_price": str(max_price)},
        )
        raise DomainValidationError("Invalid price range")

    logger.info("GET /products/price-range - fetching products in range")
    return _to_dtos(await products.get_by_price_range(min_price, max_price))


@router.get("/category/{category_id}", response_model=list[ProductDto])
async def get_products_by_category(
    category_id: int = Path(..., description="Category ID"),
    products: ProductRepository = Depends(get_product_repository),
):
    logger.info("GET /products/category/{id} - fetching products", extra={"category_id": category_id})
    return _to_dtos(await products.get_by_category(category_id))


@router.get("/{product_id}", response_model=ProductDto, responses=_NOT_FOUND)
async def get_product(
    product_id: int = Path(..., description="Product ID"),
    products: ProductRepository = Depends(get_product_repository),
):
    product = await products.get_by_id(product_id, include_category=True)
    if product is None:
        raise _not_found(product_id)
    return ProductDto.from_entity(product)


# ---------- Escritura ----------
@router.post(
    "",
    response_model=ProductDto,
    status_code=status.HTTP_201_CREATED,
    responses=_BAD_REQUEST,
)
async def create_product(
    payload: CreateProductDto,
    request: Request,
    response: Response,
    products: ProductRepository = Depends(get_product_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    logger.info("POST /products - creating product", extra={"product_name": payload.name})
    await _ensure_category(categories, payload.category_id)

    product = await products.add(payload.apply_to(Product()))
    await products.save_changes()

    created = await products.get_by_id(product.id, include_category=True)
    logger.info("Created product", extra={"product_id": product.id})
    response.headers["Location"] = str(request.url_for("get_product", product_id=product.id))
    return ProductDto.from_entity(created)


@router.put(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_product(
    payload: UpdateProductDto,
    product_id: int = Path(..., description="Product ID"),
    products: ProductRepository = Depends(get_product_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    logger.info("PUT /products/{id} - updating product", extra={"product_id": product_id})
    product = await products.get_by_id(product_id)
    if product is None:
        raise _not_found(product_id)
    await _ensure_category(categories, payload.category_id)

    await products.update(payload.apply_to(product))
    await products.save_changes()
    logger.info("Updated product", extra={"product_id": product_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
)
async def delete_product(
    product_id: int = Path(..., description="Product ID"),
    products: ProductRepository = Depends(get_product_repository),
):
    logger.info("DELETE /products/{id} - deleting product", extra={"product_id": product_id})
    if not await products.exists(product_id):
        raise _not_found(product_id)

    await products.delete(product_id)
    await products.save_changes()
    logger.info("Deleted product", extra={"product_id": product_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
