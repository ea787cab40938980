# catalog_api/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from catalog_api.api.error_handlers import register_exception_handlers
from catalog_api.api.routers import categories, products
from catalog_api.core.config import settings
from catalog_api.core.logging import get_logger, setup_logging
from catalog_api.core.metrics import export_metrics
from catalog_api.db.migrations import apply_migrations
from catalog_api.db.session_async import async_engine, provider_profile
from catalog_api.middleware import ObservabilityMiddleware

logger = get_logger("catalog_api")

# --- Metadatos de la API para la documentación ---
TAGS_METADATA = [
    {"name": "products", "description": "Product catalogue: CRUD plus category, active and price-range queries."},
    {"name": "categories", "description": "Product categories and their product counts."},
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    logger.info(
        "Starting application",
        extra={"provider": provider_profile.provider.value, "url": provider_profile.safe_url},
    )
    if settings.APPLY_MIGRATIONS_ON_STARTUP:
        await apply_migrations(async_engine, retry=provider_profile.retry)
    logger.info("Application started successfully")
    yield
    await async_engine.dispose()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description=(
        "REST API for managing products and categories.\n\n"
        "- **Products**: CRUD plus filters by category, active flag and price range.\n"
        "- **Categories**: CRUD with product counts; non-empty categories cannot be deleted.\n\n"
        "Backed by SQL Server, MySQL or PostgreSQL, selected with `DATABASE_PROVIDER`."
    ),
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    swagger_ui_parameters={
        "displayRequestDuration": True,
        "tryItOutEnabled": True,
    },
)

# --- Middlewares ---
app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# --- Routers ---
app.include_router(products.router, prefix=settings.API_PREFIX)
app.include_router(categories.router, prefix=settings.API_PREFIX)


# --- Endpoints operativos ---
@app.get("/", include_in_schema=False)
def root():
    return {"status": "ok", "docs_url": "/docs", "redoc_url": "/redoc"}


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "provider": provider_profile.provider.value}


@app.get("/metrics", include_in_schema=False)
def metrics():
    payload, content_type = export_metrics()
    return Response(content=payload, media_type=content_type)
