from __future__ import annotations

from collections import defaultdict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from catalog_api.core.exceptions import (
    CatalogError,
    ConflictError,
    DomainValidationError,
    ResourceNotFoundError,
)
from catalog_api.core.logging import get_logger

logger = get_logger("catalog_api.api.errors")

# Leading location parts that are not field names.
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = defaultdict(list)
    for error in exc.errors():
        parts = [str(part) for part in error.get("loc", ())]
        if parts and parts[0] in _LOCATIONS:
            parts = parts[1:]
        field = ".".join(to_camel(part) if "_" in part else part for part in parts) or "request"
        errors[field].append(error.get("msg", "Invalid value"))
    return dict(errors)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _field_errors(exc)
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "fields": sorted(errors)},
        )
        return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})

    @app.exception_handler(ResourceNotFoundError)
    async def handle_not_found(_: Request, exc: ResourceNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"message": exc.detail})

    @app.exception_handler(DomainValidationError)
    async def handle_validation(_: Request, exc: DomainValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": exc.detail})

    @app.exception_handler(ConflictError)
    async def handle_conflict(_: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"message": exc.detail})

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(_: Request, exc: CatalogError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": exc.detail})
