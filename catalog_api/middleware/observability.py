from __future__ import annotations

import time
import uuid
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from catalog_api.core.logging import get_logger
from catalog_api.core.metrics import normalize_path, record_request_metrics

REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Records request metrics, tags responses with a request id and logs failures."""

    def __init__(self, app, *, log_client_errors: bool = True) -> None:
        super().__init__(app)
        self.logger = get_logger("catalog_api.requests")
        self.log_client_errors = log_client_errors

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start
            record_request_metrics(request, 500, elapsed)
            self.logger.exception(
                "Unhandled server error",
                extra=self._context(request, request_id, 500, elapsed),
            )
            raise

        elapsed = time.perf_counter() - start
        record_request_metrics(request, response.status_code, elapsed)
        response.headers[REQUEST_ID_HEADER] = request_id

        context = self._context(request, request_id, response.status_code, elapsed)
        if response.status_code >= 500:
            self.logger.error("Server error response", extra=context)
        elif response.status_code >= 400 and self.log_client_errors:
            self.logger.warning("Client error response", extra=context)
        else:
            self.logger.debug("Request handled", extra=context)
        return response

    @staticmethod
    def _context(request: Request, request_id: str, status_code: int, elapsed: float) -> dict[str, Any]:
        return {
            "request_id": request_id,
            "method": request.method,
            "path": normalize_path(request),
            "status_code": status_code,
            "duration_ms": round(elapsed * 1000, 3),
        }
