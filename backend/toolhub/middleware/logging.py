"""
Toolhub Backend — Access Log Middleware
=========================================

What:  One access log line per HTTP request: who called which area of the API,
       with what result and how long it took.
When:  Right after RequestIDMiddleware, so every line carries the request ID.

Log line:
    [a1b2c3d4] admin PUT /api/admin/requests/3f2c... → 200 in 41.7ms (10.0.0.7)

Areas:
    admin   /api/admin/*       reviews and catalog edits, always worth a trace
    public  everything else    catalog reads and suggestions

Never logged: request bodies (suggestions may carry contact details), query
strings, X-Admin-Key and Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from toolhub.middleware.request_id import request_id_var

logger = logging.getLogger("toolhub.access")

ADMIN_PREFIX = "/api/admin/"
SILENT_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _area_of(path: str) -> str:
    return "admin" if path.startswith(ADMIN_PREFIX) else "public"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """5xx → ERROR, 4xx → WARNING (401s on admin routes included), else INFO."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SILENT_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        area = _area_of(path)
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            _level_for(response.status_code),
            "[%s] %s %s %s → %d in %.1fms (%s)",
            rid, area, request.method, path, response.status_code, elapsed_ms, client_ip,
            extra={
                "request_id": rid,
                "area": area,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
