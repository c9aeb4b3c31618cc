"""
Toolhub Backend — Submission Rate Limiting Middleware
=======================================================

What:  Per-IP sliding window limiter for public tool suggestions.
Why:   POST /api/requests is the only anonymous write; everything else is
       read-only or behind the admin key, so only submissions are throttled.
How:   Tracks submission timestamps per IP in memory.
When:  First in the middleware chain (rejects abuse before any processing).

Algorithm: Sliding Window Counter
    1. Each IP gets a list of submission timestamps
    2. On each submission, drop timestamps older than the window
    3. If the remaining count >= limit, reject with 429
    4. Otherwise record the current timestamp and let it through

    Limits come from settings.submission_rate_limit_requests per
    settings.submission_rate_limit_window seconds and are read per request.

This state is per process. Multi-worker deployments get one window per worker.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from toolhub.config import settings
from toolhub.exceptions import RateLimitExceededError
from toolhub.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class SubmissionRateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter for suggestion submissions.

    Response on rate limit:
        HTTP 429 Too Many Requests
        Retry-After header: seconds until the oldest submission leaves the window
        Body: the standard error payload
    """

    LIMITED_ROUTES = {("POST", "/api/requests")}
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path.rstrip("/") or "/"
        if (request.method, path) not in self.LIMITED_ROUTES:
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        limit = settings.submission_rate_limit_requests
        window = settings.submission_rate_limit_window
        now = time.time()
        window_start = now - window

        self._requests[client_ip] = [
            ts for ts in self._requests[client_ip] if ts > window_start
        ]

        if len(self._requests[client_ip]) >= limit:
            oldest = self._requests[client_ip][0]
            exc = RateLimitExceededError(retry_after=int(oldest + window - now) + 1)

            logger.warning(
                "Submission rate limit exceeded for IP %s: %d submissions in %ds window",
                client_ip,
                len(self._requests[client_ip]),
                window,
            )

            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        self._requests[client_ip].append(now)
        self._recorded += 1

        # Drop idle IPs every CLEANUP_EVERY recorded submissions
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
