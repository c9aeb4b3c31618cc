"""
Toolhub Backend — Submission Rate Limiter Tests
=================================================

What we test:
    ✅ Idle IPs are dropped every CLEANUP_EVERY recorded submissions
    ✅ IPs still inside the window survive the cleanup
"""

import time
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request
from starlette.responses import Response

from toolhub.middleware.rate_limit import SubmissionRateLimitMiddleware


def _submission(ip: str) -> Request:
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/api/requests",
        "root_path": "",
        "scheme": "http",
        "server": ("testserver", 80),
        "query_string": b"",
        "headers": [],
        "client": (ip, 50000),
    })


class TestIdleIpCleanup:

    def setup_method(self):
        self.limiter = SubmissionRateLimitMiddleware(app=AsyncMock())
        self.call_next = AsyncMock(return_value=Response(status_code=201))

    @pytest.mark.asyncio
    async def test_idle_ips_dropped_on_submission_count(self, monkeypatch):
        monkeypatch.setattr(SubmissionRateLimitMiddleware, "CLEANUP_EVERY", 2)
        self.limiter._requests["10.0.0.9"] = [time.time() - 10 * 24 * 3600]

        await self.limiter.dispatch(_submission("10.0.0.1"), self.call_next)
        assert "10.0.0.9" in self.limiter._requests

        await self.limiter.dispatch(_submission("10.0.0.1"), self.call_next)
        assert "10.0.0.9" not in self.limiter._requests
        assert len(self.limiter._requests["10.0.0.1"]) == 2

    @pytest.mark.asyncio
    async def test_active_ips_survive_cleanup(self, monkeypatch):
        monkeypatch.setattr(SubmissionRateLimitMiddleware, "CLEANUP_EVERY", 1)
        self.limiter._requests["10.0.0.2"] = [time.time()]

        await self.limiter.dispatch(_submission("10.0.0.1"), self.call_next)

        assert set(self.limiter._requests) == {"10.0.0.1", "10.0.0.2"}
