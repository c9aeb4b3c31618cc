"""
Toolhub Backend — Admin Authorization
=======================================

What:  FastAPI dependency guarding every /api/admin/* route.
How:   The admin console sends the shared ADMIN_API_KEY as `X-Admin-Key`
       (or `Authorization: Bearer <key>`). The key is compared in constant
       time; a missing, wrong or unconfigured key is an AuthenticationError
       (→ 401 through the global exception handlers).

Usage:
    router = APIRouter(prefix="/api/admin/tools", dependencies=[Depends(require_admin)])
"""

import logging
import secrets
from typing import Optional

from fastapi import Request, Security
from fastapi.security import APIKeyHeader

from toolhub.config import settings
from toolhub.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


async def require_admin(
    request: Request,
    api_key: Optional[str] = Security(admin_key_header),
) -> None:
    """
    Raises:
        AuthenticationError: No admin key configured, none supplied, or mismatch
    """
    supplied = api_key or _bearer_token(request)
    expected = settings.admin_api_key

    if not expected:
        logger.error("Admin request to %s rejected: ADMIN_API_KEY is not configured", request.url.path)
        raise AuthenticationError(message="Admin access is not configured on this server")

    if not supplied:
        raise AuthenticationError(message="Admin key is missing")

    if not secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Invalid admin key for %s %s", request.method, request.url.path)
        raise AuthenticationError(message="Admin key is invalid")
