"""
Toolhub Backend — Suggestion Submission Route
===============================================

What:  POST /api/requests, the public "suggest a tool" form.
Who:   Anonymous visitors. Throttled per IP by SubmissionRateLimitMiddleware.

Request Flow:
    1. FastAPI validates the body against ToolRequestCreate (422 on schema errors:
       name 3-100 chars, http(s) URL up to 2048, description 10-1000, tags up to 50 chars)
    2. RequestService rejects URLs already in the catalog (409)
    3. The suggestion is stored as pending and returned with 201
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse
from toolhub.schemas.tool_request import (
    ToolRequestCreate,
    ToolRequestResponse,
    ToolRequestSubmitResponse,
)
from toolhub.services.request_service import request_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Requests"])


@router.post(
    "/requests",
    status_code=201,
    response_model=ToolRequestSubmitResponse,
    responses={
        409: {"description": "Tool already listed", "model": ErrorResponse},
        429: {"description": "Too many submissions", "model": ErrorResponse},
    },
    summary="Suggest a new tool",
)
async def submit_request(
    payload: ToolRequestCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ToolRequestSubmitResponse:
    request = await request_service.submit_request(db=db, data=payload)
    return ToolRequestSubmitResponse(data=ToolRequestResponse.model_validate(request))
