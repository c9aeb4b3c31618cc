"""
Toolhub Backend — Admin Review Routes
=======================================

What:  The review queue and the approve/deny action.
Who:   Admin console; every route requires the admin key.

    GET    /api/admin/requests          list (newest first, ?status=)
    GET    /api/admin/requests/{id}     detail
    PUT    /api/admin/requests/{id}     {"status": "approved" | "denied"}
    DELETE /api/admin/requests/{id}     remove a request

Review response:
    200 with the updated request; approvals also report the tool, whether it
    was created or already listed, the link report and any tag warnings.
    Warnings mean the approval went through with imperfect tags; hard
    failures come back as error bodies (404, 409, 400, 500) instead.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.auth import require_admin
from toolhub.config import settings
from toolhub.database import get_db_session
from toolhub.schemas.common import ErrorResponse, MessageResponse
from toolhub.schemas.tool import ToolResponse
from toolhub.schemas.tool_request import (
    LinkFailureResponse,
    LinkReportResponse,
    ToolRequestListResponse,
    ToolRequestResponse,
    TransitionRequest,
    TransitionResponse,
)
from toolhub.services.request_service import TransitionResult, request_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/requests",
    tags=["Admin: Requests"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or invalid admin key", "model": ErrorResponse}},
)


def _transition_response(result: TransitionResult) -> TransitionResponse:
    report = None
    if result.link_report is not None:
        report = LinkReportResponse(
            linked=result.link_report.linked,
            already_linked=result.link_report.already_linked,
            failed=[
                LinkFailureResponse(tag_id=f.tag_id, tag=f.tag_name, error=f.error)
                for f in result.link_report.failed
            ],
        )

    if result.tool is None:
        message = "Request denied"
    elif result.warnings:
        message = "Request approved with warnings"
    else:
        message = "Request approved"

    return TransitionResponse(
        message=message,
        request=ToolRequestResponse.model_validate(result.request),
        tool=ToolResponse.model_validate(result.tool) if result.tool is not None else None,
        tool_outcome=result.outcome.value if result.outcome is not None else None,
        link_report=report,
        warnings=result.warnings,
    )


@router.get("", response_model=ToolRequestListResponse, summary="List tool requests")
async def list_requests(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    status: str | None = Query(default=None, description="pending, approved or denied"),
    db: AsyncSession = Depends(get_db_session),
) -> ToolRequestListResponse:
    result = await request_service.list_requests(db=db, page=page, limit=limit, status=status)
    response.headers["X-Total-Count"] = str(result.pagination.total_items)
    return result


@router.get(
    "/{request_id}",
    response_model=ToolRequestResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a tool request",
)
async def get_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ToolRequestResponse:
    request = await request_service.get_request(db=db, request_id=request_id)
    return ToolRequestResponse.model_validate(request)


@router.put(
    "/{request_id}",
    response_model=TransitionResponse,
    responses={
        404: {"description": "Request not found", "model": ErrorResponse},
        409: {"description": "Request is not pending", "model": ErrorResponse},
        500: {"description": "Tool could not be created", "model": ErrorResponse},
    },
    summary="Approve or deny a tool request",
)
async def review_request(
    request_id: UUID,
    payload: TransitionRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TransitionResponse:
    result = await request_service.transition(
        db=db, request_id=request_id, target_status=payload.status,
    )
    if result.warnings:
        logger.warning("Request %s approved with warnings: %s", request_id, result.warnings)
    return _transition_response(result)


@router.delete(
    "/{request_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a tool request",
)
async def delete_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await request_service.delete_request(db=db, request_id=request_id)
    return MessageResponse(message="Request deleted")
