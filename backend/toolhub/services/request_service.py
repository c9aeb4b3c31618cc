"""
Toolhub Backend — Tool Request Service (Review State Machine)
===============================================================

What:  Submission, listing and review of tool suggestions.
Who:   POST /api/requests (submission) and /api/admin/requests/* (review).

State Machine:
    ┌─────────┐  approve   ┌──────────┐
    │ pending │───────────▶│ approved │  (terminal)
    └─────────┘            └──────────┘
         │       deny      ┌──────────┐
         └────────────────▶│  denied  │  (terminal)
                           └──────────┘

Approval Flow (transition → approved):
    ┌──────────┐   ┌────────────┐   ┌─────────────┐   ┌──────────┐   ┌────────┐
    │  Claim   │──▶│ Normalize  │──▶│ Materialize │──▶│ Resolve  │──▶│  Link  │
    │ (UPDATE  │   │ raw tags   │   │    tool     │   │   tags   │   │  tags  │
    │ ..WHERE  │   └────────────┘   └─────────────┘   └──────────┘   └────────┘
    │ pending) │                          │                 │             │
    └──────────┘                   already exists?     failures become warnings
                                   skip resolve/link

    - The claim is an atomic conditional UPDATE. Of two concurrent reviews of
      the same request exactly one updates a row; the other gets
      InvalidTransitionError and does nothing else.
    - The claim and the materialization share one savepoint. If the
      materializer fails, the savepoint rolls back before the exception
      propagates, so the request is pending again whatever the caller does
      with the session.
    - Each tag is resolved in its own savepoint and each link insert runs in
      its own savepoint too. Failures are collected as warnings, affect only
      their own tag and never undo the approval.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from toolhub.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ToolhubError,
    ValidationError,
)
from toolhub.models.tag import Tag
from toolhub.models.tool import Tool
from toolhub.models.tool_request import RequestStatus, ToolRequest
from toolhub.schemas.common import PaginationMeta, page_offset
from toolhub.schemas.tool_request import (
    ToolRequestCreate,
    ToolRequestListResponse,
    ToolRequestResponse,
)
from toolhub.services.pagination import check_page_params, count_rows
from toolhub.services.tag_linker import LinkReport, tag_linker
from toolhub.services.tag_parsing import parse_raw_tags
from toolhub.services.tag_resolver import tag_resolver
from toolhub.services.tool_materializer import MaterializeOutcome, tool_materializer

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    """
    Outcome of a successful review.

    For denials only `request` is set. For approvals `tool` and `outcome` are
    always set; `link_report` is None when tag linking was skipped (the tool
    already existed) or could not run.
    """
    request: ToolRequest
    tool: Optional[Tool] = None
    outcome: Optional[MaterializeOutcome] = None
    link_report: Optional[LinkReport] = None
    warnings: List[str] = field(default_factory=list)


class RequestService:
    """
    Business logic for tool requests.

    Responsibilities:
        - submit_request(): public suggestion form
        - list_requests() / get_request() / delete_request(): admin review queue
        - transition(): the approve/deny state machine
    """

    async def transition(
        self,
        db: AsyncSession,
        request_id: UUID,
        target_status: Union[str, RequestStatus],
    ) -> TransitionResult:
        """
        Move a pending request to `approved` or `denied`.

        Workflow Steps:
            1. Validate the target status
            2. Load the request (404 when missing)
            3. Reject anything that is not pending (409)
            4. Claim the request with UPDATE ... WHERE status = 'pending'
            5. Denied: done
            6. Approved: normalize tags, materialize the tool, then resolve and
               link tags unless the tool already existed

        Error Recovery:
            Steps 1-4 fail → nothing was written
            Step 6 materialize fails → the claim's savepoint rolls back, the
                                       exception propagates, the request
                                       stays pending
            Step 6 resolve/link fails → recorded in `warnings` for that tag,
                                        approval stands

        Raises:
            ValidationError: Unsupported target status, or the request has an
                             empty name/URL
            NotFoundError: No request with this id
            InvalidTransitionError: Request is not pending, or a concurrent
                                    review claimed it first
            PersistenceError: Store failure before or during materialization
        """
        target = self._parse_target(target_status)

        try:
            request = await db.get(ToolRequest, request_id)
        except SQLAlchemyError as e:
            logger.error("Loading request %s failed: %s", request_id, str(e), exc_info=True)
            raise PersistenceError(context={"request_id": str(request_id)})

        if request is None:
            raise NotFoundError(resource="tool request", resource_id=str(request_id))

        if request.status != RequestStatus.PENDING.value:
            raise InvalidTransitionError(request.status, target.value)

        # Claim and materialization commit or roll back together
        try:
            async with db.begin_nested():
                await self._claim(db, request, target)
                logger.info("Request %s claimed for transition to %s", request_id, target.value)

                result = TransitionResult(request=request)

                if target is RequestStatus.APPROVED:
                    await self._approve(db, request, result)
        except Exception:
            # The in-memory status may still say claimed; reload it on next access
            db.expire(request)
            raise

        try:
            await db.refresh(request)
        except SQLAlchemyError as e:
            logger.error("Reloading request %s failed: %s", request_id, str(e), exc_info=True)
            raise PersistenceError(context={"request_id": str(request_id)})

        logger.info(
            "Request %s is now %s (warnings=%d)",
            request_id, request.status, len(result.warnings),
        )
        return result

    def _parse_target(self, target_status: Union[str, RequestStatus]) -> RequestStatus:
        try:
            target = RequestStatus(target_status)
        except ValueError:
            target = None
        if target is None or target is RequestStatus.PENDING:
            raise ValidationError(
                message="Status must be 'approved' or 'denied'",
                field="status",
                context={"value": str(target_status)},
            )
        return target

    async def _claim(self, db: AsyncSession, request: ToolRequest, target: RequestStatus) -> None:
        """Atomic pending → target update; raises if another review got there first."""
        request_id = request.id
        try:
            claimed = await db.execute(
                update(ToolRequest)
                .where(
                    ToolRequest.id == request_id,
                    ToolRequest.status == RequestStatus.PENDING.value,
                )
                .values(status=target.value, updated_at=datetime.now(timezone.utc))
            )
        except SQLAlchemyError as e:
            logger.error("Claiming request %s failed: %s", request_id, str(e), exc_info=True)
            raise PersistenceError(context={"request_id": str(request_id)})

        if claimed.rowcount == 0:
            await db.refresh(request)
            logger.warning(
                "Request %s was reviewed concurrently (now %s)", request_id, request.status,
            )
            raise InvalidTransitionError(request.status, target.value)

    async def _approve(self, db: AsyncSession, request: ToolRequest, result: TransitionResult) -> None:
        try:
            tag_names = parse_raw_tags(request.tags)
        except ValidationError as e:
            tag_names = []
            result.warnings.append(f"Request tags were ignored: {e.message}")

        # Failures here propagate and abort the whole transition
        materialized = await tool_materializer.materialize(db, request)
        result.tool = materialized.tool
        result.outcome = materialized.outcome

        if materialized.outcome is MaterializeOutcome.ALREADY_EXISTS:
            logger.info(
                "Request %s approved against existing tool %s; tags not linked",
                request.id, materialized.tool.id,
            )
        else:
            result.link_report = await self._attach_tags(db, materialized.tool, tag_names, result.warnings)

        try:
            await db.refresh(materialized.tool, attribute_names=["tags"])
        except SQLAlchemyError as e:
            logger.error("Reloading tags of tool %s failed: %s", materialized.tool.id, str(e))
            raise PersistenceError(context={"tool_id": str(materialized.tool.id)})

    async def _attach_tags(
        self,
        db: AsyncSession,
        tool: Tool,
        tag_names: List[str],
        warnings: List[str],
    ) -> Optional[LinkReport]:
        if not tag_names:
            return LinkReport()

        tool_id = tool.id
        resolved: List[Tag] = []
        for name in tag_names:
            try:
                async with db.begin_nested():
                    found = await tag_resolver.resolve(db, [name])
            except (PersistenceError, SQLAlchemyError) as e:
                message = e.message if isinstance(e, ToolhubError) else type(e).__name__
                logger.warning("Tag '%s' for tool %s could not be resolved: %s", name, tool_id, message)
                warnings.append(f"Tag '{name}' could not be resolved: {message}")
                continue
            resolved.extend(found.values())

        try:
            report = await tag_linker.link(db, tool, resolved)
        except SQLAlchemyError as e:
            logger.warning("Tags for tool %s could not be linked: %s", tool_id, str(e))
            warnings.append(f"Tags could not be linked: {type(e).__name__}")
            return None

        for failure in report.failed:
            warnings.append(f"Tag '{failure.tag_name}' could not be linked: {failure.error}")
        return report

    # ── Submission ────────────────────────────────────────────────────────

    async def submit_request(self, db: AsyncSession, data: ToolRequestCreate) -> ToolRequest:
        """
        Record a new suggestion as pending.

        Raises:
            ConflictError: The URL already belongs to a catalog tool
            PersistenceError: Store failure
        """
        try:
            listed = await db.execute(select(Tool.id).where(Tool.url == data.url))
            if listed.first() is not None:
                raise ConflictError(
                    message="This tool is already listed in the directory.",
                    context={"url": data.url},
                )

            request = ToolRequest(
                name=data.name,
                url=data.url,
                description=data.description,
                tags=list(data.tags),
                status=RequestStatus.PENDING.value,
            )
            db.add(request)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Saving tool request failed: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not save your suggestion. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Tool request %s submitted for %s", request.id, request.url)
        return request

    # ── Admin Queue ───────────────────────────────────────────────────────

    async def list_requests(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
    ) -> ToolRequestListResponse:
        """Newest first, optionally restricted to one status."""
        check_page_params(page, limit)

        query = select(ToolRequest)
        if status:
            try:
                status_value = RequestStatus(status).value
            except ValueError:
                raise ValidationError(
                    message="status must be one of: pending, approved, denied",
                    field="status",
                )
            query = query.where(ToolRequest.status == status_value)

        try:
            total = await count_rows(db, query)
            result = await db.execute(
                query.order_by(ToolRequest.created_at.desc(), ToolRequest.id)
                .offset(page_offset(page, limit))
                .limit(limit)
            )
            requests = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Listing tool requests failed: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve tool requests. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return ToolRequestListResponse(
            data=[ToolRequestResponse.model_validate(r) for r in requests],
            pagination=PaginationMeta.build(page, limit, total),
        )

    async def get_request(self, db: AsyncSession, request_id: UUID) -> ToolRequest:
        try:
            request = await db.get(ToolRequest, request_id)
        except SQLAlchemyError as e:
            logger.error("Loading request %s failed: %s", request_id, str(e))
            raise PersistenceError(context={"request_id": str(request_id)})

        if request is None:
            raise NotFoundError(resource="tool request", resource_id=str(request_id))
        return request

    async def delete_request(self, db: AsyncSession, request_id: UUID) -> None:
        request = await self.get_request(db, request_id)
        try:
            await db.delete(request)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting request %s failed: %s", request_id, str(e))
            raise PersistenceError(context={"request_id": str(request_id)})
        logger.info("Tool request %s deleted", request_id)


# ── Singleton Instance ────────────────────────────────────────────────────
request_service = RequestService()
