"""
Toolhub Backend — Request Service Tests
=========================================

What we test:
    ✅ Approve: one tool with the request's URL, tags linked, status approved
    ✅ Approve with an already-listed URL: zero new tools and zero new links
    ✅ Deny: status denied, no tools
    ✅ Terminal states reject every further transition without changing state
    ✅ Unknown request → NotFoundError, unsupported target → ValidationError
    ✅ Materializer failure leaves the request pending, even if the session commits
    ✅ A concurrent review that claimed the request first wins
    ✅ Tag resolution / link failures become warnings for their own tag only
    ✅ Submission, listing and deletion of requests
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import DataError

from conftest import count_of, utc
from toolhub.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from toolhub.models.tag import Tag
from toolhub.models.tool import Tool, ToolTag
from toolhub.models.tool_request import RequestStatus, ToolRequest
from toolhub.schemas.tool_request import ToolRequestCreate
from toolhub.services.request_service import RequestService
from toolhub.services.tag_linker import LinkFailure, LinkReport
from toolhub.services.tag_resolver import TagResolver
from toolhub.services.tool_materializer import MaterializeOutcome


@pytest.fixture
def service():
    return RequestService()


async def _status_of(db, request_id) -> str:
    result = await db.execute(select(ToolRequest.status).where(ToolRequest.id == request_id))
    return result.scalar_one()


class PickyResolver(TagResolver):
    """The store rejects the tag named 'bad', the way PostgreSQL rejects an overlong name."""

    async def _create(self, db, name):
        if name == "bad":
            raise DataError(
                "INSERT INTO tags", {}, Exception("value too long for type character varying(50)")
            )
        return await super()._create(db, name)



class TestApprove:

    @pytest.mark.asyncio
    async def test_approve_creates_tool_with_tags(self, db_session, make_request, service):
        request = await make_request(name="Foo", url="https://foo.dev", tags=["x", "y"])

        result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.outcome is MaterializeOutcome.CREATED
        assert result.tool.name == "Foo"
        assert result.tool.url == "https://foo.dev"
        assert {tag.name for tag in result.tool.tags} == {"x", "y"}
        assert result.link_report.linked == 2
        assert result.warnings == []
        assert await count_of(db_session, Tool) == 1

    @pytest.mark.asyncio
    async def test_approve_accepts_enum_target(self, db_session, make_request, service):
        request = await make_request()

        result = await service.transition(db_session, request.id, RequestStatus.APPROVED)

        assert result.request.status == "approved"

    @pytest.mark.asyncio
    async def test_approve_sets_updated_at(self, db_session, make_request, service):
        request = await make_request()
        request.updated_at = utc(2020, 1, 1)
        await db_session.flush()

        result = await service.transition(db_session, request.id, "approved")

        assert result.request.updated_at.year > 2020

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_tags", ["{tag1,tag2}", "tag1, tag2", ["Tag1", " tag2 "]])
    async def test_every_raw_tag_shape_links_the_same_tags(
        self, db_session, make_request, service, raw_tags
    ):
        request = await make_request(tags=raw_tags)

        result = await service.transition(db_session, request.id, "approved")

        assert [tag.name for tag in result.tool.tags] == ["tag1", "tag2"]

    @pytest.mark.asyncio
    async def test_case_variants_make_one_tag(self, db_session, make_request, service):
        request = await make_request(tags=["AI", "ai", " Ai "])

        result = await service.transition(db_session, request.id, "approved")

        assert [tag.name for tag in result.tool.tags] == ["ai"]
        assert await count_of(db_session, Tag) == 1

    @pytest.mark.asyncio
    async def test_approve_reuses_existing_tags(self, db_session, make_request, service):
        db_session.add(Tag(name="x"))
        await db_session.flush()
        request = await make_request(tags=["X", "y"])

        await service.transition(db_session, request.id, "approved")

        assert await count_of(db_session, Tag) == 2

    @pytest.mark.asyncio
    async def test_approve_without_tags(self, db_session, make_request, service):
        request = await make_request(tags=[])

        result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.tool.tags == []
        assert result.link_report.linked == 0

    @pytest.mark.asyncio
    async def test_second_request_for_same_url_adds_nothing(self, db_session, make_request, service):
        first = await make_request(name="Foo", url="https://foo.dev", tags=["x"])
        second = await make_request(name="Foo Again", url="https://foo.dev", tags=["z"])

        first_result = await service.transition(db_session, first.id, "approved")
        second_result = await service.transition(db_session, second.id, "approved")

        assert second_result.request.status == "approved"
        assert second_result.outcome is MaterializeOutcome.ALREADY_EXISTS
        assert second_result.tool.id == first_result.tool.id
        assert second_result.link_report is None
        assert await count_of(db_session, Tool) == 1
        assert await count_of(db_session, ToolTag) == 1
        assert await count_of(db_session, Tag) == 1

    @pytest.mark.asyncio
    async def test_malformed_tags_become_a_warning(self, db_session, make_request, service):
        request = await make_request(tags={"not": "a list"})

        result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.outcome is MaterializeOutcome.CREATED
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Request tags were ignored")


class TestDeny:

    @pytest.mark.asyncio
    async def test_deny_creates_no_tool(self, db_session, make_request, service):
        request = await make_request()

        result = await service.transition(db_session, request.id, "denied")

        assert result.request.status == "denied"
        assert result.tool is None
        assert result.outcome is None
        assert await count_of(db_session, Tool) == 0
        assert await count_of(db_session, Tag) == 0


class TestTransitionGuards:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("current", ["approved", "denied"])
    @pytest.mark.parametrize("target", ["approved", "denied"])
    async def test_terminal_requests_are_rejected(
        self, db_session, make_request, service, current, target
    ):
        request = await make_request(status=current)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.transition(db_session, request.id, target)

        assert exc_info.value.current_status == current
        assert exc_info.value.target_status == target
        assert await _status_of(db_session, request.id) == current
        assert await count_of(db_session, Tool) == 0

    @pytest.mark.asyncio
    async def test_reapproval_is_rejected(self, db_session, make_request, service):
        request = await make_request()
        await service.transition(db_session, request.id, "approved")

        with pytest.raises(InvalidTransitionError):
            await service.transition(db_session, request.id, "approved")
        assert await count_of(db_session, Tool) == 1

    @pytest.mark.asyncio
    async def test_unknown_request(self, db_session, service):
        with pytest.raises(NotFoundError):
            await service.transition(db_session, uuid.uuid4(), "approved")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", ["pending", "processed", ""])
    async def test_unsupported_target(self, db_session, make_request, service, target):
        request = await make_request()

        with pytest.raises(ValidationError):
            await service.transition(db_session, request.id, target)
        assert await _status_of(db_session, request.id) == "pending"

    @pytest.mark.asyncio
    async def test_materializer_failure_keeps_request_pending(self, db_session, make_request, service):
        request = await make_request(name="")

        with pytest.raises(ValidationError):
            await service.transition(db_session, request.id, "approved")

        assert await _status_of(db_session, request.id) == "pending"
        assert await count_of(db_session, Tool) == 0

    @pytest.mark.asyncio
    async def test_store_failure_while_materializing_keeps_request_pending(
        self, db_session, make_request, service
    ):
        request = await make_request()
        request_id = request.id

        with patch("toolhub.services.request_service.tool_materializer") as materializer:
            materializer.materialize = AsyncMock(
                side_effect=PersistenceError(message="tools table is locked")
            )
            with pytest.raises(PersistenceError):
                await service.transition(db_session, request_id, "approved")

        assert await _status_of(db_session, request_id) == "pending"
        assert await count_of(db_session, Tool) == 0

        # Committing after the failure must not store a half-done approval
        await db_session.commit()
        assert await _status_of(db_session, request_id) == "pending"

        result = await service.transition(db_session, request_id, "denied")
        assert result.request.status == "denied"

    @pytest.mark.asyncio
    async def test_concurrent_review_wins(self, db_session, make_request, service):
        request = await make_request()
        # Another reviewer denies it behind this session's back
        await db_session.execute(
            update(ToolRequest)
            .where(ToolRequest.id == request.id)
            .values(status="denied")
            .execution_options(synchronize_session=False)
        )
        assert request.status == "pending"

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.transition(db_session, request.id, "approved")

        assert exc_info.value.current_status == "denied"
        assert await count_of(db_session, Tool) == 0


class TestTagWarnings:

    @pytest.mark.asyncio
    async def test_link_failures_are_warnings(self, db_session, make_request, service):
        request = await make_request(tags=["x", "y"])
        report = LinkReport(linked=1, failed=[LinkFailure(Tag(name="y"), uuid.uuid4(), "y", "boom")])

        with patch("toolhub.services.request_service.tag_linker") as linker:
            linker.link = AsyncMock(return_value=report)
            result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.link_report is report
        assert result.warnings == ["Tag 'y' could not be linked: boom"]

    @pytest.mark.asyncio
    async def test_resolver_failure_is_a_warning(self, db_session, make_request, service):
        request = await make_request(tags=["x"])

        with patch("toolhub.services.request_service.tag_resolver") as resolver:
            resolver.resolve = AsyncMock(side_effect=PersistenceError(message="tags table is gone"))
            result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.outcome is MaterializeOutcome.CREATED
        assert result.link_report.linked == 0
        assert result.warnings == ["Tag 'x' could not be resolved: tags table is gone"]
        assert await count_of(db_session, Tool) == 1

    @pytest.mark.asyncio
    async def test_one_unresolvable_tag_fails_alone(self, db_session, make_request, service):
        request = await make_request(tags=["good", "bad", "fine"])

        with patch("toolhub.services.request_service.tag_resolver", new=PickyResolver()):
            result = await service.transition(db_session, request.id, "approved")

        assert result.request.status == "approved"
        assert result.link_report.linked == 2
        assert [t.name for t in result.tool.tags] == ["fine", "good"]
        assert result.warnings == ["Tag 'bad' could not be resolved: Could not resolve tags. Please try again."]
        assert await count_of(db_session, ToolTag) == 2


class TestSubmission:

    @pytest.mark.asyncio
    async def test_submit_stores_pending_request(self, db_session, service):
        data = ToolRequestCreate(
            name="Foo",
            url="https://foo.dev",
            description="A tool that does foo things.",
            tags=["x", "y"],
        )

        request = await service.submit_request(db_session, data)

        assert request.status == "pending"
        assert request.tags == ["x", "y"]
        assert await count_of(db_session, ToolRequest) == 1

    @pytest.mark.asyncio
    async def test_submit_listed_url_conflicts(self, db_session, service):
        db_session.add(Tool(name="Foo", url="https://foo.dev"))
        await db_session.flush()
        data = ToolRequestCreate(
            name="Foo",
            url="https://foo.dev",
            description="A tool that does foo things.",
            tags=[],
        )

        with pytest.raises(ConflictError):
            await service.submit_request(db_session, data)
        assert await count_of(db_session, ToolRequest) == 0


class TestQueue:

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session, make_request, service):
        await make_request(name="Old", url="https://old.dev", created_at=utc(2024, 1, 1))
        await make_request(name="New", url="https://new.dev", created_at=utc(2024, 3, 1))
        await make_request(name="Mid", url="https://mid.dev", created_at=utc(2024, 2, 1))

        page = await service.list_requests(db_session, page=1, limit=10)

        assert [r.name for r in page.data] == ["New", "Mid", "Old"]
        assert page.pagination.total_items == 3

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, db_session, make_request, service):
        await make_request(url="https://a.dev")
        await make_request(url="https://b.dev", status="denied")

        page = await service.list_requests(db_session, status="denied")

        assert [r.url for r in page.data] == ["https://b.dev"]

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status(self, db_session, service):
        with pytest.raises(ValidationError):
            await service.list_requests(db_session, status="processed")

    @pytest.mark.asyncio
    async def test_list_paginates(self, db_session, make_request, service):
        for day in range(1, 6):
            await make_request(url=f"https://t{day}.dev", created_at=utc(2024, 1, day))

        page = await service.list_requests(db_session, page=2, limit=2)

        assert [r.url for r in page.data] == ["https://t3.dev", "https://t2.dev"]
        assert page.pagination.total_items == 5
        assert page.pagination.total_pages == 3

    @pytest.mark.asyncio
    async def test_get_missing_request(self, db_session, service):
        with pytest.raises(NotFoundError):
            await service.get_request(db_session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_request(self, db_session, make_request, service):
        request = await make_request()

        await service.delete_request(db_session, request.id)

        assert await count_of(db_session, ToolRequest) == 0
