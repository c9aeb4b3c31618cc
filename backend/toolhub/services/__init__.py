# Services package init
"""
Toolhub Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services are stateless singletons. Every call receives the request's
       AsyncSession, only flushes, and leaves commit/rollback to get_db_session.

Service Inventory:
    Approval workflow
    - tag_parsing: normalizes the raw `tags` field of a request (list / "{a,b}" / "a, b")
    - TagResolver: tag names → Tag rows, creating missing ones race-safely
    - ToolMaterializer: approved request → catalog Tool (or the existing one)
    - TagLinker: best-effort tool_tags inserts with a per-tag report
    - RequestService: submission, review queue and the pending → approved/denied machine

    Catalog management
    - ToolService: catalog listing/search and admin tool CRUD with tag reconciliation
    - TagService: tag listing and admin tag CRUD
    - UserService: directory users and roles
"""
