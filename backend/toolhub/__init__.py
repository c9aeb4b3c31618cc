"""
Toolhub Backend — Application Package
======================================

What: Backend for the AI tool directory (catalog browsing, suggestion
      submission, and the admin review workflow).
Who:  Imported by uvicorn (toolhub.main:app), Alembic, pytest and the seed script.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, admin auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Approval workflow, catalog CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls; services never see a Request object
    and can be exercised directly against a session in tests.
"""

__version__ = "1.0.0"
