"""
Inkwell Backend — Application Package Initializer
==================================================

What: Marks the `inkwell` directory as a Python package.
Who:  Imported by uvicorn (`inkwell.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a layered FastAPI application:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← status workflow, audit, SEO
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls; services own every status
    transition and the audit entry that goes with it; models describe the
    tables; schemas describe the JSON contract.
"""

__version__ = "1.0.0"
