"""
ResourcePulse Backend - Application Package Initializer
=======================================================

What: Marks the `resource_pulse` directory as a Python package.
Who:  Imported by uvicorn (`resource_pulse.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, role checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, transactions
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never build queries. Services never touch Request/Response objects.
"""

__version__ = "1.0.0"
