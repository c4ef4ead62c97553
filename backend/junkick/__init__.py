"""
Junkick Backend — Application Package Initializer
===================================================

What: The `junkick` package: a project-collaboration marketplace backend.
Who:  Imported by uvicorn (`junkick.main:app`), Alembic, the snapshot
      importer (`python -m junkick.importer`) and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (Business Logic)          │  ← ownership, seats, identity
    │  access_control (pure evaluator)    │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
