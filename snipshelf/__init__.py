"""
SnipShelf Backend — Application Package Initializer
===================================================

What: Marks the `snipshelf` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn snipshelf.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every action:

    ┌─────────────────────────────────────┐
    │      Routes (named actions)         │  ← HTTP envelope, input shapes
    ├─────────────────────────────────────┤
    │   Auth guard + Services (logic)     │  ← ownership, default invariant
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the database directly; services never look at HTTP
    headers. The only object that crosses the boundary is `CurrentUser`.
"""

__version__ = "1.0.0"
