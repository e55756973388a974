"""
RecipePlanner Backend - Application Package Initializer
=======================================================

What: Marks the `recipeplanner` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Access Guard (token → identity)   │  ← runs before every protected route
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, ownership-scoped resources
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the database directly. Every query on a user-owned
    table goes through a service that receives the caller's identity from
    the access guard.
"""

__version__ = "1.0.0"
