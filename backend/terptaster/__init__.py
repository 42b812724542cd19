"""
TerpTaster Backend - Application Package
========================================

What: The `terptaster` package: REST API for strain reviews, photo uploads,
      terpene scoring and the terp training game.
Who:  Imported by uvicorn (`terptaster.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← scoring, training, reviews
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The scoring and training services never touch the database: they work
    on the read-only terpene dataset that is loaded once at startup.
"""

__version__ = "2.0.0"
