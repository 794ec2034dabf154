"""
Inkwell Backend: Application Package Initializer
==================================================

What: The blogging backend: accounts, cookie sessions, and posts with covers.
Who:  Imported by uvicorn (`uvicorn inkwell.main:app`) and by pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, cookies, forms
    ├─────────────────────────────────────┤
    │  Services (Guard, Posts, Users)     │  ← identity, ownership, lifecycle
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
