"""
Snippetbox: Application Package
================================

What: A small web application for pasting and sharing text snippets, with user
      signup/login, session-backed flash messages and protected routes.
Who:  Imported by uvicorn (`snippetbox.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │     Middleware chains (ASGI)        │  ← panic / log / headers / session / auth
    ├─────────────────────────────────────┤
    │      Routes (request handlers)      │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (business logic)       │  ← snippets, users, bcrypt
    ├─────────────────────────────────────┤
    │   Models & Schemas (data / forms)   │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (persistence)         │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
