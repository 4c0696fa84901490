"""
Snippetbox: Services Package
=============================

What:  Business logic independent of HTTP concerns.

Service Inventory:
    - snippet_service.py:  insert / get / latest snippets
    - user_service.py:     signup, authentication, account management (bcrypt)
    - session_store.py:    session state and its in-memory / database stores

Services receive an AsyncSession per call and hold no per-request state,
so a single module-level instance of each is shared by all requests.
"""
