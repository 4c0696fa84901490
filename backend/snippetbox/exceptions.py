"""
Snippetbox: Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions raised by the service layer.
How:   Each exception carries a message and a context dict for the log.
       Handlers translate the expected ones (missing record, bad credentials,
       taken email) into responses; anything else is a fault, contained by
       RecoverPanicMiddleware.

    SnippetboxError
    ├── NotFoundError            → 404 Not Found
    ├── InvalidCredentialsError  → form re-rendered with an error (422)
    ├── DuplicateEmailError      → form re-rendered with an error (422)
    └── DatabaseError            → fault (500)
"""

from typing import Any, Dict, Optional


class SnippetboxError(Exception):
    """
    Base exception for all Snippetbox application errors.

    Attributes:
        message:  Human-readable description
        context:  Debug details for the log; never rendered to the client
    """

    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.context = dict(context or {})
        super().__init__(self.message)


class NotFoundError(SnippetboxError):
    """A record does not exist, or a snippet has expired."""

    def __init__(self, resource: str = "record", resource_id: Optional[Any] = None):
        if resource_id is None:
            message = f"No matching {resource}"
        else:
            message = f"No {resource} with ID {resource_id!r}"
        super().__init__(message, {"resource": resource, "resource_id": resource_id})


class InvalidCredentialsError(SnippetboxError):
    """An email/password pair does not match a stored user."""

    default_message = "Invalid credentials"


class DuplicateEmailError(SnippetboxError):
    """Signup with an email address that is already registered."""

    default_message = "Duplicate email"

    def __init__(self, email: Optional[str] = None):
        super().__init__(context={"email": email} if email else None)


class DatabaseError(SnippetboxError):
    """
    A database operation failed unexpectedly.

    Driver errors (SQL text, constraint names) go to the log only.
    """

    default_message = "A database error occurred. Please try again later."
