"""
Snippetbox: ORM Models
=======================

Importing this package registers every table with Base.metadata
(used by Alembic autogenerate and by the test suite's create_all).
"""

from snippetbox.models.session import SessionRecord
from snippetbox.models.snippet import Snippet
from snippetbox.models.user import User

__all__ = ["SessionRecord", "Snippet", "User"]
