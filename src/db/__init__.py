"""Database package export surface.

Re-exports session helpers, CRUD helpers and the SQL book storage for
convenience at import sites.
"""

from . import models, repository  # noqa: F401
from .session import make_engine, make_session_factory, session_scope  # noqa: F401
from .storage import BookNotFoundError, SqlBookStorage  # noqa: F401

__all__ = [
    "BookNotFoundError",
    "SqlBookStorage",
    "make_engine",
    "make_session_factory",
    "models",
    "repository",
    "session_scope",
]
