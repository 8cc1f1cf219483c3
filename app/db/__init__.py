"""
Database access: declarative base, engine and sessions.
"""
from app.db.database import (
    Base,
    dispose_engine,
    get_async_session,
    make_session_factory,
)

__all__ = [
    "Base",
    "dispose_engine",
    "get_async_session",
    "make_session_factory",
]
