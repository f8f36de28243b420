"""
Database Module
===============

Provides database session management and base model.
"""

from todolist.db.base import Base
from todolist.db.session import close_db, get_db, get_session_factory, init_db

__all__ = ["Base", "get_db", "get_session_factory", "init_db", "close_db"]
