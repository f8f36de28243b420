"""
Database Models
===============

SQLAlchemy ORM models for all database entities.

All models are imported here to ensure they are registered
with SQLAlchemy's metadata for migrations and relationships.
"""

from todolist.models.user import User
from todolist.models.task import Task, TaskStatus

__all__ = [
    # User
    "User",
    # Task
    "Task",
    "TaskStatus",
]
