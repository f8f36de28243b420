"""
Repositories
============

Explicit persistence interfaces used by the services.
"""

from todolist.repositories.tasks import TaskRepository
from todolist.repositories.users import UserRepository

__all__ = ["TaskRepository", "UserRepository"]
