"""
User Repository
===============

Persistence queries for user accounts.
"""

from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from todolist.models.user import User


class UserRepository:
    """Async queries over the ``users`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check whether an email is already registered."""
        stmt = select(exists().where(User.email == email))
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def add(self, user: User) -> User:
        """Stage a new user and flush to obtain its primary key."""
        self.db.add(user)
        await self.db.flush()
        return user
