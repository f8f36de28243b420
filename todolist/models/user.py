"""
User Model
==========

SQLAlchemy model for user accounts.
"""

from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, WriteOnlyMapped, mapped_column, relationship

from todolist.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from todolist.models.task import Task


class User(Base, TimestampMixin):
    """
    User account model.

    Created at registration; never updated or deleted by the API.
    """

    __tablename__ = "users"

    # Primary Key
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Account fields
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Relationships
    tasks: WriteOnlyMapped["Task"] = relationship(
        "Task",
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"
