"""
Task Schemas
============

Pydantic schemas for task endpoints.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from todolist.models.task import TaskStatus
from todolist.schemas.common import PaginationMeta
from todolist.utils.validators import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    check_optional_text,
    check_required_text,
)


def _raise_problems(problems: list[str]) -> None:
    if problems:
        raise ValueError("; ".join(problems))


# =============================================================================
# Request Schemas
# =============================================================================

class CreateTaskRequest(BaseModel):
    """
    Request schema for creating a task.

    Has no status field: new tasks always start as TO_DO and any status sent
    by the client is dropped with the other unknown fields.
    """

    model_config = ConfigDict(validate_default=True)

    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_required_text(v, "Title", TITLE_MAX_LENGTH))
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_required_text(v, "Description", DESCRIPTION_MAX_LENGTH))
        return v


class UpdateTaskRequest(BaseModel):
    """
    Request schema for updating a task.

    Every field is optional. Blank strings pass validation and are ignored
    by the service, as is a null status.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_optional_text(v, "Title", TITLE_MAX_LENGTH))
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_optional_text(v, "Description", DESCRIPTION_MAX_LENGTH))
        return v


# =============================================================================
# Response Schemas
# =============================================================================

class TaskApiResponse(BaseModel):
    """
    Response schema for a task.

    Uses camelCase field names to match the client contract.
    """

    id: str
    title: str
    description: str
    status: TaskStatus
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    userId: str
    userEmail: str


class TaskPage(BaseModel):
    """One page of the caller's tasks."""

    items: list[TaskApiResponse]
    pagination: PaginationMeta
