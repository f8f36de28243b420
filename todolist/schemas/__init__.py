"""
Pydantic Schemas
================

Request and response schemas for the API.
"""

from todolist.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from todolist.schemas.common import ErrorResponse, PaginationMeta
from todolist.schemas.task import (
    CreateTaskRequest,
    TaskApiResponse,
    TaskPage,
    UpdateTaskRequest,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    # Common
    "ErrorResponse",
    "PaginationMeta",
    # Task
    "CreateTaskRequest",
    "UpdateTaskRequest",
    "TaskApiResponse",
    "TaskPage",
]
