"""
Task API Endpoints
==================

CRUD for the authenticated user's tasks, plus restore of soft-deleted ones.

Route prefix: /api/tasks

Endpoints:
    POST   /                    - Create a task
    GET    /?status&page&size&sort - List the caller's tasks
    GET    /{task_id}           - Get one task
    PUT    /{task_id}           - Update a task
    DELETE /{task_id}           - Soft delete a task
    POST   /{task_id}/restore   - Undo a soft delete
"""

import logging
from typing import Annotated, Optional
import uuid

from fastapi import APIRouter, Path, Query, status

from todolist.dependencies import CurrentUser, DBSession
from todolist.models.task import TaskStatus
from todolist.schemas.common import ErrorResponse
from todolist.schemas.task import (
    CreateTaskRequest,
    TaskApiResponse,
    TaskPage,
    UpdateTaskRequest,
)
from todolist.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()

TaskId = Annotated[uuid.UUID, Path(description="Task ID")]

MAX_PAGE = 1_000_000

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Task not found"}}


@router.post(
    "",
    response_model=TaskApiResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    task_data: CreateTaskRequest,
    current_user: CurrentUser,
    db: DBSession,
):
    """Create a new task. Its status is always TO_DO."""
    task_service = TaskService(db)
    task = await task_service.create_task(
        current_user,
        title=task_data.title,
        description=task_data.description,
    )
    return task.to_api_dict()


@router.get("", response_model=TaskPage)
async def list_tasks(
    current_user: CurrentUser,
    db: DBSession,
    task_status: Annotated[
        Optional[TaskStatus], Query(alias="status", description="Filter by status")
    ] = None,
    page: Annotated[int, Query(ge=1, le=MAX_PAGE, description="Page number")] = 1,
    size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 10,
    sort: Annotated[
        Optional[str], Query(description="field[,asc|desc]", examples=["createdAt,desc"])
    ] = None,
):
    """
    List the caller's tasks, newest first by default.

    Soft-deleted tasks are never included.
    """
    task_service = TaskService(db)
    result = await task_service.list_tasks(
        current_user,
        status=task_status,
        page=page,
        size=size,
        sort=sort,
    )
    return {
        "items": [task.to_api_dict() for task in result["items"]],
        "pagination": result["pagination"],
    }


@router.get("/{task_id}", response_model=TaskApiResponse, responses=_NOT_FOUND)
async def get_task(
    task_id: TaskId,
    current_user: CurrentUser,
    db: DBSession,
):
    """Get a single task."""
    task_service = TaskService(db)
    task = await task_service.get_task(current_user, task_id)
    return task.to_api_dict()


@router.put("/{task_id}", response_model=TaskApiResponse, responses=_NOT_FOUND)
async def update_task(
    task_id: TaskId,
    task_data: UpdateTaskRequest,
    current_user: CurrentUser,
    db: DBSession,
):
    """Update a task. Omitted or blank fields keep their current value."""
    task_service = TaskService(db)
    task = await task_service.update_task(
        current_user,
        task_id,
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
    )
    return task.to_api_dict()


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
)
async def delete_task(
    task_id: TaskId,
    current_user: CurrentUser,
    db: DBSession,
):
    """Soft delete a task."""
    task_service = TaskService(db)
    await task_service.delete_task(current_user, task_id)


@router.post(
    "/{task_id}/restore",
    response_model=TaskApiResponse,
    responses=_NOT_FOUND,
)
async def restore_task(
    task_id: TaskId,
    current_user: CurrentUser,
    db: DBSession,
):
    """Restore a soft-deleted task."""
    task_service = TaskService(db)
    task = await task_service.restore_task(current_user, task_id)
    return task.to_api_dict()
