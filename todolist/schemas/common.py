"""
Common Schemas
==============

Shared Pydantic schemas used across the application.
"""

from typing import Optional

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Pagination metadata for responses."""

    current_page: int
    total_pages: int
    total_items: int
    per_page: int
    has_next: bool
    has_previous: bool


class ErrorResponse(BaseModel):
    """Standard error response."""

    timestamp: int
    status: int
    code: str
    message: str
    errors: Optional[dict[str, str]] = None
