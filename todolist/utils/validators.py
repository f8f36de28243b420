"""
Validators
==========

Field validation rules for request payloads.

Each ``check_*`` function returns the list of problems found (empty when the
value is fine) so that several messages for the same field can be reported
together. Schemas turn a non-empty list into a single ``ValueError``.
"""

import re
from typing import Optional

from todolist.core.errors import ValidationError
from todolist.utils.helpers import is_blank

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

SORTABLE_FIELDS = ("createdAt", "updatedAt", "title", "status")
SORT_DIRECTIONS = ("asc", "desc")


def check_required_text(
    value: Optional[str],
    label: str,
    max_length: int,
    min_length: int = 1,
) -> list[str]:
    """
    Check a mandatory text field.

    Args:
        value: Submitted value
        label: Human readable field name used in messages
        max_length: Maximum allowed length
        min_length: Minimum allowed length (after the not-blank check)

    Returns:
        List of problems, empty if the value is valid
    """
    if is_blank(value):
        return [f"{label} cannot be blank"]

    problems = []
    if len(value) < min_length:
        problems.append(f"{label} must be at least {min_length} characters")
    if len(value) > max_length:
        problems.append(f"{label} cannot exceed {max_length} characters")
    return problems


def check_optional_text(
    value: Optional[str],
    label: str,
    max_length: int,
) -> list[str]:
    """Check an optional text field. Blank values are accepted."""
    if value is not None and len(value) > max_length:
        return [f"{label} cannot exceed {max_length} characters"]
    return []


def check_email(email: Optional[str]) -> list[str]:
    """Check email presence, length and format."""
    if is_blank(email):
        return ["Email cannot be blank"]

    problems = []
    if len(email) > EMAIL_MAX_LENGTH:
        problems.append(f"Email cannot exceed {EMAIL_MAX_LENGTH} characters")
    if not EMAIL_PATTERN.match(email.strip()):
        problems.append("Email should be valid")
    return problems


def check_password(password: Optional[str]) -> list[str]:
    """
    Check password strength.

    Requirements:
    - Not blank
    - Between 8 and 100 characters
    """
    return check_required_text(
        password,
        "Password",
        max_length=PASSWORD_MAX_LENGTH,
        min_length=PASSWORD_MIN_LENGTH,
    )


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lower-cased."""
    return email.strip().lower()


def parse_sort(sort: Optional[str]) -> tuple[str, str]:
    """
    Parse a ``field[,direction]`` sort expression.

    Args:
        sort: e.g. ``"createdAt,desc"`` or ``"title"``

    Returns:
        Tuple of (field, direction); defaults to ("createdAt", "desc")

    Raises:
        ValidationError: If the field or direction is not supported
    """
    if is_blank(sort):
        return "createdAt", "desc"

    parts = [part.strip() for part in sort.split(",")]
    field = parts[0]
    direction = parts[1].lower() if len(parts) > 1 and parts[1] else "asc"

    if field not in SORTABLE_FIELDS or direction not in SORT_DIRECTIONS or len(parts) > 2:
        raise ValidationError(
            message="Invalid sort expression",
            field="sort",
            errors={
                "sort": (
                    f"Sort must be one of {', '.join(SORTABLE_FIELDS)}"
                    f" optionally followed by ,asc or ,desc"
                ),
            },
        )

    return field, direction
