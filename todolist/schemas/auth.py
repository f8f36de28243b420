"""
Authentication Schemas
======================

Pydantic schemas for authentication endpoints.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from todolist.utils.validators import (
    NAME_MAX_LENGTH,
    check_email,
    check_password,
    check_required_text,
)


def _raise_problems(problems: list[str]) -> None:
    if problems:
        raise ValueError("; ".join(problems))


class RegisterRequest(BaseModel):
    """Request schema for user registration."""

    model_config = ConfigDict(validate_default=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_required_text(v, "Name", NAME_MAX_LENGTH))
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        _raise_problems(check_email(v))
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        """Validate password length."""
        _raise_problems(check_password(v))
        return v


class LoginRequest(BaseModel):
    """Request schema for user login."""

    model_config = ConfigDict(validate_default=True)

    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email", "password")
    @classmethod
    def not_blank(cls, v: Optional[str], info) -> Optional[str]:
        _raise_problems(check_required_text(v, info.field_name.capitalize(), max_length=255))
        return v


class TokenResponse(BaseModel):
    """
    Response schema for issued tokens.

    Uses camelCase field names to match the client contract.
    """

    token: str
    tokenType: str = "bearer"
    expiresIn: int  # seconds
