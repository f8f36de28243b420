"""
Authentication API Endpoints
============================

Handles user registration and login.
"""

import logging

from fastapi import APIRouter, status

from todolist.dependencies import DBSession
from todolist.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from todolist.schemas.common import ErrorResponse
from todolist.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(token: dict) -> TokenResponse:
    return TokenResponse(
        token=token["token"],
        tokenType=token["token_type"],
        expiresIn=token["expires_in"],
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register(
    user_data: RegisterRequest,
    db: DBSession,
):
    """
    Register a new user account.

    Returns an access token so the client is signed in right away.
    """
    auth_service = AuthService(db)
    user = await auth_service.register(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )
    return _token_response(auth_service.issue_token(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(
    credentials: LoginRequest,
    db: DBSession,
):
    """Login with email and password."""
    auth_service = AuthService(db)
    user = await auth_service.authenticate(credentials.email, credentials.password)

    logger.info("User %s logged in", user.user_id)
    return _token_response(auth_service.issue_token(user))
