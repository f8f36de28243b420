"""
Authentication Service
======================

Business logic for user registration, login and resolving the user behind
an authenticated request.
"""

import logging
from datetime import datetime
from typing import Any, Optional
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from todolist.core.errors import (
    EmailAlreadyExistsError,
    InternalFaultError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from todolist.core.security import (
    Principal,
    create_token_for_user,
    hash_password,
    verify_password,
)
from todolist.models.user import User
from todolist.repositories.users import UserRepository
from todolist.services.cache import CacheKeys, CacheManager
from todolist.utils.validators import normalize_email

logger = logging.getLogger(__name__)


class AuthService:
    """Service for registration and login."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def register(self, name: str, email: str, password: str) -> User:
        """
        Create a new user account.

        Args:
            name: Display name
            email: Login email (stored lower-cased)
            password: Plain text password

        Returns:
            Created user object

        Raises:
            EmailAlreadyExistsError: If the email is already registered
        """
        email = normalize_email(email)

        if await self.users.exists_by_email(email):
            raise EmailAlreadyExistsError(email)

        user = User(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
        )
        try:
            await self.users.add(user)
        except IntegrityError as exc:
            # Concurrent registration won the unique index
            await self.db.rollback()
            raise EmailAlreadyExistsError(email) from exc

        logger.info("Registered user %s", user.user_id)
        return user

    async def find_by_email(self, email: str) -> User:
        """
        Get user by email address.

        Raises:
            UserNotFoundError: If no user has this email
        """
        email = normalize_email(email)
        user = await self.users.get_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate user by email and password.

        Unknown emails and wrong passwords are indistinguishable to the caller.

        Raises:
            InvalidCredentialsError: If authentication fails
        """
        user = await self.users.get_by_email(normalize_email(email))

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return user

    @staticmethod
    def issue_token(user: User) -> dict[str, Any]:
        """Create the access token response for *user*."""
        return create_token_for_user(user.user_id, user.email)


# =============================================================================
# Authenticated-User Resolver
# =============================================================================

# Redis cache TTL for authenticated user lookup (seconds)
_USER_AUTH_CACHE_TTL = 300  # 5 minutes


def _serialize_user_for_cache(user: User) -> dict:
    """Serialize a User to a JSON-safe dict (password hash excluded)."""
    return {
        "user_id": str(user.user_id),
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime string, returning None on missing input."""
    if not value:
        return None
    return datetime.fromisoformat(value)


def _build_user_from_cache(data: dict) -> User:
    """
    Reconstruct a *transient* (session-free) User from a cached dict.

    Consumers of the current user only read its attributes, so the object
    never needs to be attached to a session.
    """
    return User(
        user_id=uuid.UUID(data["user_id"]),
        name=data["name"],
        email=data["email"],
        created_at=_parse_dt(data.get("created_at")),
        updated_at=_parse_dt(data.get("updated_at")),
    )


class AuthenticatedUserResolver:
    """Maps the request principal to its stored User."""

    def __init__(self, db: AsyncSession):
        self.users = UserRepository(db)

    async def resolve(self, principal: Optional[Principal]) -> User:
        """
        Return the user behind an authenticated principal.

        Raises:
            InternalFaultError: If there is no principal, it is anonymous, or
                no user matches its email. Routes reject anonymous callers
                before getting here, so each case is an internal fault.
        """
        if principal is None:
            raise InternalFaultError("No authentication present in request context")

        if principal.is_anonymous:
            raise InternalFaultError("Request principal is not authenticated")

        email = principal.name

        cached = await CacheManager.get(CacheKeys.user_auth(email))
        if cached is not None:
            try:
                return _build_user_from_cache(cached)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Discarding malformed cached user %s: %s", email, exc)

        user = await self.users.get_by_email(email)
        if user is None:
            raise InternalFaultError(
                f"Authenticated user not found in store: {email}"
            )

        await CacheManager.set(
            CacheKeys.user_auth(email),
            _serialize_user_for_cache(user),
            ttl=_USER_AUTH_CACHE_TTL,
        )
        return user
