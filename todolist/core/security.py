"""
Security Module
===============

Authentication and security utilities including:
- Password hashing with bcrypt
- JWT access token generation and validation
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext

from todolist.config import settings

# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Stored hash to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict[str, Any], expires_delta: timedelta) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode
        expires_delta: Token lifetime

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    issued_at = datetime.now(timezone.utc)

    to_encode.update({
        "exp": issued_at + expires_delta,
        "iat": issued_at,
        "type": "access",
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None


def create_token_for_user(user_id: uuid.UUID, email: str) -> dict[str, Any]:
    """
    Create an access token for a user.

    The subject is the user's email; that is the principal name the
    authentication middleware hands to the user resolver.

    Returns:
        Dictionary with token, token_type and expires_in (seconds)
    """
    lifetime = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token({"sub": email, "uid": str(user_id)}, lifetime)

    return {
        "token": token,
        "token_type": "bearer",
        "expires_in": int(lifetime.total_seconds()),
    }


# =============================================================================
# Principal
# =============================================================================

@dataclass(frozen=True)
class Principal:
    """Identity extracted from the request's bearer token."""

    name: Optional[str]
    authenticated: bool

    @property
    def is_anonymous(self) -> bool:
        return not self.authenticated or not self.name


ANONYMOUS = Principal(name=None, authenticated=False)


def principal_from_token(token: Optional[str]) -> Principal:
    """Turn a raw bearer token into a Principal (anonymous when unusable)."""
    if not token:
        return ANONYMOUS

    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return ANONYMOUS

    subject = payload.get("sub")
    if not subject:
        return ANONYMOUS

    return Principal(name=subject, authenticated=True)
