"""
Common Dependencies
===================

Shared dependencies used across the application.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from todolist.core.errors import AuthenticationError
from todolist.core.middleware import PRINCIPAL_STATE_KEY
from todolist.core.security import Principal
from todolist.db.session import get_db
from todolist.models.user import User
from todolist.services.auth_service import AuthenticatedUserResolver

logger = logging.getLogger(__name__)

# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_principal(request: Request) -> Optional[Principal]:
    """
    Principal attached by ``AuthenticationMiddleware``.

    Raises 401 for the anonymous principal. Returns None only when the
    middleware is not installed, which the resolver reports as a fault.
    """
    principal = getattr(request.state, PRINCIPAL_STATE_KEY, None)

    if principal is not None and principal.is_anonymous:
        raise AuthenticationError()

    return principal


async def get_current_user(
    principal: Annotated[Optional[Principal], Depends(get_principal)],
    db: DBSession,
) -> User:
    """
    Get current authenticated user.

    Raises 401 if the request carries no valid token.
    """
    resolver = AuthenticatedUserResolver(db)
    return await resolver.resolve(principal)


# Type alias for authenticated user dependency
CurrentUser = Annotated[User, Depends(get_current_user)]
