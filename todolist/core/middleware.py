"""
Authentication Middleware
=========================

Raw ASGI middleware that turns the ``Authorization: Bearer <jwt>`` header
into a :class:`~todolist.core.security.Principal` stored on the request
state (``scope["state"]["principal"]``).

The middleware never rejects a request. Routes that need an identity depend
on ``get_principal`` / ``CurrentUser`` which answer 401 for the anonymous
principal.
"""

from todolist.core.security import ANONYMOUS, principal_from_token

PRINCIPAL_STATE_KEY = "principal"


def _bearer_token(headers: list[tuple[bytes, bytes]]) -> str | None:
    """Extract the bearer token from raw ASGI headers."""
    for name, value in headers:
        if name.lower() != b"authorization":
            continue
        scheme, _, credentials = value.decode("latin-1").partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return None
    return None


class AuthenticationMiddleware:
    """Attach the request principal before routing."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        token = _bearer_token(scope.get("headers") or [])
        principal = principal_from_token(token) if token else ANONYMOUS

        scope.setdefault("state", {})[PRINCIPAL_STATE_KEY] = principal
        await self.app(scope, receive, send)
