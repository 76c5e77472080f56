"""
Caller identity.

The API trusts an upstream component (API Gateway authorizer, reverse proxy)
to authenticate callers and forward who they are in ``X-User-Id`` /
``X-User-Email``. Resolvers turn a request into a ``UserContext``; which one is
used is decided once in ``create_app`` and stored on ``app.state``.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from file_manager.errors import UnauthorizedError

USER_ID_HEADER = "x-user-id"
USER_EMAIL_HEADER = "x-user-email"
DEFAULT_USER_ID = "demo-user"


@dataclass(frozen=True)
class UserContext:
    user_id: str
    email: Optional[str] = None


IdentityResolver = Callable[[Request], UserContext]


def trusted_header_identity(request: Request) -> UserContext:
    """Read the forwarded identity; anonymous callers act as the demo user."""
    user_id = request.headers.get(USER_ID_HEADER) or DEFAULT_USER_ID
    return UserContext(user_id=user_id, email=request.headers.get(USER_EMAIL_HEADER))


def strict_header_identity(request: Request) -> UserContext:
    """Like ``trusted_header_identity`` but rejects requests without an identity."""
    user_id = request.headers.get(USER_ID_HEADER)
    if not user_id:
        raise UnauthorizedError("Authentication required")
    return UserContext(user_id=user_id, email=request.headers.get(USER_EMAIL_HEADER))


def get_user_context(request: Request) -> UserContext:
    """FastAPI dependency resolving the caller through the app's configured resolver."""
    resolver: IdentityResolver = getattr(request.app.state, "identity_resolver", trusted_header_identity)
    return resolver(request)
