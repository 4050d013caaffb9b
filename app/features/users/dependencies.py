"""
FastAPI dependencies for the request context.
"""
from typing import Annotated
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.exceptions import UnauthorizedError
from app.features.users.auth import context_from_claims, decode_token
from app.features.users.schemas import UserContext


security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UserContext:
    """
    Context of the caller, read from the bearer token.

    Usage:
        @router.get("/me")
        async def get_me(user: UserContext = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise UnauthorizedError("No authorization token provided")

    payload = decode_token(credentials.credentials)
    return context_from_claims(payload)


async def get_tenant_user(
    user: Annotated[UserContext, Depends(get_current_user)],
) -> UserContext:
    """Require a tenant on the context."""
    if not user.tenant_id:
        raise UnauthorizedError()
    return user


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
