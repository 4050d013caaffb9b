"""
Bearer token decoding into a request context.

Tokens are issued and verified by the identity provider; this module only
reads their claims. When ``JWT_SECRET`` is configured the signature is
checked as well.
"""
from typing import Any

import jwt

from app.core import config
from app.core.exceptions import UnauthorizedError
from app.features.acl.permissions import ALL_USERS_EMAIL
from app.features.users.schemas import UserContext, UserRole


# Provider role names mapped to application roles, highest first
ROLE_NAMES: list[tuple[UserRole, set[str]]] = [
    (UserRole.ADMIN, {"admin", "Panels Admin", "Org Admin"}),
    (UserRole.BUILDER, {"builder", "Panels Builder"}),
]


def decode_token(token: str) -> dict:
    """
    Decode a bearer token and return its payload.

    Raises:
        UnauthorizedError: If the token is malformed, badly signed or expired
    """
    try:
        if config.JWT_SECRET:
            return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")


def resolve_role(value: Any) -> UserRole:
    """Map a role claim (a string or a list of provider role names) to a role."""
    names = set(value) if isinstance(value, (list, tuple, set)) else {value}
    for role, aliases in ROLE_NAMES:
        if names & aliases:
            return role
    return UserRole.USER


def context_from_claims(payload: dict) -> UserContext:
    """Build the request context from decoded claims."""
    user_id = payload.get("sub") or payload.get("userId")
    user_email = payload.get(config.EMAIL_CLAIM) or payload.get("email")

    if not user_id or not user_email:
        raise UnauthorizedError("Invalid token payload")
    if str(user_email) == ALL_USERS_EMAIL:
        raise UnauthorizedError("Invalid token payload")

    return UserContext(
        user_id=str(user_id),
        user_email=str(user_email),
        role=resolve_role(payload.get(config.ROLE_CLAIM)),
        tenant_id=payload.get(config.TENANT_CLAIM) or None,
    )
