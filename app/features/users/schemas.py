"""
Pydantic schemas for the authenticated request context.
"""
import enum
from pydantic import BaseModel, Field


class UserRole(str, enum.Enum):
    """Application role carried by the token. Roles do not grant ACL access."""
    ADMIN = "admin"
    BUILDER = "builder"
    USER = "user"


class UserContext(BaseModel):
    """
    Identity of the caller, already verified upstream.

    ``tenant_id`` is ``None`` when the token carries no tenant; authorization
    checks reject such a context.
    """
    user_id: str = Field(..., min_length=1)
    user_email: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER
    tenant_id: str | None = None

    model_config = {"frozen": True}
