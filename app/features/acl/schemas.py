"""
Pydantic schemas for ACL management.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.features.acl.permissions import Permission, ResourceType


class ACLCreate(BaseModel):
    """Grant a permission level on a resource to a user, or to ``_all``."""
    user_email: str = Field(..., min_length=1, max_length=320, description="User email, or '_all' for every tenant user")
    permission: Permission

    @field_validator("user_email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_email must not be blank")
        return v


class ACLUpdate(BaseModel):
    """Only the permission level of an entry can change."""
    permission: Permission


class ACLSharePublic(BaseModel):
    permission: Permission


class ACLResponse(BaseModel):
    id: int
    tenant_id: str
    resource_type: ResourceType
    resource_id: int
    user_email: str
    permission: Permission
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResolutionResponse(BaseModel):
    """The caller's effective access to one resource."""
    allowed: bool
    granted_level: Optional[Permission] = None
    reason: str

    model_config = ConfigDict(from_attributes=True)
