"""
Pydantic schemas for views.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ViewCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_published: bool = False
    visible_columns: List[str] = []
    metadata: Optional[Dict[str, Any]] = None


class ViewUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_published: Optional[bool] = None
    visible_columns: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("name", "is_published", "visible_columns")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ViewResponse(BaseModel):
    id: int
    panel_id: int
    tenant_id: str
    owner_user_id: str
    name: str
    is_published: bool
    visible_columns: List[str] = []
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
