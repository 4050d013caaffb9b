"""
Request context routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from app.features.users.dependencies import get_current_user
from app.features.users.schemas import UserContext


router = APIRouter()


@router.get("/me", response_model=UserContext)
async def get_me(user: Annotated[UserContext, Depends(get_current_user)]):
    """Return the context the service resolved from the bearer token."""
    return user
