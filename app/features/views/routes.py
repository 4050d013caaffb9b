"""
View routes.

Views are created beneath a panel by its editors. Access to a view is the
stronger of the caller's grant on the view and on its parent panel.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.exceptions import NotFoundError
from app.features.acl.dependencies import get_acl_store, require_permission
from app.features.acl.permissions import Permission, ResourceType, SpecificUser
from app.features.acl.store import ACLStore
from app.features.users.schemas import UserContext
from app.features.views.models import View
from app.features.views.schemas import ViewCreate, ViewResponse, ViewUpdate
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def get_tenant_view(db: AsyncSession, tenant_id: str, view_id: int) -> View:
    result = await db.execute(
        select(View).where(View.id == view_id, View.tenant_id == tenant_id)
    )
    view = result.scalar_one_or_none()
    if view is None:
        raise NotFoundError("View not found")
    return view


@router.post("/panels/{panel_id}/views", response_model=ViewResponse, status_code=status.HTTP_201_CREATED)
async def create_view(
    panel_id: int,
    view_data: ViewCreate,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.PANEL, Permission.EDITOR, "panel_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Create a view under a panel. The caller becomes owner of the view."""
    view = View(
        tenant_id=user.tenant_id,
        owner_user_id=user.user_id,
        panel_id=panel_id,
        name=view_data.name,
        is_published=view_data.is_published,
        visible_columns=view_data.visible_columns,
        metadata_=view_data.metadata,
    )
    db.add(view)
    await db.flush()

    await store.create(
        user.tenant_id, ResourceType.VIEW, view.id, SpecificUser(user.user_email), Permission.OWNER
    )
    await db.refresh(view)

    log.info("View %s created under panel %s by %s", view.id, panel_id, user.user_email)
    return view


@router.get("/panels/{panel_id}/views", response_model=List[ViewResponse])
async def list_panel_views(
    panel_id: int,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.PANEL, Permission.VIEWER, "panel_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await db.execute(
        select(View)
        .where(View.panel_id == panel_id, View.tenant_id == user.tenant_id)
        .order_by(View.id)
    )
    return result.scalars().all()


@router.get("/views/{view_id}", response_model=ViewResponse)
async def get_view(
    view_id: int,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.VIEW, Permission.VIEWER, "view_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await get_tenant_view(db, user.tenant_id, view_id)


@router.put("/views/{view_id}", response_model=ViewResponse)
async def update_view(
    view_id: int,
    view_update: ViewUpdate,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.VIEW, Permission.EDITOR, "view_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    view = await get_tenant_view(db, user.tenant_id, view_id)

    update_data = view_update.model_dump(exclude_unset=True)
    if "metadata" in update_data:
        update_data["metadata_"] = update_data.pop("metadata")
    for key, value in update_data.items():
        setattr(view, key, value)

    await db.commit()
    await db.refresh(view)
    return view


@router.delete("/views/{view_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_view(
    view_id: int,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.VIEW, Permission.OWNER, "view_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Delete a view and its grants."""
    view = await get_tenant_view(db, user.tenant_id, view_id)

    await store.delete_all_for_resource(ResourceType.VIEW, view.id, tenant_id=user.tenant_id)
    await db.delete(view)
    await db.commit()
    return None
