"""
Panel routes.

Creating a panel makes the caller its owner. Reads need ``viewer``, updates
``editor`` and deletion ``owner``; deleting a panel removes its views and
every grant on the panel and on those views.
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
from app.features.panels.models import Panel
from app.features.panels.schemas import PanelCreate, PanelResponse, PanelUpdate
from app.features.users.dependencies import get_tenant_user
from app.features.users.schemas import UserContext
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def get_tenant_panel(db: AsyncSession, tenant_id: str, panel_id: int) -> Panel:
    result = await db.execute(
        select(Panel).where(Panel.id == panel_id, Panel.tenant_id == tenant_id)
    )
    panel = result.scalar_one_or_none()
    if panel is None:
        raise NotFoundError("Panel not found")
    return panel


@router.post("/", response_model=PanelResponse, status_code=status.HTTP_201_CREATED)
async def create_panel(
    panel_data: PanelCreate,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Create a panel owned by the caller."""
    panel = Panel(
        tenant_id=user.tenant_id,
        user_id=user.user_id,
        name=panel_data.name,
        description=panel_data.description,
        metadata_=panel_data.metadata,
    )
    db.add(panel)
    await db.flush()

    # Commits the panel together with its owner grant
    await store.create(
        user.tenant_id, ResourceType.PANEL, panel.id, SpecificUser(user.user_email), Permission.OWNER
    )
    await db.refresh(panel)

    log.info("Panel %s created in %s by %s", panel.id, user.tenant_id, user.user_email)
    return panel


@router.get("/", response_model=List[PanelResponse])
async def list_panels(
    user: Annotated[UserContext, Depends(get_tenant_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """List panels shared with the caller directly or publicly."""
    acls = await store.list_by_user(user.tenant_id, user.user_email, ResourceType.PANEL)
    panel_ids = {acl.resource_id for acl in acls}
    if not panel_ids:
        return []

    result = await db.execute(
        select(Panel)
        .where(Panel.id.in_(panel_ids), Panel.tenant_id == user.tenant_id)
        .order_by(Panel.id)
    )
    return result.scalars().all()


@router.get("/{panel_id}", response_model=PanelResponse)
async def get_panel(
    panel_id: int,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.PANEL, Permission.VIEWER, "panel_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await get_tenant_panel(db, user.tenant_id, panel_id)


@router.put("/{panel_id}", response_model=PanelResponse)
async def update_panel(
    panel_id: int,
    panel_update: PanelUpdate,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.PANEL, Permission.EDITOR, "panel_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    panel = await get_tenant_panel(db, user.tenant_id, panel_id)

    update_data = panel_update.model_dump(exclude_unset=True)
    if "metadata" in update_data:
        update_data["metadata_"] = update_data.pop("metadata")
    for key, value in update_data.items():
        setattr(panel, key, value)

    await db.commit()
    await db.refresh(panel)
    return panel


@router.delete("/{panel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_panel(
    panel_id: int,
    user: Annotated[UserContext, Depends(require_permission(ResourceType.PANEL, Permission.OWNER, "panel_id"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Delete a panel, its views and all their grants."""
    panel = await get_tenant_panel(db, user.tenant_id, panel_id)

    for view in panel.views:
        await store.delete_all_for_resource(ResourceType.VIEW, view.id, tenant_id=user.tenant_id)
    await store.delete_all_for_resource(ResourceType.PANEL, panel.id, tenant_id=user.tenant_id)

    await db.delete(panel)
    await db.commit()

    log.info("Panel %s deleted from %s by %s", panel_id, user.tenant_id, user.user_email)
    return None
