"""
ACL management API routes.

Sharing, unsharing and changing a grant require ``owner`` on the resource.
Listing the grants of a resource requires ``viewer``. Every route is scoped
to the caller's tenant.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Response, status

from app.core.exceptions import NotFoundError
from app.features.acl.dependencies import AccessGuard, get_acl_store, get_guard, get_resolver
from app.features.acl.permissions import Permission, ResourceType, parse_grantee
from app.features.acl.resolver import PermissionResolver, Resolution
from app.features.acl.schemas import (
    ACLCreate,
    ACLResponse,
    ACLSharePublic,
    ACLUpdate,
    ResolutionResponse,
)
from app.features.acl.store import ACLStore
from app.features.users.dependencies import get_tenant_user
from app.features.users.schemas import UserContext
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/user/{user_email}", response_model=List[ACLResponse])
async def list_acls_by_user(
    user_email: str,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
    resource_type: Optional[ResourceType] = None,
):
    """List a user's grants together with the tenant's public grants."""
    return await store.list_by_user(user.tenant_id, user_email, resource_type)


@router.get("/{resource_type}/{resource_id}", response_model=List[ACLResponse])
async def list_acls(
    resource_type: ResourceType,
    resource_id: int,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    guard: Annotated[AccessGuard, Depends(get_guard)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """List the grants on a resource."""
    await guard.require_permission(user, resource_type, resource_id, Permission.VIEWER)
    return await store.list_by_resource(user.tenant_id, resource_type, resource_id)


@router.post(
    "/{resource_type}/{resource_id}",
    response_model=ACLResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_acl(
    resource_type: ResourceType,
    resource_id: int,
    acl: ACLCreate,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    guard: Annotated[AccessGuard, Depends(get_guard)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Share a resource with a user. 409 if that user already has an entry."""
    await guard.require_permission(user, resource_type, resource_id, Permission.OWNER)
    return await store.create(
        user.tenant_id,
        resource_type,
        resource_id,
        parse_grantee(acl.user_email),
        acl.permission,
    )


@router.post("/{resource_type}/{resource_id}/share-public", response_model=ACLResponse)
async def share_public(
    resource_type: ResourceType,
    resource_id: int,
    body: ACLSharePublic,
    response: Response,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    guard: Annotated[AccessGuard, Depends(get_guard)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Grant every user of the tenant a level on the resource (201 new, 200 updated)."""
    await guard.require_permission(user, resource_type, resource_id, Permission.OWNER)
    entry, created = await store.share_public(
        user.tenant_id, resource_type, resource_id, body.permission
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return entry


@router.get("/{resource_type}/{resource_id}/effective", response_model=ResolutionResponse)
async def effective_access(
    resource_type: ResourceType,
    resource_id: int,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    resolver: Annotated[PermissionResolver, Depends(get_resolver)],
):
    """The caller's effective level on a resource, including panel inheritance."""
    try:
        return await resolver.resolve(
            user.tenant_id, user.user_email, resource_type, resource_id, Permission.VIEWER
        )
    except NotFoundError:
        return Resolution(allowed=False, granted_level=None, reason="no grant")


@router.put("/{acl_id}", response_model=ACLResponse)
async def update_acl(
    acl_id: int,
    acl_update: ACLUpdate,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    guard: Annotated[AccessGuard, Depends(get_guard)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Change the permission level of an entry."""
    entry = await store.get(user.tenant_id, acl_id)
    await guard.require_permission(user, entry.resource_type, entry.resource_id, Permission.OWNER)
    return await store.update(acl_id, acl_update.permission, tenant_id=user.tenant_id)


@router.delete("/{acl_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_acl(
    acl_id: int,
    user: Annotated[UserContext, Depends(get_tenant_user)],
    guard: Annotated[AccessGuard, Depends(get_guard)],
    store: Annotated[ACLStore, Depends(get_acl_store)],
):
    """Unshare: remove an entry."""
    entry = await store.get(user.tenant_id, acl_id)
    await guard.require_permission(user, entry.resource_type, entry.resource_id, Permission.OWNER)
    await store.delete(acl_id, tenant_id=user.tenant_id)
    return None
