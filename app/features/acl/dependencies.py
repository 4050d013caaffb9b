"""
Authorization guard and FastAPI dependencies for ACL-protected routes.

The guard is the boundary between route handlers and the resolver. It answers
``UnauthorizedError`` when the request carries no tenant and ``ForbiddenError``
for every other refusal: insufficient level, unknown resource, or a store
failure (a database error, or an OS-level I/O error such as a timeout).
Callers never learn which of these it was; the reason is logged here.
"""
from typing import Annotated, Optional
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.features.acl.cache import ACLCache
from app.features.acl.permissions import Permission, ResourceType
from app.features.acl.resolver import PermissionResolver, Resolution
from app.features.acl.store import (
    ACLStore,
    ResourceDirectory,
    SQLAlchemyACLStore,
    SQLAlchemyResourceDirectory,
)
from app.features.users.dependencies import get_current_user
from app.features.users.schemas import UserContext
from app.utils import get_logger


log = get_logger(__name__)


class AccessGuard:
    """Wraps the resolver at API entry points."""

    def __init__(self, resolver: PermissionResolver):
        self.resolver = resolver

    async def require_permission(
        self,
        context: Optional[UserContext],
        resource_type: ResourceType,
        resource_id: int,
        required: Permission,
    ) -> Resolution:
        """
        Return the resolution if the caller holds ``required`` on the resource.

        Raises:
            UnauthorizedError: No tenant on the request context
            ForbiddenError: Any other reason access is not granted
        """
        if context is None or not context.tenant_id:
            raise UnauthorizedError()

        subject = (
            f"user={context.user_email} tenant={context.tenant_id} "
            f"resource={resource_type.value}:{resource_id} required={required.value}"
        )

        try:
            resolution = await self.resolver.resolve(
                context.tenant_id,
                context.user_email,
                resource_type,
                resource_id,
                required,
            )
        except NotFoundError:
            log.info("Access denied (unknown resource): %s", subject)
            raise ForbiddenError()
        except (SQLAlchemyError, OSError):
            log.exception("Access denied (store failure): %s", subject)
            raise ForbiddenError()

        if not resolution.allowed:
            log.info("Access denied (%s): %s", resolution.reason, subject)
            raise ForbiddenError()

        log.debug("Access granted (%s): %s", resolution.reason, subject)
        return resolution


# ============================================================================
# FastAPI Dependencies
# ============================================================================

async def get_acl_cache() -> ACLCache:
    """A fresh cache per request; never shared between requests."""
    return ACLCache()


async def get_acl_store(
    db: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[ACLCache, Depends(get_acl_cache)],
) -> ACLStore:
    return SQLAlchemyACLStore(db, cache=cache)


async def get_resource_directory(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ResourceDirectory:
    return SQLAlchemyResourceDirectory(db)


async def get_resolver(
    store: Annotated[ACLStore, Depends(get_acl_store)],
    resources: Annotated[ResourceDirectory, Depends(get_resource_directory)],
) -> PermissionResolver:
    return PermissionResolver(store, resources)


async def get_guard(
    resolver: Annotated[PermissionResolver, Depends(get_resolver)],
) -> AccessGuard:
    return AccessGuard(resolver)


def require_permission(resource_type: ResourceType, required: Permission, param: str):
    """
    FastAPI dependency requiring a permission level on the resource named by a
    path parameter.

    Usage:
        @router.put("/{panel_id}")
        async def update_panel(
            panel_id: int,
            user: UserContext = Depends(
                require_permission(ResourceType.PANEL, Permission.EDITOR, "panel_id")
            ),
        ):
            # Caller holds at least editor on the panel
            pass

    Returns:
        Dependency function returning the caller's context when access is granted
    """
    async def permission_dependency(
        request: Request,
        user: Annotated[UserContext, Depends(get_current_user)],
        guard: Annotated[AccessGuard, Depends(get_guard)],
    ) -> UserContext:
        if not user.tenant_id:
            raise UnauthorizedError()
        try:
            resource_id = int(request.path_params[param])
        except (KeyError, ValueError):
            raise NotFoundError()

        await guard.require_permission(user, resource_type, resource_id, required)
        return user

    return permission_dependency
