"""
Permission resolution for panels and views.

The effective level of a user on a resource is the strongest of:

- the direct grant: the user's own entry on the resource, or the tenant's
  public (``_all``) entry on it, whichever ranks higher;
- for a view, the inherited grant: the direct grant computed the same way
  on the view's parent panel.

Grants only add access. A view entry can extend a panel grant to more users
but never lowers it. Lookups are tenant-scoped in the store; an unknown
resource raises ``NotFoundError`` and a store failure propagates.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from app.core.exceptions import NotFoundError
from app.features.acl.permissions import (
    ALL_USERS,
    Grantee,
    Permission,
    ResourceType,
    parse_grantee,
    strongest,
    sufficiency,
)
from app.features.acl.store import ACLStore, ResourceDirectory
from app.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one authorization decision."""
    allowed: bool
    granted_level: Optional[Permission]
    reason: str


class PermissionResolver:
    """
    Decides whether a user holds a permission level on a panel or view.

    Holds no state of its own beyond its collaborators, so one instance may
    serve concurrent requests as long as each has its own store.
    """

    def __init__(self, store: ACLStore, resources: ResourceDirectory):
        self.store = store
        self.resources = resources

    async def _direct_grant(
        self,
        tenant_id: str,
        grantee: Grantee,
        resource_type: ResourceType,
        resource_id: int,
    ) -> Tuple[Optional[Permission], Optional[str]]:
        """Strongest of the personal and public entries, with its source."""
        personal = await self.store.find_one(tenant_id, resource_type, resource_id, grantee)
        public = None
        if grantee != ALL_USERS:
            public = await self.store.find_one(tenant_id, resource_type, resource_id, ALL_USERS)

        personal_level = personal.permission if personal is not None else None
        public_level = public.permission if public is not None else None
        level = strongest([personal_level, public_level])

        if level is None:
            return None, None
        if level == personal_level:
            return level, "direct"
        return level, "public"

    async def resolve(
        self,
        tenant_id: str,
        user_email: str,
        resource_type: ResourceType,
        resource_id: int,
        required: Permission,
    ) -> Resolution:
        grantee = parse_grantee(user_email)

        parent_panel_id: Optional[int] = None
        if resource_type == ResourceType.VIEW:
            parent_panel_id = await self.resources.get_view_panel_id(tenant_id, resource_id)
        elif not await self.resources.panel_exists(tenant_id, resource_id):
            raise NotFoundError("Panel not found")

        level, source = await self._direct_grant(tenant_id, grantee, resource_type, resource_id)
        reason = f"{source} grant on {resource_type.value} {resource_id}" if source else None

        if parent_panel_id is not None:
            inherited, inherited_source = await self._direct_grant(
                tenant_id, grantee, ResourceType.PANEL, parent_panel_id
            )
            if inherited is not None and (level is None or inherited.rank > level.rank):
                level = inherited
                reason = f"{inherited_source} grant inherited from panel {parent_panel_id}"

        allowed = sufficiency(level, required)
        if reason is None:
            reason = "no grant"

        log.debug(
            "Resolved %s on %s:%s in %s -> %s (%s), required %s",
            user_email, resource_type.value, resource_id, tenant_id,
            level.value if level else None, reason, required.value,
        )
        return Resolution(allowed=allowed, granted_level=level, reason=reason)

    async def has_permission(
        self,
        tenant_id: str,
        user_email: str,
        resource_type: ResourceType,
        resource_id: int,
        required: Permission,
    ) -> bool:
        resolution = await self.resolve(tenant_id, user_email, resource_type, resource_id, required)
        return resolution.allowed
