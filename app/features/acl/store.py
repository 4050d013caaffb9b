"""
ACL persistence.

``ACLStore`` is the storage contract the resolver and routes depend on;
``SQLAlchemyACLStore`` implements it on an async session. Every lookup is
scoped by tenant in the query itself.

``ResourceDirectory`` answers the two resource questions authorization needs:
does a panel exist in a tenant, and which panel does a view belong to.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.features.acl.cache import ACLCache, MISSING
from app.features.acl.models import AccessControlList
from app.features.acl.permissions import ALL_USERS, Grantee, Permission, ResourceType
from app.features.panels.models import Panel
from app.features.views.models import View
from app.utils import get_logger


log = get_logger(__name__)


class ACLStore(ABC):
    """Storage contract for ACL entries."""

    @abstractmethod
    async def create(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        grantee: Grantee,
        permission: Permission,
    ) -> AccessControlList:
        """Insert a grant; ``ConflictError`` if the tuple already exists."""

    @abstractmethod
    async def find_one(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        grantee: Grantee,
    ) -> Optional[AccessControlList]:
        ...

    @abstractmethod
    async def get(self, tenant_id: str, acl_id: int) -> AccessControlList:
        """Entry by id within a tenant; ``NotFoundError`` if absent."""

    @abstractmethod
    async def list_by_user(
        self,
        tenant_id: str,
        user_email: str,
        resource_type: Optional[ResourceType] = None,
    ) -> List[AccessControlList]:
        """Personal grants of ``user_email`` followed by the tenant's public grants."""

    @abstractmethod
    async def list_by_resource(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
    ) -> List[AccessControlList]:
        ...

    @abstractmethod
    async def update(
        self,
        acl_id: int,
        permission: Permission,
        tenant_id: Optional[str] = None,
    ) -> AccessControlList:
        """Change the level of an entry; ``NotFoundError`` if absent."""

    @abstractmethod
    async def delete(self, acl_id: int, tenant_id: Optional[str] = None) -> None:
        """Remove an entry; ``NotFoundError`` if absent."""

    @abstractmethod
    async def delete_all_for_resource(
        self,
        resource_type: ResourceType,
        resource_id: int,
        tenant_id: Optional[str] = None,
    ) -> int:
        """Cascade removal on resource deletion. Zero matches is not an error."""

    @abstractmethod
    async def share_public(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        permission: Permission,
    ) -> Tuple[AccessControlList, bool]:
        """Create or update the public grant. Returns ``(entry, created)``."""


class ResourceDirectory(ABC):
    """Tenant-scoped existence and parent lookups for panels and views."""

    @abstractmethod
    async def panel_exists(self, tenant_id: str, panel_id: int) -> bool:
        ...

    @abstractmethod
    async def get_view_panel_id(self, tenant_id: str, view_id: int) -> int:
        """Parent panel id of a view; ``NotFoundError`` if the view is unknown."""


# ============================================================================
# SQLAlchemy implementations
# ============================================================================

class SQLAlchemyACLStore(ACLStore):
    """ACL store backed by the ``access_control_lists`` table."""

    def __init__(self, db: AsyncSession, cache: Optional[ACLCache] = None):
        self.db = db
        self.cache = cache

    def _invalidate(self, tenant_id: str, resource_type: ResourceType, resource_id: int) -> None:
        if self.cache is not None:
            self.cache.invalidate_resource(tenant_id, resource_type, resource_id)

    async def create(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        grantee: Grantee,
        permission: Permission,
    ) -> AccessControlList:
        try:
            existing = await self.find_one(tenant_id, resource_type, resource_id, grantee)
            if existing is not None:
                raise ConflictError("ACL entry already exists")

            entry = AccessControlList(
                tenant_id=tenant_id,
                resource_type=resource_type,
                resource_id=resource_id,
                user_email=grantee.email,
                permission=permission,
            )
            self.db.add(entry)
            try:
                await self.db.commit()
            except IntegrityError:
                # A concurrent request inserted the same tuple first
                await self.db.rollback()
                raise ConflictError("ACL entry already exists")
            await self.db.refresh(entry)
        finally:
            self._invalidate(tenant_id, resource_type, resource_id)

        log.info(
            "Created ACL %s: %s %s:%s -> %s",
            entry.id, tenant_id, resource_type.value, resource_id, permission.value,
        )
        return entry

    async def find_one(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        grantee: Grantee,
    ) -> Optional[AccessControlList]:
        key = (tenant_id, resource_type, resource_id, grantee.email)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not MISSING:
                return cached

        result = await self.db.execute(
            select(AccessControlList).where(
                AccessControlList.tenant_id == tenant_id,
                AccessControlList.resource_type == resource_type,
                AccessControlList.resource_id == resource_id,
                AccessControlList.user_email == grantee.email,
            )
        )
        entry = result.scalar_one_or_none()

        if self.cache is not None:
            self.cache.put(key, entry)
        return entry

    async def get(self, tenant_id: str, acl_id: int) -> AccessControlList:
        result = await self.db.execute(
            select(AccessControlList).where(
                AccessControlList.id == acl_id,
                AccessControlList.tenant_id == tenant_id,
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("ACL entry not found")
        return entry

    async def _list_for_email(
        self,
        tenant_id: str,
        user_email: str,
        resource_type: Optional[ResourceType],
    ) -> List[AccessControlList]:
        stmt = select(AccessControlList).where(
            AccessControlList.tenant_id == tenant_id,
            AccessControlList.user_email == user_email,
        )
        if resource_type is not None:
            stmt = stmt.where(AccessControlList.resource_type == resource_type)
        result = await self.db.execute(stmt.order_by(AccessControlList.id))
        return list(result.scalars().all())

    async def list_by_user(
        self,
        tenant_id: str,
        user_email: str,
        resource_type: Optional[ResourceType] = None,
    ) -> List[AccessControlList]:
        entries = await self._list_for_email(tenant_id, user_email, resource_type)
        if user_email != ALL_USERS.email:
            entries += await self._list_for_email(tenant_id, ALL_USERS.email, resource_type)
        return entries

    async def list_by_resource(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
    ) -> List[AccessControlList]:
        result = await self.db.execute(
            select(AccessControlList)
            .where(
                AccessControlList.tenant_id == tenant_id,
                AccessControlList.resource_type == resource_type,
                AccessControlList.resource_id == resource_id,
            )
            .order_by(AccessControlList.id)
        )
        return list(result.scalars().all())

    async def _get_by_id(self, acl_id: int, tenant_id: Optional[str]) -> AccessControlList:
        stmt = select(AccessControlList).where(AccessControlList.id == acl_id)
        if tenant_id is not None:
            stmt = stmt.where(AccessControlList.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("ACL entry not found")
        return entry

    async def update(
        self,
        acl_id: int,
        permission: Permission,
        tenant_id: Optional[str] = None,
    ) -> AccessControlList:
        entry = await self._get_by_id(acl_id, tenant_id)
        key = (entry.tenant_id, entry.resource_type, entry.resource_id)
        try:
            entry.permission = permission
            await self.db.commit()
            await self.db.refresh(entry)
        finally:
            self._invalidate(*key)

        log.info("Updated ACL %s -> %s", acl_id, permission.value)
        return entry

    async def delete(self, acl_id: int, tenant_id: Optional[str] = None) -> None:
        entry = await self._get_by_id(acl_id, tenant_id)
        key = (entry.tenant_id, entry.resource_type, entry.resource_id)
        try:
            await self.db.delete(entry)
            await self.db.commit()
        finally:
            self._invalidate(*key)

        log.info("Deleted ACL %s", acl_id)

    async def delete_all_for_resource(
        self,
        resource_type: ResourceType,
        resource_id: int,
        tenant_id: Optional[str] = None,
    ) -> int:
        stmt = delete(AccessControlList).where(
            AccessControlList.resource_type == resource_type,
            AccessControlList.resource_id == resource_id,
        )
        if tenant_id is not None:
            stmt = stmt.where(AccessControlList.tenant_id == tenant_id)

        result = await self.db.execute(stmt)
        if self.cache is not None:
            if tenant_id is None:
                self.cache.clear()
            else:
                self._invalidate(tenant_id, resource_type, resource_id)

        log.debug("Removed %d ACL entries for %s:%s", result.rowcount, resource_type.value, resource_id)
        return result.rowcount

    async def share_public(
        self,
        tenant_id: str,
        resource_type: ResourceType,
        resource_id: int,
        permission: Permission,
    ) -> Tuple[AccessControlList, bool]:
        existing = await self.find_one(tenant_id, resource_type, resource_id, ALL_USERS)
        if existing is None:
            return await self.create(tenant_id, resource_type, resource_id, ALL_USERS, permission), True
        return await self.update(existing.id, permission, tenant_id=tenant_id), False


class SQLAlchemyResourceDirectory(ResourceDirectory):
    """Resolves panels and views from their tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def panel_exists(self, tenant_id: str, panel_id: int) -> bool:
        result = await self.db.execute(
            select(Panel.id).where(Panel.id == panel_id, Panel.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none() is not None

    async def get_view_panel_id(self, tenant_id: str, view_id: int) -> int:
        result = await self.db.execute(
            select(View.panel_id).where(View.id == view_id, View.tenant_id == tenant_id)
        )
        panel_id = result.scalar_one_or_none()
        if panel_id is None:
            raise NotFoundError("View not found")
        return panel_id
