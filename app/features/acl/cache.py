"""
Request-scoped cache of single ACL lookups.

An ``ACLCache`` is built for one request and handed to the store. The store
invalidates every resource it mutates before the mutation returns, so a
lookup after a write always observes that write.
"""
from typing import Optional, Tuple

from app.features.acl.models import AccessControlList
from app.features.acl.permissions import ResourceType

from app.utils import get_logger


log = get_logger(__name__)

CacheKey = Tuple[str, ResourceType, int, str]
ResourceKey = Tuple[str, ResourceType, int]

MISSING = object()


class ACLCache:
    """Holds hits and misses of ``find_one`` keyed by the full ACL tuple."""

    def __init__(self):
        self._entries: dict[CacheKey, Optional[AccessControlList]] = {}

    def get(self, key: CacheKey):
        """Cached entry (or ``None`` for a cached miss); ``MISSING`` if unknown."""
        return self._entries.get(key, MISSING)

    def put(self, key: CacheKey, entry: Optional[AccessControlList]) -> None:
        self._entries[key] = entry

    def invalidate_resource(self, tenant_id: str, resource_type: ResourceType, resource_id: int) -> None:
        """Drop every cached lookup for one resource of one tenant."""
        stale = [
            key for key in self._entries
            if key[:3] == (tenant_id, resource_type, resource_id)
        ]
        for key in stale:
            del self._entries[key]
        if stale:
            log.debug("Invalidated %d cached ACL lookups for %s:%s", len(stale), resource_type.value, resource_id)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
