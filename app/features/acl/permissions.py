"""
Permission levels, resource types and grantees.

Pure values with no I/O. The three permission levels are totally ordered
(viewer < editor < owner); "has permission P" means the granted level ranks
at least as high as P.
"""
import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Union


class ResourceType(str, enum.Enum):
    """The two authorizable resource kinds."""
    PANEL = "panel"
    VIEW = "view"


class Permission(str, enum.Enum):
    """Permission level granted by an ACL entry."""
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Permission.VIEWER: 1,
    Permission.EDITOR: 2,
    Permission.OWNER: 3,
}


def sufficiency(granted: Optional[Permission], required: Permission) -> bool:
    """True iff ``granted`` ranks at least as high as ``required``.

    ``None`` stands for "no grant" and is never sufficient.
    """
    if granted is None:
        return False
    return granted.rank >= required.rank


def strongest(levels: Iterable[Optional[Permission]]) -> Optional[Permission]:
    """Highest-ranked level among ``levels``, ignoring missing grants."""
    best: Optional[Permission] = None
    for level in levels:
        if level is None:
            continue
        if best is None or level.rank > best.rank:
            best = level
    return best


# ============================================================================
# Grantees
# ============================================================================

ALL_USERS_EMAIL = "_all"


@dataclass(frozen=True)
class SpecificUser:
    """A single user, identified by email. Never the public sentinel."""
    email: str

    def __post_init__(self):
        if self.email == ALL_USERS_EMAIL:
            raise ValueError(f"{ALL_USERS_EMAIL!r} is reserved for public grants, use ALL_USERS")


@dataclass(frozen=True)
class AllUsers:
    """Every authenticated user of the tenant."""

    @property
    def email(self) -> str:
        return ALL_USERS_EMAIL


ALL_USERS = AllUsers()

Grantee = Union[SpecificUser, AllUsers]


def parse_grantee(user_email: str) -> Grantee:
    """Map a stored ``user_email`` value to its grantee."""
    if user_email == ALL_USERS_EMAIL:
        return ALL_USERS
    return SpecificUser(user_email)
