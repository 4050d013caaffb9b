"""
Access control list model.

One row per (tenant_id, resource_type, resource_id, user_email). The
``user_email`` value ``"_all"`` is the tenant-wide public grant.
"""
from sqlalchemy import CheckConstraint, Enum as SQLEnum, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin
from app.features.acl.permissions import Permission, ResourceType, parse_grantee, Grantee


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class AccessControlList(Base, TimestampMixin):
    """
    A grant of one permission level on one panel or view to one grantee.

    Uniqueness of the tuple is enforced by the database; it is the authority
    when two requests race to create the same grant.
    """
    __tablename__ = "access_control_lists"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "resource_type", "resource_id", "user_email",
            name="uq_acl_tenant_resource_user",
        ),
        CheckConstraint("resource_type IN ('panel', 'view')", name="ck_acl_resource_type"),
        CheckConstraint("permission IN ('viewer', 'editor', 'owner')", name="ck_acl_permission"),
        Index("ix_acl_tenant_resource", "tenant_id", "resource_type", "resource_id"),
        Index("ix_acl_tenant_user_type", "tenant_id", "user_email", "resource_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tenant_id: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_type: Mapped[ResourceType] = mapped_column(
        SQLEnum(
            ResourceType,
            native_enum=False,
            create_constraint=False,
            values_callable=_enum_values,
            length=16,
        ),
        nullable=False,
    )
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False)
    permission: Mapped[Permission] = mapped_column(
        SQLEnum(
            Permission,
            native_enum=False,
            create_constraint=False,
            values_callable=_enum_values,
            length=16,
        ),
        nullable=False,
    )

    @property
    def grantee(self) -> Grantee:
        return parse_grantee(self.user_email)

    def __repr__(self) -> str:
        return (
            f"<AccessControlList(id={self.id}, tenant={self.tenant_id!r}, "
            f"resource={self.resource_type.value}:{self.resource_id}, "
            f"user={self.user_email!r}, permission={self.permission.value})>"
        )
