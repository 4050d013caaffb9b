"""
Panel model.
"""
from typing import Any, Dict
from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin


class Panel(Base, TimestampMixin):
    """
    A worklist panel owned by exactly one tenant.

    Views live beneath a panel and are removed with it.
    """
    __tablename__ = "panels"
    __table_args__ = (
        Index("ix_panels_tenant_user", "tenant_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tenant_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[Dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    views: Mapped[list["View"]] = relationship(  # type: ignore  # noqa: F821
        "View",
        back_populates="panel",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Panel(id={self.id}, tenant={self.tenant_id!r}, name={self.name!r})>"
