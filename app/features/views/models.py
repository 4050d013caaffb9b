"""
View model.
"""
from typing import Any, Dict
from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin


class View(Base, TimestampMixin):
    """
    A saved view of a panel. Every view references exactly one parent panel.
    """
    __tablename__ = "views"
    __table_args__ = (
        Index("ix_views_tenant_owner", "tenant_id", "owner_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tenant_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    owner_user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    panel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("panels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    visible_columns: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    metadata_: Mapped[Dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)

    panel: Mapped["Panel"] = relationship(  # type: ignore  # noqa: F821
        "Panel",
        back_populates="views",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<View(id={self.id}, panel_id={self.panel_id}, name={self.name!r})>"
