from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.cms.models import Base


class StaticPage(Base):
    __tablename__ = "static_pages"
    __table_args__ = (
        CheckConstraint("page_type IN ('page', 'legal', 'landing', 'form')", name="ck_static_pages_page_type"),
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_static_pages_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    page_type: Mapped[str] = mapped_column(String(16), nullable=False, default="page")
    content: Mapped[str | None] = mapped_column(Text, nullable=True, info={"raw": True})
    hero_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    hero_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="published")
    updated_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class PageContent(Base):
    """
    Key-value content blocks for the public site (hero copy, stats, site settings).
    Addressed by (page, section, field_key).
    """

    __tablename__ = "page_content"
    __table_args__ = (
        UniqueConstraint("page", "section", "field_key", name="uq_page_content_key"),
        CheckConstraint("field_type IN ('text', 'number', 'html', 'image', 'json')", name="ck_page_content_field_type"),
        Index("idx_page_content_page", "page"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    page: Mapped[str] = mapped_column(String(128), nullable=False)
    section: Mapped[str] = mapped_column(String(128), nullable=False)
    field_key: Mapped[str] = mapped_column(String(128), nullable=False)
    field_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_type: Mapped[str] = mapped_column(String(16), nullable=False, default="text")
    updated_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "page": self.page,
            "section": self.section,
            "field_key": self.field_key,
            "field_value": self.field_value,
            "field_type": self.field_type,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
