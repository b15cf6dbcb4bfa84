from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.cms.models import Base, JSONType


class Destination(Base):
    """A country patients travel to."""

    __tablename__ = "destinations"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_destinations_status"),
        Index("idx_destinations_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    flag: Mapped[str | None] = mapped_column(String(16), nullable=True)
    tagline: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True, info={"raw": True})
    why_choose: Mapped[str | None] = mapped_column(Text, nullable=True, info={"raw": True})
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    gallery: Mapped[list | None] = mapped_column(JSONType, nullable=True, default=list, info={"list": True})

    hospital_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    doctor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_savings: Mapped[str | None] = mapped_column(String(64), nullable=True)  # e.g. "60-80%"

    # Travel information
    visa_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    travel_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    climate: Mapped[str | None] = mapped_column(String(255), nullable=True)
    language: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(64), nullable=True)

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
