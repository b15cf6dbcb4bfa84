from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cms.models import Base

if TYPE_CHECKING:
    from app.cms.modules.specialties.models import Specialty


class Treatment(Base):
    __tablename__ = "treatments"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_treatments_status"),
        Index("idx_treatments_specialty_id", "specialty_id"),
        Index("idx_treatments_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    specialty_id: Mapped[int | None] = mapped_column(ForeignKey("specialties.id"), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True, info={"raw": True})

    duration: Mapped[str | None] = mapped_column(String(128), nullable=True)  # e.g. "2-3 hours"
    recovery_time: Mapped[str | None] = mapped_column(String(128), nullable=True)
    success_rate: Mapped[str | None] = mapped_column(String(32), nullable=True)  # e.g. "95%"
    cost_range_usd: Mapped[str | None] = mapped_column(String(128), nullable=True)  # e.g. "$4,000 - $7,000"

    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    specialty: Mapped[Optional["Specialty"]] = relationship("Specialty", lazy="joined")
