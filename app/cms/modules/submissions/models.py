from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cms.models import Base, JSONType

if TYPE_CHECKING:
    from app.cms.models import User


class Submission(Base):
    """A form posted from the public website (quote request, contact, ...)."""

    __tablename__ = "submissions"
    __table_args__ = (
        CheckConstraint(
            "form_type IN ('quote', 'consultation', 'contact', 'partner', 'career')",
            name="ck_submissions_form_type",
        ),
        CheckConstraint("status IN ('new', 'in_progress', 'responded', 'closed')", name="ck_submissions_status"),
        Index("idx_submissions_status", "status"),
        Index("idx_submissions_form_type", "form_type"),
        Index("idx_submissions_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    form_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    treatment: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    form_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)  # every other posted field

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    assignee: Mapped[Optional["User"]] = relationship("User", lazy="joined")
