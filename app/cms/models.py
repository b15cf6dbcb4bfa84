from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on Postgres, plain JSON elsewhere (SQLite dev/test databases).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('super_admin', 'editor', 'viewer')", name="ck_users_role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="editor")
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "avatar": self.avatar,
            "is_active": self.is_active,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ActivityLog(Base):
    """
    Append-only record of who changed what.
    """

    __tablename__ = "activity_log"
    __table_args__ = (
        Index("idx_activity_log_created_at", "created_at"),
        Index("idx_activity_log_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    client_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. "create", "bulk_publish"
    entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True)  # e.g. "treatment"
    entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # small JSON string

    user: Mapped[Optional["User"]] = relationship("User", lazy="joined")


class Revision(Base):
    """Snapshot of a content item taken before each save."""

    __tablename__ = "revisions"
    __table_args__ = (
        CheckConstraint("revision_type IN ('manual', 'autosave')", name="ck_revisions_type"),
        Index("idx_revisions_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_json: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    revision_type: Mapped[str] = mapped_column(String(16), nullable=False, default="manual")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    user: Mapped[Optional["User"]] = relationship("User", lazy="joined")


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.cms.modules.specialties.models import Specialty  # noqa: E402,F401
from app.cms.modules.destinations.models import Destination  # noqa: E402,F401
from app.cms.modules.treatments.models import Treatment  # noqa: E402,F401
from app.cms.modules.hospitals.models import Hospital, HospitalSpecialty  # noqa: E402,F401
from app.cms.modules.doctors.models import Doctor, DoctorTreatment  # noqa: E402,F401
from app.cms.modules.blog.models import BlogPost  # noqa: E402,F401
from app.cms.modules.testimonials.models import Testimonial  # noqa: E402,F401
from app.cms.modules.videos.models import Video  # noqa: E402,F401
from app.cms.modules.costs.models import TreatmentCost  # noqa: E402,F401
from app.cms.modules.pages.models import PageContent, StaticPage  # noqa: E402,F401
from app.cms.modules.submissions.models import Submission  # noqa: E402,F401
from app.cms.modules.media.models import Media  # noqa: E402,F401
