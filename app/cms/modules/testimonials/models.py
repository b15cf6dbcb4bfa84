from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cms.models import Base

if TYPE_CHECKING:
    from app.cms.modules.doctors.models import Doctor
    from app.cms.modules.hospitals.models import Hospital


class Testimonial(Base):
    __tablename__ = "testimonials"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_testimonials_rating"),
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_testimonials_status"),
        Index("idx_testimonials_status", "status"),
        Index("idx_testimonials_doctor_id", "doctor_id"),
        Index("idx_testimonials_hospital_id", "hospital_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    patient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    patient_country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    patient_flag: Mapped[str | None] = mapped_column(String(16), nullable=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Free-text labels shown on the card
    treatment: Mapped[str | None] = mapped_column(String(255), nullable=True)
    specialty: Mapped[str | None] = mapped_column(String(255), nullable=True)
    destination: Mapped[str | None] = mapped_column(String(255), nullable=True)

    doctor_id: Mapped[int | None] = mapped_column(ForeignKey("doctors.id"), nullable=True)
    hospital_id: Mapped[int | None] = mapped_column(ForeignKey("hospitals.id"), nullable=True)
    specialty_id: Mapped[int | None] = mapped_column(ForeignKey("specialties.id"), nullable=True)
    treatment_id: Mapped[int | None] = mapped_column(ForeignKey("treatments.id"), nullable=True)

    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    source: Mapped[str | None] = mapped_column(String(64), nullable=True)  # e.g. "Google", "Video"
    treatment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    patient_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    doctor: Mapped[Optional["Doctor"]] = relationship("Doctor", lazy="joined")
    hospital: Mapped[Optional["Hospital"]] = relationship("Hospital", lazy="joined")
