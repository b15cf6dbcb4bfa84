from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cms.models import Base, JSONType

if TYPE_CHECKING:
    from app.cms.modules.destinations.models import Destination
    from app.cms.modules.hospitals.models import Hospital
    from app.cms.modules.specialties.models import Specialty


class Doctor(Base):
    __tablename__ = "doctors"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_doctors_status"),
        Index("idx_doctors_hospital_id", "hospital_id"),
        Index("idx_doctors_destination_id", "destination_id"),
        Index("idx_doctors_specialty_id", "specialty_id"),
        Index("idx_doctors_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)  # e.g. "Senior Consultant, Orthopaedics"

    hospital_id: Mapped[int | None] = mapped_column(ForeignKey("hospitals.id"), nullable=True)
    destination_id: Mapped[int | None] = mapped_column(ForeignKey("destinations.id"), nullable=True)
    specialty_id: Mapped[int | None] = mapped_column(ForeignKey("specialties.id"), nullable=True)

    country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    qualifications: Mapped[list | None] = mapped_column(JSONType, nullable=True, default=list, info={"list": True})
    languages: Mapped[list | None] = mapped_column(JSONType, nullable=True, default=list, info={"list": True})

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True, info={"raw": True})
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    hospital: Mapped[Optional["Hospital"]] = relationship("Hospital", lazy="joined")
    destination: Mapped[Optional["Destination"]] = relationship("Destination", lazy="joined")
    specialty: Mapped[Optional["Specialty"]] = relationship("Specialty", lazy="joined")


class DoctorTreatment(Base):
    __tablename__ = "doctor_treatments"

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"), primary_key=True)
    treatment_id: Mapped[int] = mapped_column(ForeignKey("treatments.id", ondelete="CASCADE"), primary_key=True)
