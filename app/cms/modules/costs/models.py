from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.cms.models import Base

if TYPE_CHECKING:
    from app.cms.modules.destinations.models import Destination
    from app.cms.modules.treatments.models import Treatment


class TreatmentCost(Base):
    """Price of one treatment in one destination."""

    __tablename__ = "treatment_costs"
    __table_args__ = (
        UniqueConstraint("treatment_id", "destination_id", name="uq_treatment_costs_treatment_destination"),
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_treatment_costs_status"),
        Index("idx_treatment_costs_destination_id", "destination_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    treatment_id: Mapped[int] = mapped_column(ForeignKey("treatments.id"), nullable=False)
    destination_id: Mapped[int] = mapped_column(ForeignKey("destinations.id"), nullable=False)

    cost_min_usd: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost_max_usd: Mapped[int | None] = mapped_column(Integer, nullable=True)
    usa_cost: Mapped[int | None] = mapped_column(Integer, nullable=True)  # comparison price
    cost_local: Mapped[str | None] = mapped_column(String(128), nullable=True)  # e.g. "INR 3,50,000"
    includes: Mapped[str | None] = mapped_column(Text, nullable=True)
    hospital_stay: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="published")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    treatment: Mapped[Optional["Treatment"]] = relationship("Treatment", lazy="joined")
    destination: Mapped[Optional["Destination"]] = relationship("Destination", lazy="joined")

    @property
    def display_name(self) -> str:
        treatment = self.treatment.name if self.treatment else f"treatment #{self.treatment_id}"
        destination = self.destination.name if self.destination else f"destination #{self.destination_id}"
        return f"{treatment} in {destination}"
