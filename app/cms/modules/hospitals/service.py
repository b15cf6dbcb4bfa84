from __future__ import annotations

from typing import TYPE_CHECKING

from app.cms.audit import record_event
from app.cms.content import replace_links
from app.cms.errors import ValidationError
from app.cms.modules.hospitals.models import Hospital, HospitalSpecialty
from app.cms.modules.specialties.models import Specialty

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.models import User


def prepare_hospital(s: "Session", hospital: Hospital, payload: dict, user: "User", creating: bool) -> None:
    """Every hospital belongs to a destination; the country label follows it when left blank."""
    if hospital.destination_id is None and (creating or "destination_id" in payload):
        raise ValidationError("Destination (country) is required")
    if not hospital.country and hospital.destination_id is not None:
        from app.cms.modules.destinations.models import Destination

        dest = s.get(Destination, hospital.destination_id)
        if dest is not None:
            hospital.country = dest.name


def hospital_specialties(s: "Session", hospital_id: int) -> list[Specialty]:
    return (
        s.query(Specialty)
        .join(HospitalSpecialty, HospitalSpecialty.specialty_id == Specialty.id)
        .filter(HospitalSpecialty.hospital_id == hospital_id)
        .order_by(Specialty.display_order.asc(), Specialty.name.asc())
        .all()
    )


def set_hospital_specialties(s: "Session", hospital: Hospital, specialty_ids, user: "User") -> list[int]:
    ids = replace_links(s, HospitalSpecialty, "hospital_id", hospital.id, "specialty_id", specialty_ids, Specialty)
    record_event(
        s,
        actor=user,
        action="update",
        entity_type="hospital",
        entity_id=hospital.id,
        details=f"Updated specialties: {hospital.name}",
        metadata={"specialty_ids": ids},
    )
    return ids
