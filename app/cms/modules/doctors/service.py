from __future__ import annotations

from typing import TYPE_CHECKING

from app.cms.audit import record_event
from app.cms.content import replace_links
from app.cms.modules.doctors.models import Doctor, DoctorTreatment
from app.cms.modules.treatments.models import Treatment

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.models import User


def prepare_doctor(s: "Session", doctor: Doctor, payload: dict, user: "User", creating: bool) -> None:
    """Fill destination and location labels from the hospital when they are left blank."""
    if doctor.hospital_id is None:
        return
    from app.cms.modules.hospitals.models import Hospital

    hospital = s.get(Hospital, doctor.hospital_id)
    if hospital is None:
        return
    if doctor.destination_id is None:
        doctor.destination_id = hospital.destination_id
    if not doctor.city:
        doctor.city = hospital.city
    if not doctor.country:
        doctor.country = hospital.country


def doctor_treatments(s: "Session", doctor_id: int) -> list[Treatment]:
    return (
        s.query(Treatment)
        .join(DoctorTreatment, DoctorTreatment.treatment_id == Treatment.id)
        .filter(DoctorTreatment.doctor_id == doctor_id)
        .order_by(Treatment.name.asc())
        .all()
    )


def set_doctor_treatments(s: "Session", doctor: Doctor, treatment_ids, user: "User") -> list[int]:
    ids = replace_links(s, DoctorTreatment, "doctor_id", doctor.id, "treatment_id", treatment_ids, Treatment)
    record_event(
        s,
        actor=user,
        action="update",
        entity_type="doctor",
        entity_id=doctor.id,
        details=f"Updated treatments: {doctor.name}",
        metadata={"treatment_ids": ids},
    )
    return ids
