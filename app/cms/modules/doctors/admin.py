from __future__ import annotations

from flask import g, jsonify, request

from app.cms.content import ContentType, Dependency, Junction, get_item, slug_available
from app.cms.content_admin import build_blueprint, request_payload
from app.cms.db import db_session
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.doctors.models import Doctor, DoctorTreatment
from app.cms.modules.doctors.service import doctor_treatments, prepare_doctor, set_doctor_treatments
from app.cms.modules.testimonials.models import Testimonial
from app.cms.modules.videos.models import Video
from app.cms.rbac import require_permission
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, StudioConfig, StudioField


def _extras(d: Doctor) -> dict:
    return {
        "hospital_name": d.hospital.name if d.hospital else None,
        "destination_name": d.destination.name if d.destination else None,
        "specialty_name": d.specialty.name if d.specialty else None,
    }


DOCTORS = ContentType(
    key="doctors",
    model=Doctor,
    entity_type="doctor",
    label="Doctor",
    plural="Doctors",
    fields=(
        "name",
        "slug",
        "title",
        "hospital_id",
        "destination_id",
        "specialty_id",
        "country",
        "city",
        "experience_years",
        "qualifications",
        "languages",
        "description",
        "long_description",
        "image",
        "is_featured",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("name",),
    order_by=(Doctor.name.asc(),),
    query_filters={
        "status": "status",
        "hospital_id": "hospital_id",
        "destination_id": "destination_id",
        "specialty_id": "specialty_id",
    },
    dependencies=(
        Dependency("video(s)", Video, "doctor_id"),
        Dependency("testimonial(s)", Testimonial, "doctor_id"),
    ),
    junctions=(Junction(DoctorTreatment, "doctor_id"),),
    revisions=True,
    content_field="long_description",
    prepare=prepare_doctor,
    extras=_extras,
    list_url="/doctors",
    listing=ListingConfig(
        columns=(
            Column("specialty_name", "Specialty", badge=True),
            Column("hospital_name", "Hospital"),
            Column("destination_name", "Country"),
            Column("experience_years", "Experience"),
        ),
        filters=(
            ListingFilter("specialty", "specialty_id", "All specialties", source="/api/specialties"),
            ListingFilter("hospital", "hospital_id", "All hospitals", source="/api/hospitals"),
            ListingFilter("destination", "destination_id", "All countries", source="/api/destinations"),
        ),
        quick_edit_fields=(
            QuickEditField("name", "Name"),
            QuickEditField("title", "Title"),
            QuickEditField("experience_years", "Experience", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="image",
        default_sort="name",
        default_dir="asc",
        search_fields=("slug", "description", "title", "city"),
    ),
    studio=StudioConfig(
        cpt="doctor",
        label="Doctor",
        api="/api/doctors",
        edit_base="/doctors/edit/",
        list_url="/doctors",
        view_base="/doctors/",
        placeholder="Doctor name",
        permalink_prefix="/doctors/",
        revisions=True,
        field_rows=(
            (
                StudioField("title", "Title", placeholder="Senior Consultant", flex=2),
                StudioField("experience_years", "Experience (years)", type="number", width="140px"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("specialty_id", "Specialty", type="select", source="/api/specialties", flex=1),
                StudioField("hospital_id", "Hospital", type="select", source="/api/hospitals", flex=1),
                StudioField("destination_id", "Destination", type="select", source="/api/destinations", flex=1),
            ),
            (
                StudioField("qualifications", "Qualifications", placeholder="MBBS, MS (Ortho)", flex=1),
                StudioField("languages", "Languages", placeholder="English, Hindi", flex=1),
            ),
            (
                StudioField("description", "Short bio", type="textarea", rows=3, flex=2),
                StudioField("image", "Photo", type="image", flex=1),
            ),
            (StudioField("is_featured", "Featured", type="checkbox"),),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(DOCTORS)


@bp.get("/api/doctor-treatments/<int:doctor_id>")
@require_permission("content.view")
def doctor_treatments_get(doctor_id: int):
    s = db_session()
    get_item(s, DOCTORS, doctor_id)
    rows = doctor_treatments(s, doctor_id)
    return jsonify([{"id": t.id, "name": t.name, "slug": t.slug, "specialty_id": t.specialty_id} for t in rows])


@bp.put("/api/doctor-treatments/<int:doctor_id>")
@require_permission("content.edit")
def doctor_treatments_put(doctor_id: int):
    s = db_session()
    doctor = get_item(s, DOCTORS, doctor_id)
    ids = set_doctor_treatments(s, doctor, request_payload().get("treatment_ids"), g.current_user)
    s.commit()
    return jsonify({"success": True, "count": len(ids)})


@bp.get("/api/doctor-slug-check/<slug>")
@require_permission("content.view")
def doctor_slug_check(slug: str):
    s = db_session()
    return jsonify(slug_available(s, DOCTORS, slug, request.args.get("exclude", type=int)))
