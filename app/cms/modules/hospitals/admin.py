from __future__ import annotations

from flask import g, jsonify

from app.cms.content import ContentType, Dependency, Junction, get_item
from app.cms.content_admin import build_blueprint, request_payload
from app.cms.db import db_session
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.doctors.models import Doctor
from app.cms.modules.hospitals.models import Hospital, HospitalSpecialty
from app.cms.modules.hospitals.service import hospital_specialties, prepare_hospital, set_hospital_specialties
from app.cms.modules.testimonials.models import Testimonial
from app.cms.modules.videos.models import Video
from app.cms.rbac import require_permission
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, PermalinkDynamic, StudioConfig, StudioField


def _extras(h: Hospital) -> dict:
    return {
        "destination_name": h.destination.name if h.destination else None,
        "destination_slug": h.destination.slug if h.destination else None,
    }


HOSPITALS = ContentType(
    key="hospitals",
    model=Hospital,
    entity_type="hospital",
    label="Hospital",
    plural="Hospitals",
    fields=(
        "name",
        "slug",
        "destination_id",
        "country",
        "city",
        "address",
        "latitude",
        "longitude",
        "description",
        "long_description",
        "accreditations",
        "beds",
        "established",
        "image",
        "gallery",
        "rating",
        "is_featured",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("name",),
    order_by=(Hospital.name.asc(),),
    query_filters={"status": "status", "destination_id": "destination_id"},
    dependencies=(
        Dependency("doctor(s)", Doctor, "hospital_id"),
        Dependency("testimonial(s)", Testimonial, "hospital_id"),
        Dependency("video(s)", Video, "hospital_id"),
    ),
    junctions=(Junction(HospitalSpecialty, "hospital_id"),),
    revisions=True,
    content_field="long_description",
    prepare=prepare_hospital,
    extras=_extras,
    list_url="/hospitals",
    listing=ListingConfig(
        columns=(
            Column("destination_name", "Country", badge=True),
            Column("city", "City"),
            Column("beds", "Beds"),
            Column("rating", "Rating"),
        ),
        filters=(ListingFilter("destination", "destination_id", "All countries", source="/api/destinations"),),
        quick_edit_fields=(
            QuickEditField("name", "Name"),
            QuickEditField("city", "City"),
            QuickEditField("beds", "Beds", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="image",
        default_sort="name",
        default_dir="asc",
        search_fields=("slug", "description", "city", "country"),
    ),
    studio=StudioConfig(
        cpt="hospital",
        label="Hospital",
        api="/api/hospitals",
        edit_base="/hospitals/edit/",
        list_url="/hospitals",
        placeholder="Hospital name",
        permalink_dynamic=PermalinkDynamic(field="destination_id", source="/api/destinations", pattern="/{value}/hospitals/"),
        revisions=True,
        field_rows=(
            (
                StudioField("destination_id", "Destination", type="select", source="/api/destinations", flex=2, onchange="permalink"),
                StudioField("city", "City", flex=1),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("address", "Address", flex=3),
                StudioField("latitude", "Latitude", type="number", width="120px"),
                StudioField("longitude", "Longitude", type="number", width="120px"),
            ),
            (
                StudioField("beds", "Beds", type="number", width="100px"),
                StudioField("established", "Established", type="number", width="110px"),
                StudioField("rating", "Rating", type="number", width="100px"),
                StudioField("accreditations", "Accreditations", placeholder="JCI, NABH", flex=2),
            ),
            (
                StudioField("description", "Short description", type="textarea", rows=3, flex=2),
                StudioField("image", "Image", type="image", flex=1),
            ),
            (StudioField("is_featured", "Featured", type="checkbox"),),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(HOSPITALS)


@bp.get("/api/hospitals/<int:hospital_id>/specialties")
@require_permission("content.view")
def hospital_specialties_get(hospital_id: int):
    s = db_session()
    get_item(s, HOSPITALS, hospital_id)
    rows = hospital_specialties(s, hospital_id)
    return jsonify([{"id": sp.id, "name": sp.name, "slug": sp.slug} for sp in rows])


@bp.put("/api/hospitals/<int:hospital_id>/specialties")
@require_permission("content.edit")
def hospital_specialties_put(hospital_id: int):
    s = db_session()
    hospital = get_item(s, HOSPITALS, hospital_id)
    ids = set_hospital_specialties(s, hospital, request_payload().get("specialty_ids"), g.current_user)
    s.commit()
    return jsonify({"success": True, "count": len(ids), "specialty_ids": ids})
