from __future__ import annotations

from app.cms.content import ContentType
from app.cms.content_admin import build_blueprint
from app.cms.errors import ValidationError
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.testimonials.models import Testimonial
from app.cms.studio import STATUS_OPTIONS, StudioConfig, StudioField

_RATING_OPTIONS = tuple((str(n), "★" * n) for n in range(5, 0, -1))


def testimonial_slug_source(t: Testimonial) -> str:
    """patient name + treatment (or specialty) + destination, e.g. 'john-d-knee-replacement-india'."""
    parts = [t.patient_name, t.treatment or t.specialty, t.destination]
    return " ".join(p for p in parts if p)


def prepare_testimonial(s, t: Testimonial, payload: dict, user, creating: bool) -> None:
    if t.rating is None:
        t.rating = 5
    if not 1 <= int(t.rating) <= 5:
        raise ValidationError("Rating must be between 1 and 5")


def _extras(t: Testimonial) -> dict:
    return {
        "doctor_name": t.doctor.name if t.doctor else None,
        "hospital_name": t.hospital.name if t.hospital else None,
    }


TESTIMONIALS = ContentType(
    key="testimonials",
    model=Testimonial,
    entity_type="testimonial",
    label="Testimonial",
    plural="Testimonials",
    fields=(
        "patient_name",
        "slug",
        "patient_country",
        "patient_flag",
        "title",
        "treatment",
        "specialty",
        "destination",
        "doctor_id",
        "hospital_id",
        "specialty_id",
        "treatment_id",
        "rating",
        "quote",
        "avatar_color",
        "source",
        "treatment_date",
        "patient_image",
        "is_featured",
        "status",
    ),
    required=("patient_name", "quote"),
    title_field="patient_name",
    slug_policy="suffix",
    slug_source=testimonial_slug_source,
    order_by=(Testimonial.created_at.desc(),),
    query_filters={"status": "status", "doctor_id": "doctor_id", "hospital_id": "hospital_id"},
    prepare=prepare_testimonial,
    extras=_extras,
    list_url="/testimonials",
    listing=ListingConfig(
        title_field="patient_name",
        columns=(
            Column("patient_country", "Country"),
            Column("treatment", "Treatment", badge=True),
            Column("destination", "Destination"),
            Column("rating", "Rating"),
        ),
        filters=(
            ListingFilter("rating", "rating", "Any rating", options=_RATING_OPTIONS),
            ListingFilter("destination", "destination", "All destinations"),
        ),
        quick_edit_fields=(
            QuickEditField("patient_name", "Patient"),
            QuickEditField("rating", "Rating", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="patient_image",
        search_fields=("slug", "quote", "title", "treatment", "destination"),
    ),
    studio=StudioConfig(
        cpt="testimonial",
        label="Testimonial",
        api="/api/testimonials",
        edit_base="/testimonials/edit/",
        list_url="/testimonials",
        placeholder="Patient name",
        title_field="patient_name",
        content_field="quote",
        rich_text=False,
        permalink_prefix="/testimonials/",
        field_rows=(
            (
                StudioField("patient_country", "Patient country", flex=1),
                StudioField("patient_flag", "Flag", width="80px"),
                StudioField("rating", "Rating", type="select", options=_RATING_OPTIONS, width="120px"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("title", "Headline", flex=1),
                StudioField("treatment_date", "Treatment date", type="date", width="170px"),
                StudioField("source", "Source", placeholder="Google", width="140px"),
            ),
            (
                StudioField("treatment", "Treatment label", flex=1),
                StudioField("specialty", "Specialty label", flex=1),
                StudioField("destination", "Destination label", flex=1),
            ),
            (
                StudioField("doctor_id", "Doctor", type="select", source="/api/doctors", flex=1),
                StudioField("hospital_id", "Hospital", type="select", source="/api/hospitals", flex=1),
                StudioField("treatment_id", "Treatment", type="select", source="/api/treatments", flex=1),
            ),
            (
                StudioField("patient_image", "Patient photo", type="image", flex=1),
                StudioField("avatar_color", "Avatar colour", placeholder="#4f46e5", width="140px"),
                StudioField("is_featured", "Featured", type="checkbox"),
            ),
        ),
    ),
)

bp = build_blueprint(TESTIMONIALS)
