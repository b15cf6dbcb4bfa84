from __future__ import annotations

from app.cms.content import ContentType, Dependency
from app.cms.content_admin import build_blueprint
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.costs.models import TreatmentCost
from app.cms.modules.doctors.models import DoctorTreatment
from app.cms.modules.specialties.models import Specialty
from app.cms.modules.testimonials.models import Testimonial
from app.cms.modules.treatments.models import Treatment
from app.cms.modules.videos.models import Video
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, PermalinkDynamic, StudioConfig, StudioField


def _extras(t: Treatment) -> dict:
    return {
        "specialty_name": t.specialty.name if t.specialty else None,
        "specialty_slug": t.specialty.slug if t.specialty else None,
    }


TREATMENTS = ContentType(
    key="treatments",
    model=Treatment,
    entity_type="treatment",
    label="Treatment",
    plural="Treatments",
    fields=(
        "name",
        "slug",
        "specialty_id",
        "description",
        "long_description",
        "duration",
        "recovery_time",
        "success_rate",
        "cost_range_usd",
        "image",
        "is_featured",
        "display_order",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("name",),
    joins=(Treatment.specialty,),
    order_by=(Specialty.name.asc(), Treatment.name.asc()),
    query_filters={"status": "status", "specialty_id": "specialty_id"},
    dependencies=(
        Dependency("doctor(s)", DoctorTreatment, "treatment_id"),
        Dependency("treatment cost(s)", TreatmentCost, "treatment_id"),
        Dependency("testimonial(s)", Testimonial, "treatment_id"),
        Dependency("video(s)", Video, "treatment_id"),
    ),
    revisions=True,
    content_field="long_description",
    extras=_extras,
    list_url="/treatments",
    listing=ListingConfig(
        columns=(
            Column("specialty_name", "Specialty", badge=True),
            Column("duration", "Duration"),
            Column("success_rate", "Success rate"),
            Column("cost_range_usd", "Cost (USD)"),
        ),
        filters=(ListingFilter("specialty", "specialty_id", "All specialties", source="/api/specialties"),),
        quick_edit_fields=(
            QuickEditField("name", "Name"),
            QuickEditField("slug", "Slug"),
            QuickEditField("cost_range_usd", "Cost (USD)"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="image",
        default_sort="name",
        default_dir="asc",
    ),
    studio=StudioConfig(
        cpt="treatment",
        label="Treatment",
        api="/api/treatments",
        edit_base="/treatments/edit/",
        list_url="/treatments",
        placeholder="Treatment name",
        permalink_dynamic=PermalinkDynamic(field="specialty_id", source="/api/specialties", pattern="/specialties/{value}/"),
        revisions=True,
        field_rows=(
            (
                StudioField("specialty_id", "Specialty", type="select", source="/api/specialties", flex=2, onchange="permalink"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("duration", "Duration", placeholder="2-3 hours", flex=1),
                StudioField("recovery_time", "Recovery", placeholder="4-6 weeks", flex=1),
                StudioField("success_rate", "Success rate", placeholder="95%", flex=1),
                StudioField("cost_range_usd", "Cost range (USD)", placeholder="$4,000 - $7,000", flex=1),
            ),
            (
                StudioField("description", "Short description", type="textarea", rows=3, flex=2),
                StudioField("image", "Image", type="image", flex=1),
            ),
            (
                StudioField("display_order", "Order", type="number", width="90px"),
                StudioField("is_featured", "Featured", type="checkbox"),
            ),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(TREATMENTS)
