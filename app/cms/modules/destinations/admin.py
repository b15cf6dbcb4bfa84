from __future__ import annotations

from app.cms.content import ContentType, Dependency
from app.cms.content_admin import build_blueprint
from app.cms.listing import Column, ListingConfig, QuickEditField, Tab
from app.cms.modules.costs.models import TreatmentCost
from app.cms.modules.destinations.models import Destination
from app.cms.modules.doctors.models import Doctor
from app.cms.modules.hospitals.models import Hospital
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, StudioConfig, StudioField

DESTINATIONS = ContentType(
    key="destinations",
    model=Destination,
    entity_type="destination",
    label="Destination",
    plural="Destinations",
    fields=(
        "name",
        "slug",
        "flag",
        "tagline",
        "description",
        "long_description",
        "why_choose",
        "image",
        "gallery",
        "hospital_count",
        "doctor_count",
        "avg_savings",
        "visa_info",
        "travel_info",
        "climate",
        "language",
        "currency",
        "is_featured",
        "display_order",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("name",),
    order_by=(Destination.display_order.asc(), Destination.name.asc()),
    dependencies=(
        Dependency("hospital(s)", Hospital, "destination_id"),
        Dependency("doctor(s)", Doctor, "destination_id"),
        Dependency("treatment cost(s)", TreatmentCost, "destination_id"),
    ),
    revisions=True,
    content_field="long_description",
    list_url="/destinations",
    listing=ListingConfig(
        columns=(
            Column("flag", "Flag", sortable=False),
            Column("avg_savings", "Savings"),
            Column("hospital_count", "Hospitals"),
            Column("doctor_count", "Doctors"),
            Column("display_order", "Order"),
        ),
        quick_edit_fields=(
            QuickEditField("name", "Name"),
            QuickEditField("tagline", "Tagline"),
            QuickEditField("display_order", "Order", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="image",
        default_sort="display_order",
        default_dir="asc",
        search_fields=("slug", "description", "tagline", "language", "currency"),
    ),
    studio=StudioConfig(
        cpt="destination",
        label="Destination",
        api="/api/destinations",
        edit_base="/destinations/edit/",
        list_url="/destinations",
        view_base="/destinations/",
        placeholder="Country name",
        permalink_prefix="/destinations/",
        revisions=True,
        field_rows=(
            (
                StudioField("flag", "Flag", placeholder="emoji", width="80px"),
                StudioField("tagline", "Tagline", flex=3),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("avg_savings", "Average savings", placeholder="60-80%", flex=1),
                StudioField("language", "Language", flex=1),
                StudioField("currency", "Currency", flex=1),
                StudioField("climate", "Climate", flex=1),
            ),
            (
                StudioField("description", "Short description", type="textarea", rows=3, flex=2),
                StudioField("image", "Image", type="image", flex=1),
            ),
            (
                StudioField("why_choose", "Why choose", type="textarea", rows=4, flex=1),
                StudioField("visa_info", "Visa information", type="textarea", rows=4, flex=1),
                StudioField("travel_info", "Travel information", type="textarea", rows=4, flex=1),
            ),
            (
                StudioField("display_order", "Order", type="number", width="90px"),
                StudioField("is_featured", "Featured", type="checkbox"),
            ),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(DESTINATIONS)
