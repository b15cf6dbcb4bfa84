from __future__ import annotations

from app.cms.constants import SPECIALTY_CATEGORIES
from app.cms.content import ContentType, Dependency
from app.cms.content_admin import build_blueprint
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.doctors.models import Doctor
from app.cms.modules.hospitals.models import HospitalSpecialty
from app.cms.modules.specialties.models import Specialty
from app.cms.modules.testimonials.models import Testimonial
from app.cms.modules.treatments.models import Treatment
from app.cms.modules.videos.models import Video
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, StudioConfig, StudioField

_CATEGORY_OPTIONS = tuple((c, c.replace("_", " ").title()) for c in SPECIALTY_CATEGORIES)

SPECIALTIES = ContentType(
    key="specialties",
    model=Specialty,
    entity_type="specialty",
    label="Specialty",
    plural="Specialties",
    fields=(
        "name",
        "slug",
        "icon",
        "category",
        "description",
        "long_description",
        "treatment_count",
        "image",
        "is_featured",
        "display_order",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("name",),
    choices={"category": SPECIALTY_CATEGORIES},
    order_by=(Specialty.display_order.asc(), Specialty.name.asc()),
    dependencies=(
        Dependency("treatment(s)", Treatment, "specialty_id"),
        Dependency("doctor(s)", Doctor, "specialty_id"),
        Dependency("hospital(s)", HospitalSpecialty, "specialty_id"),
        Dependency("testimonial(s)", Testimonial, "specialty_id"),
        Dependency("video(s)", Video, "specialty_id"),
    ),
    revisions=True,
    content_field="long_description",
    list_url="/specialties",
    listing=ListingConfig(
        columns=(
            Column("icon", "Icon", sortable=False),
            Column("category", "Category", badge=True),
            Column("treatment_count", "Treatments"),
            Column("display_order", "Order"),
        ),
        filters=(ListingFilter("category", "category", "All categories", options=_CATEGORY_OPTIONS),),
        quick_edit_fields=(
            QuickEditField("name", "Name"),
            QuickEditField("slug", "Slug"),
            QuickEditField("display_order", "Order", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="image",
        default_sort="display_order",
        default_dir="asc",
    ),
    studio=StudioConfig(
        cpt="specialty",
        label="Specialty",
        api="/api/specialties",
        edit_base="/specialties/edit/",
        list_url="/specialties",
        view_base="/specialties/",
        placeholder="Specialty name",
        permalink_prefix="/specialties/",
        revisions=True,
        field_rows=(
            (
                StudioField("icon", "Icon", placeholder="e.g. heart emoji", width="90px"),
                StudioField("category", "Category", type="select", options=_CATEGORY_OPTIONS, flex=1),
                StudioField("display_order", "Order", type="number", width="90px"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
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

bp = build_blueprint(SPECIALTIES)
