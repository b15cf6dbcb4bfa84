from __future__ import annotations

from app.cms.content import ContentType
from app.cms.content_admin import build_blueprint
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.videos.models import Video
from app.cms.studio import STATUS_OPTIONS, StudioConfig, StudioField
from app.cms.utils import youtube_id

YOUTUBE_THUMB_PREFIX = "https://img.youtube.com/vi/"


def prepare_video(s, video: Video, payload: dict, user, creating: bool) -> None:
    """Derive the thumbnail from the YouTube id unless a custom one was set."""
    if not video.thumbnail or video.thumbnail.startswith(YOUTUBE_THUMB_PREFIX):
        vid = youtube_id(video.youtube_url)
        if vid:
            video.thumbnail = f"{YOUTUBE_THUMB_PREFIX}{vid}/hqdefault.jpg"


def _extras(v: Video) -> dict:
    return {
        "youtube_id": youtube_id(v.youtube_url),
        "doctor_name": v.doctor.name if v.doctor else None,
        "hospital_name": v.hospital.name if v.hospital else None,
        "specialty_name": v.specialty.name if v.specialty else None,
        "treatment_name": v.treatment.name if v.treatment else None,
    }


VIDEOS = ContentType(
    key="videos",
    model=Video,
    entity_type="video",
    label="Video",
    plural="Videos",
    fields=(
        "title",
        "slug",
        "youtube_url",
        "thumbnail",
        "description",
        "doctor_id",
        "hospital_id",
        "specialty_id",
        "treatment_id",
        "sort_order",
        "is_featured",
        "status",
    ),
    required=("title", "youtube_url"),
    title_field="title",
    order_by=(Video.sort_order.asc(), Video.created_at.desc()),
    query_filters={
        "status": "status",
        "doctor_id": "doctor_id",
        "hospital_id": "hospital_id",
        "specialty_id": "specialty_id",
        "treatment_id": "treatment_id",
    },
    prepare=prepare_video,
    extras=_extras,
    list_url="/videos",
    listing=ListingConfig(
        title_field="title",
        columns=(
            Column("specialty_name", "Specialty", badge=True),
            Column("doctor_name", "Doctor"),
            Column("hospital_name", "Hospital"),
            Column("sort_order", "Order"),
        ),
        filters=(
            ListingFilter("specialty", "specialty_id", "All specialties", source="/api/specialties"),
            ListingFilter("doctor", "doctor_id", "All doctors", source="/api/doctors"),
        ),
        quick_edit_fields=(
            QuickEditField("title", "Title"),
            QuickEditField("sort_order", "Order", type="number"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
        image_field="thumbnail",
        default_sort="sort_order",
        default_dir="asc",
        search_fields=("slug", "description", "youtube_url"),
    ),
    studio=StudioConfig(
        cpt="video",
        label="Video",
        api="/api/videos",
        edit_base="/videos/edit/",
        list_url="/videos",
        placeholder="Video title",
        title_field="title",
        content_field="description",
        rich_text=False,
        permalink_prefix="/videos/",
        field_rows=(
            (
                StudioField("youtube_url", "YouTube URL", placeholder="https://www.youtube.com/watch?v=...", flex=3),
                StudioField("sort_order", "Order", type="number", width="90px"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("doctor_id", "Doctor", type="select", source="/api/doctors", flex=1),
                StudioField("hospital_id", "Hospital", type="select", source="/api/hospitals", flex=1),
            ),
            (
                StudioField("specialty_id", "Specialty", type="select", source="/api/specialties", flex=1),
                StudioField("treatment_id", "Treatment", type="select", source="/api/treatments", flex=1),
            ),
            (
                StudioField("thumbnail", "Thumbnail", type="image", flex=1),
                StudioField("is_featured", "Featured", type="checkbox"),
            ),
        ),
    ),
)

bp = build_blueprint(VIDEOS)
