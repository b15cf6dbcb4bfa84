"""Initial CMS schema: users, audit, content types, junctions, media.

Revision ID: a0c1d2e3f4b5
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "a0c1d2e3f4b5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
STATUS_CHECK = "status IN ('draft', 'published', 'archived')"


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _seo() -> list:
    return [
        sa.Column("meta_title", sa.String(255), nullable=True),
        sa.Column("meta_description", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(32), nullable=False, server_default="editor"),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("role IN ('super_admin', 'editor', 'viewer')", name="ck_users_role"),
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("client_ip", sa.String(64), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_activity_log_created_at", "activity_log", ["created_at"])
    op.create_index("idx_activity_log_entity", "activity_log", ["entity_type", "entity_id"])

    op.create_table(
        "revisions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("entity_type", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(500), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("meta_json", JSONType, nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("revision_type", sa.String(16), nullable=False, server_default="manual"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.CheckConstraint("revision_type IN ('manual', 'autosave')", name="ck_revisions_type"),
    )
    op.create_index("idx_revisions_entity", "revisions", ["entity_type", "entity_id"])

    op.create_table(
        "specialties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("category", sa.String(32), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("treatment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(
            "category IS NULL OR category IN ('surgical', 'medical', 'oncology', 'super_specialty')",
            name="ck_specialties_category",
        ),
        sa.CheckConstraint(STATUS_CHECK, name="ck_specialties_status"),
    )
    op.create_index("idx_specialties_status", "specialties", ["status"])
    op.create_index("idx_specialties_display_order", "specialties", ["display_order"])

    op.create_table(
        "destinations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("flag", sa.String(16), nullable=True),
        sa.Column("tagline", sa.String(500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("why_choose", sa.Text(), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("gallery", JSONType, nullable=True),
        sa.Column("hospital_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("doctor_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_savings", sa.String(64), nullable=True),
        sa.Column("visa_info", sa.Text(), nullable=True),
        sa.Column("travel_info", sa.Text(), nullable=True),
        sa.Column("climate", sa.String(255), nullable=True),
        sa.Column("language", sa.String(255), nullable=True),
        sa.Column("currency", sa.String(64), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_destinations_status"),
    )
    op.create_index("idx_destinations_status", "destinations", ["status"])

    op.create_table(
        "treatments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("specialty_id", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("duration", sa.String(128), nullable=True),
        sa.Column("recovery_time", sa.String(128), nullable=True),
        sa.Column("success_rate", sa.String(32), nullable=True),
        sa.Column("cost_range_usd", sa.String(128), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"]),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_treatments_status"),
    )
    op.create_index("idx_treatments_specialty_id", "treatments", ["specialty_id"])
    op.create_index("idx_treatments_status", "treatments", ["status"])

    op.create_table(
        "hospitals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("destination_id", sa.Integer(), nullable=True),
        sa.Column("country", sa.String(128), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("accreditations", JSONType, nullable=True),
        sa.Column("beds", sa.Integer(), nullable=True),
        sa.Column("established", sa.Integer(), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("gallery", JSONType, nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["destination_id"], ["destinations.id"]),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_hospitals_status"),
    )
    op.create_index("idx_hospitals_destination_id", "hospitals", ["destination_id"])
    op.create_index("idx_hospitals_status", "hospitals", ["status"])

    op.create_table(
        "hospital_specialties",
        sa.Column("hospital_id", sa.Integer(), nullable=False),
        sa.Column("specialty_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("hospital_id", "specialty_id"),
    )

    op.create_table(
        "doctors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("hospital_id", sa.Integer(), nullable=True),
        sa.Column("destination_id", sa.Integer(), nullable=True),
        sa.Column("specialty_id", sa.Integer(), nullable=True),
        sa.Column("country", sa.String(128), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=True),
        sa.Column("qualifications", JSONType, nullable=True),
        sa.Column("languages", JSONType, nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"]),
        sa.ForeignKeyConstraint(["destination_id"], ["destinations.id"]),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"]),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_doctors_status"),
    )
    op.create_index("idx_doctors_hospital_id", "doctors", ["hospital_id"])
    op.create_index("idx_doctors_destination_id", "doctors", ["destination_id"])
    op.create_index("idx_doctors_specialty_id", "doctors", ["specialty_id"])
    op.create_index("idx_doctors_status", "doctors", ["status"])

    op.create_table(
        "doctor_treatments",
        sa.Column("doctor_id", sa.Integer(), nullable=False),
        sa.Column("treatment_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["treatment_id"], ["treatments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("doctor_id", "treatment_id"),
    )

    op.create_table(
        "treatment_costs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("treatment_id", sa.Integer(), nullable=False),
        sa.Column("destination_id", sa.Integer(), nullable=False),
        sa.Column("cost_min_usd", sa.Integer(), nullable=True),
        sa.Column("cost_max_usd", sa.Integer(), nullable=True),
        sa.Column("usa_cost", sa.Integer(), nullable=True),
        sa.Column("cost_local", sa.String(128), nullable=True),
        sa.Column("includes", sa.Text(), nullable=True),
        sa.Column("hospital_stay", sa.String(128), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="published"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["treatment_id"], ["treatments.id"]),
        sa.ForeignKeyConstraint(["destination_id"], ["destinations.id"]),
        sa.UniqueConstraint("treatment_id", "destination_id", name="uq_treatment_costs_treatment_destination"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_treatment_costs_status"),
    )
    op.create_index("idx_treatment_costs_destination_id", "treatment_costs", ["destination_id"])

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.String(500), nullable=True),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("tags", JSONType, nullable=True),
        sa.Column("read_time", sa.Integer(), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=True),
        *_seo(),
        sa.Column("focus_keywords", sa.String(500), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_blog_posts_status"),
    )
    op.create_index("idx_blog_posts_status", "blog_posts", ["status"])
    op.create_index("idx_blog_posts_published_at", "blog_posts", ["published_at"])

    op.create_table(
        "testimonials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("patient_country", sa.String(128), nullable=True),
        sa.Column("patient_flag", sa.String(16), nullable=True),
        sa.Column("title", sa.String(500), nullable=True),
        sa.Column("treatment", sa.String(255), nullable=True),
        sa.Column("specialty", sa.String(255), nullable=True),
        sa.Column("destination", sa.String(255), nullable=True),
        sa.Column("doctor_id", sa.Integer(), nullable=True),
        sa.Column("hospital_id", sa.Integer(), nullable=True),
        sa.Column("specialty_id", sa.Integer(), nullable=True),
        sa.Column("treatment_id", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("avatar_color", sa.String(32), nullable=True),
        sa.Column("source", sa.String(64), nullable=True),
        sa.Column("treatment_date", sa.Date(), nullable=True),
        sa.Column("patient_image", sa.String(500), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"]),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"]),
        sa.ForeignKeyConstraint(["treatment_id"], ["treatments.id"]),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_testimonials_rating"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_testimonials_status"),
    )
    op.create_index("idx_testimonials_status", "testimonials", ["status"])
    op.create_index("idx_testimonials_doctor_id", "testimonials", ["doctor_id"])
    op.create_index("idx_testimonials_hospital_id", "testimonials", ["hospital_id"])

    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("youtube_url", sa.String(500), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("doctor_id", sa.Integer(), nullable=True),
        sa.Column("hospital_id", sa.Integer(), nullable=True),
        sa.Column("specialty_id", sa.Integer(), nullable=True),
        sa.Column("treatment_id", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"]),
        sa.ForeignKeyConstraint(["specialty_id"], ["specialties.id"]),
        sa.ForeignKeyConstraint(["treatment_id"], ["treatments.id"]),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_videos_status"),
    )
    op.create_index("idx_videos_status", "videos", ["status"])
    op.create_index("idx_videos_sort_order", "videos", ["sort_order"])

    op.create_table(
        "static_pages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("page_type", sa.String(16), nullable=False, server_default="page"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("hero_title", sa.String(500), nullable=True),
        sa.Column("hero_description", sa.Text(), nullable=True),
        *_seo(),
        sa.Column("status", sa.String(16), nullable=False, server_default="published"),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint("page_type IN ('page', 'legal', 'landing', 'form')", name="ck_static_pages_page_type"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_static_pages_status"),
    )

    op.create_table(
        "page_content",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("page", sa.String(128), nullable=False),
        sa.Column("section", sa.String(128), nullable=False),
        sa.Column("field_key", sa.String(128), nullable=False),
        sa.Column("field_value", sa.Text(), nullable=True),
        sa.Column("field_type", sa.String(16), nullable=False, server_default="text"),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("page", "section", "field_key", name="uq_page_content_key"),
        sa.CheckConstraint(
            "field_type IN ('text', 'number', 'html', 'image', 'json')", name="ck_page_content_field_type"
        ),
    )
    op.create_index("idx_page_content_page", "page_content", ["page"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("form_type", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("country", sa.String(128), nullable=True),
        sa.Column("treatment", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("form_data", JSONType, nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="new"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assigned_to", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["assigned_to"], ["users.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "form_type IN ('quote', 'consultation', 'contact', 'partner', 'career')",
            name="ck_submissions_form_type",
        ),
        sa.CheckConstraint("status IN ('new', 'in_progress', 'responded', 'closed')", name="ck_submissions_status"),
    )
    op.create_index("idx_submissions_status", "submissions", ["status"])
    op.create_index("idx_submissions_form_type", "submissions", ["form_type"])
    op.create_index("idx_submissions_created_at", "submissions", ["created_at"])

    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=True),
        sa.Column("mime_type", sa.String(128), nullable=True),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("storage_key", sa.String(500), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("alt_text", sa.String(500), nullable=True),
        sa.Column("title", sa.String(500), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("sizes", JSONType, nullable=True),
        sa.Column("folder", sa.String(128), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("storage_key"),
    )
    op.create_index("idx_media_created_at", "media", ["created_at"])
    op.create_index("idx_media_folder", "media", ["folder"])


def downgrade() -> None:
    for table in (
        "media",
        "submissions",
        "page_content",
        "static_pages",
        "videos",
        "testimonials",
        "blog_posts",
        "treatment_costs",
        "doctor_treatments",
        "doctors",
        "hospital_specialties",
        "hospitals",
        "treatments",
        "destinations",
        "specialties",
        "revisions",
        "activity_log",
        "users",
    ):
        op.drop_table(table)
