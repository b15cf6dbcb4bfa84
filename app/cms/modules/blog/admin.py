from __future__ import annotations

import math
import re

from flask import jsonify, request

from app.cms.content import ContentType, slug_available
from app.cms.content_admin import build_blueprint
from app.cms.db import db_session
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField
from app.cms.modules.blog.models import BlogPost
from app.cms.rbac import require_permission
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, StudioConfig, StudioField

_TAGS = re.compile(r"<[^>]+>")
WORDS_PER_MINUTE = 200


def estimate_read_time(html: str | None) -> int:
    words = len(_TAGS.sub(" ", html or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def prepare_post(s, post: BlogPost, payload: dict, user, creating: bool) -> None:
    if creating and post.author_id is None:
        post.author_id = user.id
    if not payload.get("read_time") and ("content" in payload or post.read_time is None):
        post.read_time = estimate_read_time(post.content)


def _extras(p: BlogPost) -> dict:
    return {"author_name": p.author.name if p.author else None}


BLOG = ContentType(
    key="blog",
    model=BlogPost,
    entity_type="blog_post",
    label="Post",
    plural="Posts",
    fields=(
        "title",
        "slug",
        "excerpt",
        "content",
        "cover_image",
        "category",
        "tags",
        "read_time",
        "author_id",
        "meta_title",
        "meta_description",
        "focus_keywords",
        "published_at",
        "status",
    ),
    required=("title",),
    title_field="title",
    slug_policy="suffix",
    order_by=(BlogPost.created_at.desc(),),
    query_filters={"status": "status", "category": "category"},
    revisions=True,
    content_field="content",
    prepare=prepare_post,
    extras=_extras,
    list_url="/blog",
    listing=ListingConfig(
        title_field="title",
        columns=(
            Column("category", "Category", badge=True),
            Column("author_name", "Author"),
            Column("read_time", "Read time"),
            Column("published_at", "Published"),
        ),
        filters=(ListingFilter("category", "category", "All categories"),),
        quick_edit_fields=(
            QuickEditField("title", "Title"),
            QuickEditField("slug", "Slug"),
            QuickEditField("category", "Category"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        image_field="cover_image",
        search_fields=("slug", "excerpt", "tags", "focus_keywords"),
    ),
    studio=StudioConfig(
        cpt="blog",
        label="Post",
        api="/api/blog",
        edit_base="/blog/edit/",
        list_url="/blog",
        view_base="/blog/",
        placeholder="Add title",
        title_field="title",
        content_field="content",
        permalink_prefix="/blog/",
        revisions=True,
        field_rows=(
            (
                StudioField("category", "Category", flex=1),
                StudioField("tags", "Tags", placeholder="knee, recovery", flex=2),
                StudioField("read_time", "Read time (min)", type="number", width="130px"),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("excerpt", "Excerpt", type="textarea", rows=3, flex=2),
                StudioField("cover_image", "Cover image", type="image", flex=1),
            ),
            (StudioField("focus_keywords", "Focus keywords", flex=1),),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(BLOG)


@bp.get("/api/blog-slug-check/<slug>")
@require_permission("content.view")
def blog_slug_check(slug: str):
    s = db_session()
    return jsonify(slug_available(s, BLOG, slug, request.args.get("exclude", type=int)))
