from __future__ import annotations

from flask import g, jsonify, render_template, request

from app.cms.constants import PAGE_TYPES
from app.cms.content import ContentType
from app.cms.content_admin import build_blueprint, request_payload
from app.cms.db import db_session
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField
from app.cms.modules.pages.models import StaticPage
from app.cms.modules.pages.service import (
    get_settings,
    list_page_content,
    maintenance_status,
    prepare_static_page,
    save_settings,
    set_maintenance,
    upsert_page_content,
)
from app.cms.rbac import require_permission
from app.cms.studio import SEO_ROW, STATUS_OPTIONS, StudioConfig, StudioField
from app.cms.utils import parse_bool

_PAGE_TYPE_OPTIONS = tuple((p, p.title()) for p in PAGE_TYPES)

STATIC_PAGES = ContentType(
    key="static-pages",
    model=StaticPage,
    entity_type="static_page",
    label="Page",
    plural="Pages",
    fields=(
        "title",
        "slug",
        "page_type",
        "content",
        "hero_title",
        "hero_description",
        "meta_title",
        "meta_description",
        "status",
    ),
    required=("title",),
    title_field="title",
    default_status="published",
    choices={"page_type": PAGE_TYPES},
    order_by=(StaticPage.title.asc(),),
    query_filters={"status": "status", "page_type": "page_type"},
    revisions=True,
    content_field="content",
    prepare=prepare_static_page,
    list_url="/pages",
    nav_group="Site",
    edit_permission="pages.edit",
    listing=ListingConfig(
        title_field="title",
        columns=(
            Column("page_type", "Type", badge=True),
            Column("hero_title", "Hero title"),
        ),
        filters=(ListingFilter("page_type", "page_type", "All types", options=_PAGE_TYPE_OPTIONS),),
        quick_edit_fields=(
            QuickEditField("title", "Title"),
            QuickEditField("slug", "Slug"),
            QuickEditField("status", "Status", type="select", options=("draft", "published", "archived")),
        ),
        default_sort="name",
        default_dir="asc",
        search_fields=("slug", "hero_title", "hero_description"),
    ),
    studio=StudioConfig(
        cpt="page",
        label="Page",
        api="/api/static-pages",
        edit_base="/pages/edit/",
        list_url="/pages",
        placeholder="Page title",
        title_field="title",
        content_field="content",
        permalink_prefix="/",
        revisions=True,
        field_rows=(
            (
                StudioField("page_type", "Type", type="select", options=_PAGE_TYPE_OPTIONS, flex=1),
                StudioField("status", "Status", type="select", options=STATUS_OPTIONS, flex=1),
            ),
            (
                StudioField("hero_title", "Hero title", flex=1),
                StudioField("hero_description", "Hero description", type="textarea", rows=2, flex=2),
            ),
            SEO_ROW,
        ),
    ),
)

bp = build_blueprint(STATIC_PAGES)


# ---------- Page content blocks ----------
@bp.get("/api/page-content")
@require_permission("content.view")
def page_content_get():
    s = db_session()
    rows = list_page_content(s, (request.args.get("page") or "").strip() or None)
    return jsonify([r.to_dict() for r in rows])


@bp.put("/api/page-content")
@require_permission("pages.edit")
def page_content_put():
    s = db_session()
    data = request.get_json(silent=True)
    rows = upsert_page_content(s, data, g.current_user)
    s.commit()
    return jsonify({"success": True, "count": len(rows)})


# ---------- Site settings ----------
@bp.get("/settings")
@require_permission("settings.manage")
def settings_page():
    s = db_session()
    return render_template("admin/settings.html", settings=get_settings(s), maintenance=maintenance_status(s))


@bp.get("/api/settings")
@require_permission("dashboard.view")
def settings_get():
    s = db_session()
    return jsonify(get_settings(s))


@bp.put("/api/settings")
@require_permission("settings.manage")
def settings_put():
    s = db_session()
    settings = save_settings(s, request_payload(), g.current_user)
    s.commit()
    return jsonify({"success": True, "settings": settings})


# ---------- Maintenance mode ----------
@bp.get("/api/maintenance/status")
@require_permission("dashboard.view")
def maintenance_get():
    s = db_session()
    return jsonify(maintenance_status(s))


@bp.put("/api/maintenance/toggle")
@require_permission("settings.manage")
def maintenance_toggle():
    s = db_session()
    payload = request_payload()
    if "enabled" in payload:
        enabled = parse_bool(payload.get("enabled"))
    else:
        enabled = not maintenance_status(s)["maintenance"]
    status = set_maintenance(s, enabled, g.current_user, payload.get("message"))
    s.commit()
    return jsonify({"success": True, **status})
