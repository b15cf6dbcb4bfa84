"""
Blueprint factory: JSON API plus listing and studio pages for one ContentType.

    /api/<key>                       GET list, POST create
    /api/<key>/listing               GET filtered/sorted/paginated page
    /api/<key>/<id>                  GET, PUT, DELETE
    /api/<key>/bulk                  POST {ids, action}
    /api/<key>/slug-check/<slug>     GET {available, existing}
    <list_url>                       listing page
    <list_url>/new, /edit/<id>       studio pages
"""
from __future__ import annotations

from flask import Blueprint, abort, g, jsonify, render_template, request

from app.cms.content import (
    ContentType,
    bulk_action,
    create_item,
    delete_item,
    get_item,
    list_items,
    register,
    serialize,
    slug_available,
    update_item,
)
from app.cms.db import db_session
from app.cms.errors import NotFoundError
from app.cms.listing import ListingConfig, apply_listing
from app.cms.models import User
from app.cms.rbac import require_permission


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def request_payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def listing_args(cfg: ListingConfig) -> dict:
    args = request.args
    return {
        "tab": args.get("tab"),
        "q": args.get("q"),
        "filters": {f.id: args.get(f.id) for f in cfg.filters},
        "sort": args.get("sort"),
        "direction": args.get("dir"),
        "page": args.get("page"),
        "per_page": args.get("per_page"),
    }


def build_blueprint(ct: ContentType) -> Blueprint:
    register(ct)
    bp = Blueprint(ct.key, __name__)
    listing_cfg = ct.listing or ListingConfig(title_field=ct.title_field)

    @bp.get(ct.api_path)
    @require_permission(ct.view_permission)
    def api_list():
        s = db_session()
        items = list_items(s, ct, request.args)
        return jsonify([serialize(ct, o) for o in items])

    @bp.get(f"{ct.api_path}/listing")
    @require_permission(ct.view_permission)
    def api_listing():
        s = db_session()
        rows = [serialize(ct, o) for o in list_items(s, ct)]
        page = apply_listing(rows, listing_cfg, **listing_args(listing_cfg))
        return jsonify(page.to_dict())

    @bp.get(f"{ct.api_path}/<int:item_id>")
    @require_permission(ct.view_permission)
    def api_get(item_id: int):
        s = db_session()
        return jsonify(serialize(ct, get_item(s, ct, item_id)))

    if ct.allow_create:

        @bp.post(ct.api_path)
        @require_permission(ct.edit_permission)
        def api_create():
            s = db_session()
            obj = create_item(s, ct, request_payload(), _current_user())
            s.commit()
            return jsonify(serialize(ct, obj)), 201

    @bp.put(f"{ct.api_path}/<int:item_id>")
    @require_permission(ct.edit_permission)
    def api_update(item_id: int):
        s = db_session()
        obj = get_item(s, ct, item_id)
        payload = request_payload()
        autosave = bool(payload.pop("_autoSave", False))
        obj = update_item(s, ct, obj, payload, _current_user(), autosave=autosave)
        s.commit()
        return jsonify(serialize(ct, obj))

    @bp.delete(f"{ct.api_path}/<int:item_id>")
    @require_permission(ct.delete_permission)
    def api_delete(item_id: int):
        s = db_session()
        delete_item(s, ct, get_item(s, ct, item_id), _current_user())
        s.commit()
        return jsonify({"success": True})

    @bp.post(f"{ct.api_path}/bulk")
    @require_permission(ct.edit_permission)
    def api_bulk():
        s = db_session()
        payload = request_payload()
        count = bulk_action(s, ct, payload.get("ids"), (payload.get("action") or "").strip(), _current_user())
        s.commit()
        return jsonify({"success": True, "count": count})

    if ct.slug_field:

        @bp.get(f"{ct.api_path}/slug-check/<slug>")
        @require_permission(ct.view_permission)
        def api_slug_check(slug: str):
            s = db_session()
            exclude = request.args.get("exclude", type=int)
            return jsonify(slug_available(s, ct, slug, exclude))

    if ct.list_url:

        @bp.get(ct.list_url)
        @require_permission(ct.view_permission)
        def listing_page():
            s = db_session()
            rows = [serialize(ct, o) for o in list_items(s, ct)]
            page = apply_listing(rows, listing_cfg, **listing_args(listing_cfg))
            return render_template(
                "admin/listing.html",
                ct=ct,
                cfg=listing_cfg,
                page=page,
                q=request.args.get("q") or "",
                filter_values={f.id: request.args.get(f.id) or "" for f in listing_cfg.filters},
            )

    if ct.list_url and ct.studio and ct.allow_create:

        @bp.get(f"{ct.list_url}/new")
        @require_permission(ct.edit_permission)
        def studio_new():
            return render_template("admin/studio.html", ct=ct, cpt=ct.studio.to_client(), item=None)

        @bp.get(f"{ct.list_url}/edit/<int:item_id>")
        @require_permission(ct.edit_permission)
        def studio_edit(item_id: int):
            s = db_session()
            try:
                obj = get_item(s, ct, item_id)
            except NotFoundError:
                abort(404)
            return render_template(
                "admin/studio.html",
                ct=ct,
                cpt=ct.studio.to_client(item_id),
                item=serialize(ct, obj),
            )

    return bp
