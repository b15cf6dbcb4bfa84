from __future__ import annotations

import mimetypes
import os
from zipfile import BadZipFile

from docx.opc.exceptions import PackageNotFoundError
from flask import Blueprint, abort, current_app, g, jsonify, render_template, request, send_file

from app.cms.audit import record_event
from app.cms.constants import IMPORT_EXTENSIONS, MAX_IMPORT_BYTES
from app.cms.content_admin import request_payload
from app.cms.db import db_session
from app.cms.errors import NotFoundError, ValidationError
from app.cms.modules.media.docx_import import ImportResult, docx_to_html, docx_to_text, image_extension, text_to_html
from app.cms.modules.media.models import Media
from app.cms.modules.media.service import (
    delete_media,
    list_media,
    optimize_all,
    optimize_media,
    update_media,
    upload_media,
)
from app.cms.rbac import require_permission
from app.cms.storage import StorageError, storage_from_config

bp = Blueprint("media", __name__)


def _get_media(s, media_id: int) -> Media:
    media = s.get(Media, media_id)
    if not media:
        raise NotFoundError("Media not found")
    return media


def _uploaded_file() -> tuple[bytes, str]:
    f = request.files.get("file")
    if not f or not f.filename:
        raise ValidationError("No file uploaded")
    return f.read(), f.filename


@bp.get("/media")
@require_permission("media.view")
def media_page():
    s = db_session()
    items = list_media(s, q=request.args.get("q"), folder=request.args.get("folder"), kind=request.args.get("kind"))
    return render_template("admin/media.html", items=items, q=request.args.get("q") or "")


@bp.get("/api/media")
@require_permission("media.view")
def media_list():
    s = db_session()
    items = list_media(s, q=request.args.get("q"), folder=request.args.get("folder"), kind=request.args.get("kind"))
    return jsonify([m.to_dict() for m in items])


@bp.get("/api/media/<int:media_id>")
@require_permission("media.view")
def media_get(media_id: int):
    s = db_session()
    return jsonify(_get_media(s, media_id).to_dict())


@bp.post("/api/media/upload")
@require_permission("media.upload")
def media_upload():
    s = db_session()
    data, filename = _uploaded_file()
    storage = storage_from_config(current_app.config)
    media = upload_media(
        s,
        storage,
        data=data,
        original_name=filename,
        user=g.current_user,
        folder=request.form.get("folder"),
    )
    s.commit()
    return jsonify(media.to_dict()), 201


@bp.put("/api/media/<int:media_id>")
@require_permission("media.upload")
def media_update(media_id: int):
    s = db_session()
    media = update_media(s, _get_media(s, media_id), request_payload(), g.current_user)
    s.commit()
    return jsonify(media.to_dict())


@bp.delete("/api/media/<int:media_id>")
@require_permission("media.delete")
def media_delete(media_id: int):
    s = db_session()
    storage = storage_from_config(current_app.config)
    delete_media(s, storage, _get_media(s, media_id), g.current_user)
    s.commit()
    return jsonify({"success": True})


@bp.post("/api/media/<int:media_id>/optimize")
@require_permission("media.optimize")
def media_optimize(media_id: int):
    s = db_session()
    media = _get_media(s, media_id)
    storage = storage_from_config(current_app.config)
    try:
        done = optimize_media(s, storage, media)
    except FileNotFoundError as e:
        raise ValidationError("Original file is missing") from e
    if not done:
        raise ValidationError("Only raster images can be optimized")
    s.commit()
    return jsonify({"success": True, "media": media.to_dict()})


@bp.post("/api/media/optimize-all")
@require_permission("media.optimize")
def media_optimize_all():
    s = db_session()
    result = optimize_all(s, storage_from_config(current_app.config), g.current_user)
    s.commit()
    return jsonify({"success": True, **result})


# ---------- Document import ----------
def _import_file() -> tuple[bytes, str, str]:
    data, filename = _uploaded_file()
    ext = os.path.splitext(filename)[1].lower().lstrip(".")
    if ext not in IMPORT_EXTENSIONS:
        raise ValidationError(f"Unsupported document type. Allowed: {', '.join(sorted(IMPORT_EXTENSIONS))}")
    if len(data) > MAX_IMPORT_BYTES:
        raise ValidationError(f"File too large. Maximum size is {MAX_IMPORT_BYTES // (1024 * 1024)}MB.")
    return data, filename, ext


@bp.post("/api/import/docx")
@require_permission("content.edit")
def import_docx():
    s = db_session()
    u = g.current_user
    data, filename, ext = _import_file()
    storage = storage_from_config(current_app.config)
    counter = {"n": 0}

    def save_image(blob: bytes, content_type: str) -> str:
        counter["n"] += 1
        base = os.path.splitext(filename)[0]
        name = f"docx-import-{base}-{counter['n']}.{image_extension(content_type)}"
        return upload_media(s, storage, data=blob, original_name=name, user=u).url

    if ext == "docx":
        try:
            result = docx_to_html(data, save_image)
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
            raise ValidationError("Could not read the document. Is it a valid .docx file?") from e
    else:
        text = data.decode("utf-8", errors="replace")
        result = ImportResult(html=text_to_html(text, markdown=(ext == "md")))

    record_event(
        s,
        actor=u,
        action="import",
        entity_type="media",
        details=f"Imported document: {filename}",
        metadata={"images": result.image_count},
    )
    s.commit()
    return jsonify(result.to_dict())


@bp.post("/api/import/docx-text")
@require_permission("content.edit")
def import_docx_text():
    data, _filename, ext = _import_file()
    if ext == "docx":
        try:
            text = docx_to_text(data)
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as e:
            raise ValidationError("Could not read the document. Is it a valid .docx file?") from e
    else:
        text = data.decode("utf-8", errors="replace")
    return jsonify({"text": text})


# ---------- File serving ----------
@bp.get("/uploads/<path:key>")
def serve_upload(key: str):
    storage = storage_from_config(current_app.config)
    try:
        fobj = storage.open(key)
    except (FileNotFoundError, StorageError, IsADirectoryError):
        abort(404)
    mimetype = "image/svg+xml" if key.lower().endswith(".svg") else mimetypes.guess_type(key)[0]
    return send_file(fobj, mimetype=mimetype or "application/octet-stream", max_age=60 * 60 * 24 * 30)
