import logging

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from app.cms.content_admin import request_payload
from app.cms.db import db_session
from app.cms.modules.pages.service import maintenance_status
from app.cms.modules.submissions.service import create_submission

bp = Blueprint("routes", __name__)
logger = logging.getLogger(__name__)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for k8s/DO probes. No DB access, minimal overhead.
    """
    return "ok", 200


@bp.post("/api/public/submit")
def public_submit():
    """Forms on the public website post here (no auth, CORS open)."""
    s = db_session()
    sub = create_submission(s, request_payload())
    s.commit()
    return jsonify({"success": True, "id": sub.id}), 201


@bp.get("/api/public/maintenance")
def public_maintenance():
    # The public site polls this; a broken DB must never take it into maintenance.
    try:
        status = maintenance_status(db_session())
    except SQLAlchemyError:
        logger.exception("Maintenance status lookup failed")
        db_session().rollback()
        return jsonify({"maintenance": False, "message": ""})
    return jsonify({"maintenance": status["maintenance"], "message": status.get("message") or ""})
