"""
Exceptions raised by services and the handlers that turn them into responses.

API routes (`/api/...`) always answer `{"error": message}`; page routes get the
HTML error templates.
"""
from __future__ import annotations

import logging

from flask import Flask, g, jsonify, render_template, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, payload: dict | None = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ConflictError(ApiError):
    """Delete blocked by linked rows; payload lists them."""

    status_code = 409


def _is_api() -> bool:
    return request.path.startswith("/api/")


def _integrity_message(exc: IntegrityError) -> str:
    text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    if "unique" in text or "duplicate" in text:
        return "A record with this value already exists"
    if "foreign key" in text:
        return "Referenced record does not exist or is still in use"
    if "check" in text:
        return "Invalid value"
    return "Invalid data"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):
        if _is_api():
            return jsonify({"error": e.message, **e.payload}), e.status_code
        return render_template("errors/400.html", message=e.message), e.status_code

    @app.errorhandler(IntegrityError)
    def _integrity_error(e: IntegrityError):
        s = getattr(g, "db_session", None)
        if s is not None:
            s.rollback()
        logger.warning("Integrity error (request_id=%s): %s", getattr(g, "request_id", None), e.orig)
        message = _integrity_message(e)
        if _is_api():
            return jsonify({"error": message}), 400
        return render_template("errors/400.html", message=message), 400

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        if _is_api():
            message = e.description or e.name
            if e.code == 413:
                message = "File too large"
            elif e.code == 429:
                message = "Too many requests, please try again later."
            return jsonify({"error": message}), e.code
        if e.code == 403:
            missing = getattr(g, "missing_permission", None)
            if missing:
                app.logger.warning("Forbidden: missing_permission=%s request_id=%s", missing, getattr(g, "request_id", None))
            return render_template("errors/403.html", missing_permission=missing), 403
        if e.code == 404:
            return render_template("errors/404.html"), 404
        if e.code in (400, 413):
            return render_template("errors/400.html", message=e.description), e.code
        return e

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        if isinstance(e, HTTPException):
            return _http_error(e)
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        s = getattr(g, "db_session", None)
        if s is not None:
            s.rollback()
        if _is_api():
            return jsonify({"error": "Server error"}), 500
        return render_template("errors/500.html"), 500
