from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    jsonify,
    make_response,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy.orm import Session

from app.cms.audit import record_event
from app.cms.constants import AUTH_COOKIE
from app.cms.db import db_session
from app.cms.models import User
from app.cms.rbac import require_permission
from app.cms.security import decode_token, hash_password, issue_token, verify_password

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def load_current_user() -> None:
    """
    Loads g.current_user from the JWT in the auth cookie.
    Also assigns a per-request request_id (for activity/log correlation).
    g.auth_error carries the reason an API request is rejected.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    g.auth_error = None
    if request.path.startswith(("/static/", "/health", "/healthz", "/uploads/")):
        return

    token = request.cookies.get(AUTH_COOKIE)
    if not token:
        g.auth_error = "Not authenticated"
        return

    payload = decode_token(token)
    if not payload or not payload.get("id"):
        g.auth_error = "Invalid token"
        return

    s = db_session()
    user = s.get(User, int(payload["id"]))
    if not user or not user.is_active:
        g.auth_error = "Invalid token"
        return
    g.current_user = user


def authenticate(s: Session, email: str, password: str) -> User | None:
    """Check credentials; on success stamp last_login and log the login."""
    user = s.query(User).filter(User.email == email).one_or_none()
    if not user or not user.is_active or not verify_password(user.password_hash, password):
        record_event(
            s,
            actor=None,
            action="login_failed",
            entity_type="user",
            details="Invalid credentials",
            metadata={"email": email},
        )
        return None
    user.last_login = datetime.utcnow()
    record_event(s, actor=user, action="login", entity_type="user", entity_id=user.id, details=f"Logged in: {user.email}")
    return user


def ensure_default_admin(s: Session, email: str, password: str, name: str = "Super Admin") -> User | None:
    """
    Create the first super admin when the users table is empty.
    Returns the new user, or None when any user already exists.
    """
    if s.query(User.id).first() is not None:
        return None
    user = User(
        name=name,
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role="super_admin",
        is_active=True,
    )
    s.add(user)
    s.flush()
    return user


def _set_auth_cookie(resp, user: User):
    resp.set_cookie(
        AUTH_COOKIE,
        issue_token(user),
        max_age=int(current_app.config.get("JWT_EXPIRES_DAYS") or 7) * 24 * 3600,
        httponly=True,
        samesite="Strict",
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE")),
    )
    return resp


def _safe_next(nxt: str) -> str | None:
    # Only allow local paths to avoid open redirects.
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return None


@bp.get("/login")
def login_get():
    if getattr(g, "current_user", None):
        return redirect(url_for("admin.index"))
    nxt = (request.args.get("next") or "").strip()
    return render_template("auth/login.html", next=nxt)


@bp.post("/login")
def login_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    nxt = (request.form.get("next") or "").strip()
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        flash("Too many login attempts. Please wait 5 minutes.", "danger")
        return redirect(url_for("auth.login_get"))
    _record_attempt(ip)

    s = db_session()
    user = authenticate(s, email, password)
    s.commit()
    if not user:
        flash("Invalid credentials.", "danger")
        return redirect(url_for("auth.login_get", next=nxt or None))

    _login_attempts[ip].clear()
    resp = make_response(redirect(_safe_next(nxt) or url_for("admin.index")))
    return _set_auth_cookie(resp, user)


@bp.post("/api/auth/login")
def api_login():
    data = request.get_json(silent=True) or request.form
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    ip = request.remote_addr or "unknown"

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400
    if _check_rate_limit(ip):
        return jsonify({"error": "Too many login attempts. Please wait 5 minutes."}), 429
    _record_attempt(ip)

    s = db_session()
    user = authenticate(s, email, password)
    s.commit()
    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    _login_attempts[ip].clear()
    resp = make_response(jsonify({"success": True, "user": user.to_public()}))
    return _set_auth_cookie(resp, user)


@bp.get("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="logout", entity_type="user", entity_id=user.id)
        s.commit()
    resp = make_response(redirect(url_for("auth.login_get")))
    resp.delete_cookie(AUTH_COOKIE, samesite="Strict", httponly=True)
    return resp


@bp.get("/api/auth/me")
@require_permission("dashboard.view")
def api_me():
    return jsonify({"user": g.current_user.to_public()})
