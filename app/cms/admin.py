import json
import math
import re

from flask import Blueprint, g, jsonify, render_template, request
from sqlalchemy import func

from app.cms.audit import record_event
from app.cms.constants import MAX_REVISIONS, ROLE_LABELS, ROLES
from app.cms.content import REGISTRY
from app.cms.content_admin import request_payload
from app.cms.db import db_session
from app.cms.errors import NotFoundError, ValidationError
from app.cms.models import ActivityLog, Revision, User
from app.cms.modules.pages.service import get_settings
from app.cms.modules.submissions.models import Submission
from app.cms.rbac import require_permission
from app.cms.security import MIN_PASSWORD_LENGTH, hash_password
from app.cms.utils import isoformat, parse_bool

bp = Blueprint("admin", __name__)

# Tables shown on the dashboard cards; /stats-full adds every registered type.
DASHBOARD_TABLES = ("blog_posts", "testimonials", "hospitals", "doctors")
ACTIVITY_PAGE_SIZE = 50


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _is_valid_email(email: str) -> bool:
    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    return bool(re.match(pattern, email))


# ---------- Dashboard ----------
def _count(s, model) -> int:
    return s.query(func.count(model.id)).scalar() or 0


def dashboard_stats(s, *, full: bool = False) -> dict[str, int]:
    stats: dict[str, int] = {}
    for ct in REGISTRY.values():
        table = ct.model.__tablename__
        if ct.model is Submission:
            continue
        if full or table in DASHBOARD_TABLES:
            stats[table] = _count(s, ct.model)
    stats["total_submissions"] = _count(s, Submission)
    stats["new_submissions"] = s.query(func.count(Submission.id)).filter(Submission.status == "new").scalar() or 0
    return stats


def _activity_dict(ev: ActivityLog) -> dict:
    return {
        "id": ev.id,
        "created_at": isoformat(ev.created_at),
        "user_id": ev.user_id,
        "user_name": ev.user.name if ev.user else None,
        "user_email": ev.user.email if ev.user else None,
        "user_role": ev.user.role if ev.user else None,
        "action": ev.action,
        "entity_type": ev.entity_type,
        "entity_id": ev.entity_id,
        "details": ev.details,
        "metadata": json.loads(ev.metadata_json) if ev.metadata_json else None,
    }


def activity_page(
    s,
    *,
    page: int = 1,
    limit: int = ACTIVITY_PAGE_SIZE,
    user_id: int | None = None,
    action: str | None = None,
    entity_type: str | None = None,
) -> dict:
    page = max(page or 1, 1)
    limit = min(max(limit or ACTIVITY_PAGE_SIZE, 1), 200)
    q = s.query(ActivityLog)
    if user_id:
        q = q.filter(ActivityLog.user_id == user_id)
    if action:
        q = q.filter(ActivityLog.action == action)
    if entity_type:
        q = q.filter(ActivityLog.entity_type == entity_type)
    total = q.count()
    events = (
        q.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "activities": [_activity_dict(ev) for ev in events],
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if total else 0,
    }


def _activity_args() -> dict:
    args = request.args
    return {
        "page": args.get("page", default=1, type=int),
        "limit": args.get("limit", default=ACTIVITY_PAGE_SIZE, type=int),
        "user_id": args.get("user_id", type=int),
        "action": (args.get("action") or "").strip() or None,
        "entity_type": (args.get("entity_type") or "").strip() or None,
    }


@bp.get("/")
@require_permission("dashboard.view")
def index():
    s = db_session()
    recent = activity_page(s, limit=10)["activities"]
    return render_template("admin/dashboard.html", stats=dashboard_stats(s, full=True), recent=recent)


@bp.get("/api/dashboard/init")
@require_permission("dashboard.view")
def dashboard_init():
    s = db_session()
    return jsonify(
        {
            "user": _current_user().to_public(),
            "stats": dashboard_stats(s),
            "settings": get_settings(s),
        }
    )


@bp.get("/api/dashboard/stats")
@require_permission("dashboard.view")
def dashboard_stats_api():
    return jsonify(dashboard_stats(db_session()))


@bp.get("/api/dashboard/stats-full")
@require_permission("dashboard.view")
def dashboard_stats_full():
    return jsonify(dashboard_stats(db_session(), full=True))


@bp.get("/api/dashboard/activity")
@require_permission("dashboard.view")
def dashboard_activity():
    return jsonify(activity_page(db_session(), **_activity_args()))


@bp.get("/activity")
@require_permission("dashboard.view")
def activity_list():
    s = db_session()
    data = activity_page(s, **_activity_args())
    return render_template(
        "admin/activity.html",
        data=data,
        action=(request.args.get("action") or "").strip(),
        entity_type=(request.args.get("entity_type") or "").strip(),
    )


# ---------- Users ----------
@bp.get("/users")
@require_permission("users.manage")
def users_page():
    s = db_session()
    users = s.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return render_template("admin/users.html", users=users, roles=ROLES, role_labels=ROLE_LABELS)


@bp.get("/api/users")
@require_permission("users.manage")
def users_list():
    s = db_session()
    users = s.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([u.to_public() for u in users])


def _clean_role(value) -> str:
    role = (value or "").strip()
    if role not in ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")
    return role


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


@bp.post("/api/users")
@require_permission("users.manage")
def users_create():
    s = db_session()
    u = _current_user()
    data = request_payload()

    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    role = _clean_role(data.get("role") or "editor")
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if not _is_valid_email(email):
        raise ValidationError("Invalid email format")
    _check_password(password)
    if s.query(User.id).filter(func.lower(User.email) == email).first():
        raise ValidationError("Email already exists")

    new_user = User(name=name, email=email, password_hash=hash_password(password), role=role, is_active=True)
    s.add(new_user)
    s.flush()
    record_event(
        s,
        actor=u,
        action="create",
        entity_type="user",
        entity_id=new_user.id,
        details=f"Created user: {email}",
        metadata={"role": role},
    )
    s.commit()
    return jsonify(new_user.to_public()), 201


@bp.put("/api/users/<int:user_id>")
@require_permission("users.manage")
def users_update(user_id: int):
    s = db_session()
    u = _current_user()
    user = s.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    data = request_payload()

    before = {"role": user.role, "is_active": user.is_active}
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required")
        user.name = name
    if "email" in data:
        email = (data.get("email") or "").strip().lower()
        if not _is_valid_email(email):
            raise ValidationError("Invalid email format")
        taken = s.query(User.id).filter(func.lower(User.email) == email, User.id != user.id).first()
        if taken:
            raise ValidationError("Email already exists")
        user.email = email
    if "role" in data:
        role = _clean_role(data.get("role"))
        if user.id == u.id and role != user.role:
            raise ValidationError("You cannot change your own role")
        user.role = role
    if "is_active" in data:
        is_active = parse_bool(data.get("is_active"))
        if user.id == u.id and not is_active:
            raise ValidationError("You cannot deactivate your own account")
        user.is_active = is_active
    password = data.get("password") or ""
    if password:
        _check_password(password)
        user.password_hash = hash_password(password)

    record_event(
        s,
        actor=u,
        action="update",
        entity_type="user",
        entity_id=user.id,
        details=f"Updated user: {user.email}",
        metadata={
            "before": before,
            "after": {"role": user.role, "is_active": user.is_active},
            "password_changed": bool(password),
        },
    )
    s.commit()
    return jsonify(user.to_public())


# ---------- Revisions ----------
def _revision_dict(rev: Revision, *, full: bool = False) -> dict:
    out = {
        "id": rev.id,
        "entity_type": rev.entity_type,
        "entity_id": rev.entity_id,
        "title": rev.title,
        "revision_type": rev.revision_type,
        "user_id": rev.user_id,
        "user_name": rev.user.name if rev.user else None,
        "created_at": isoformat(rev.created_at),
    }
    if full:
        out["content"] = rev.content
        out["meta"] = rev.meta_json or {}
    return out


@bp.get("/api/revisions/<entity_type>/<int:entity_id>")
@require_permission("content.view")
def revisions_list(entity_type: str, entity_id: int):
    s = db_session()
    revs = (
        s.query(Revision)
        .filter(Revision.entity_type == entity_type, Revision.entity_id == entity_id)
        .order_by(Revision.created_at.desc(), Revision.id.desc())
        .limit(MAX_REVISIONS)
        .all()
    )
    return jsonify([_revision_dict(r) for r in revs])


@bp.get("/api/revisions/detail/<int:revision_id>")
@require_permission("content.view")
def revision_detail(revision_id: int):
    s = db_session()
    rev = s.get(Revision, revision_id)
    if not rev:
        raise NotFoundError("Revision not found")
    return jsonify(_revision_dict(rev, full=True))
