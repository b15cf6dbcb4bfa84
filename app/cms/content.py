"""
Content-type registry and the generic CRUD service shared by every
manageable entity (specialties, treatments, doctors, blog posts, ...).

A ContentType says *what* an entity looks like (model, editable fields,
slug policy, delete guards, listing/studio configs); the functions below
implement create / update / delete / bulk once for all of them.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, Numeric, String, delete, func, select

from app.cms.audit import record_event
from app.cms.constants import CONTENT_STATUSES, MAX_REVISIONS
from app.cms.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.cms.listing import ListingConfig
from app.cms.models import Revision
from app.cms.rbac import user_has_permission
from app.cms.studio import StudioConfig
from app.cms.utils import isoformat, parse_bool, parse_date, parse_datetime, parse_list, slug_taken, slugify, unique_slug

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.models import User

logger = logging.getLogger(__name__)

PUBLISH_STATUSES = {"publish": "published", "draft": "draft", "archive": "archived"}


@dataclass(frozen=True)
class Dependency:
    """Rows of `model` whose `column` points at the item block its deletion."""

    label: str  # e.g. "doctor(s)"
    model: Any
    column: str


@dataclass(frozen=True)
class Junction:
    """Link rows removed together with the item."""

    model: Any
    column: str


@dataclass
class ContentType:
    key: str  # URL segment and blueprint name, e.g. "treatments"
    model: Any
    entity_type: str  # activity log / revisions key, e.g. "treatment"
    label: str
    plural: str
    fields: tuple[str, ...]
    required: tuple[str, ...] = ()
    title_field: str = "name"
    slug_field: str | None = "slug"
    slug_policy: str = "reject"  # reject | suffix
    slug_source: Callable[[Any], str] | None = None
    statuses: tuple[str, ...] = CONTENT_STATUSES
    default_status: str = "draft"
    choices: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    order_by: tuple = ()
    joins: tuple = ()
    query_filters: Mapping[str, str] = field(default_factory=lambda: {"status": "status"})
    dependencies: tuple[Dependency, ...] = ()
    junctions: tuple[Junction, ...] = ()
    bulk_statuses: Mapping[str, str] = field(default_factory=lambda: dict(PUBLISH_STATUSES))
    revisions: bool = False
    allow_create: bool = True
    content_field: str | None = None
    prepare: Callable[["Session", Any, dict, "User", bool], None] | None = None
    extras: Callable[[Any], dict] | None = None
    listing: ListingConfig | None = None
    studio: StudioConfig | None = None
    list_url: str | None = None  # admin page, e.g. "/treatments"
    nav_group: str = "Content"
    view_permission: str = "content.view"
    edit_permission: str = "content.edit"
    delete_permission: str = "content.delete"

    @property
    def api_path(self) -> str:
        return f"/api/{self.key}"

    @property
    def bulk_actions(self) -> tuple[str, ...]:
        return tuple(self.bulk_statuses) + ("delete",)

    def title_of(self, obj: Any) -> str:
        return str(getattr(obj, self.title_field, None) or f"#{obj.id}")


REGISTRY: dict[str, ContentType] = {}


def register(ct: ContentType) -> ContentType:
    REGISTRY[ct.key] = ct
    return ct


# ---------- Serialization ----------
def _plain(value: Any) -> Any:
    value = isoformat(value)
    if hasattr(value, "is_finite") and hasattr(value, "as_tuple"):  # Decimal
        return float(value)
    return value


def serialize(ct: ContentType, obj: Any) -> dict:
    data = {c.key: _plain(getattr(obj, c.key)) for c in obj.__mapper__.column_attrs}
    if ct.extras:
        data.update(ct.extras(obj))
    return data


# ---------- Coercion / validation ----------
def _column(ct: ContentType, name: str):
    return ct.model.__table__.columns[name]


def coerce_value(col, raw: Any) -> Any:
    """Convert a JSON/form value into the Python type of `col`. Raises ValueError."""
    t = col.type
    if isinstance(t, JSON):
        if raw in (None, ""):
            return [] if col.info.get("list") else None
        if col.info.get("list"):
            return parse_list(raw)
        return raw
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip() and not isinstance(t, String):
        return None
    if isinstance(t, Boolean):
        return parse_bool(raw)
    if isinstance(t, Integer):
        if isinstance(raw, bool):
            return int(raw)
        return int(float(raw)) if isinstance(raw, str) and "." in raw else int(raw)
    if isinstance(t, (Float, Numeric)):
        return float(raw)
    if isinstance(t, DateTime):
        return parse_datetime(raw)
    if isinstance(t, Date):
        return parse_date(raw)
    if isinstance(t, String):
        text = str(raw)
        if not col.info.get("raw"):
            text = text.strip()
        if not text and col.nullable:
            return None
        return text
    return raw


def _check_reference(s: "Session", col, value: Any) -> bool:
    for fk in col.foreign_keys:
        target = fk.column
        if s.execute(select(target).where(target == value).limit(1)).first() is None:
            return False
    return True


def clean_payload(s: "Session", ct: ContentType, payload: Mapping[str, Any], *, creating: bool) -> dict:
    """
    Coerce and validate the editable fields present in `payload`.
    Raises ValidationError listing every problem found.
    """
    errors: list[str] = []
    values: dict[str, Any] = {}
    for name in ct.fields:
        if name not in payload:
            continue
        col = _column(ct, name)
        try:
            value = coerce_value(col, payload[name])
        except (TypeError, ValueError):
            errors.append(f"Invalid value for {name}")
            continue
        if value is None and not col.nullable:
            # Blank non-nullable fields fall back to their defaults on create.
            if name in ct.required:
                errors.append(f"{name.replace('_', ' ').capitalize()} is required")
            continue
        values[name] = value

    for name in ct.required:
        present = values.get(name)
        if creating and (present is None or present == "" or present == []):
            msg = f"{name.replace('_', ' ').capitalize()} is required"
            if msg not in errors:
                errors.append(msg)
        elif not creating and name in payload and (present is None or present == ""):
            msg = f"{name.replace('_', ' ').capitalize()} is required"
            if msg not in errors:
                errors.append(msg)

    status = values.get("status")
    if "status" in values and status not in ct.statuses:
        errors.append(f"Invalid status. Must be one of: {', '.join(ct.statuses)}")

    for name, allowed in ct.choices.items():
        if values.get(name) is not None and values[name] not in allowed:
            errors.append(f"Invalid {name}. Must be one of: {', '.join(allowed)}")

    for name, value in values.items():
        col = _column(ct, name)
        if value is not None and col.foreign_keys and not _check_reference(s, col, value):
            errors.append(f"Unknown {name}: {value}")

    if errors:
        raise ValidationError("; ".join(errors))
    return values


def _apply_slug(s: "Session", ct: ContentType, obj: Any, payload: Mapping[str, Any], *, creating: bool) -> None:
    if not ct.slug_field:
        return
    if not creating and ct.slug_field not in payload:
        return
    source = ct.slug_source(obj) if ct.slug_source else getattr(obj, ct.title_field, None)
    base = slugify(payload.get(ct.slug_field)) or slugify(source)
    if not base:
        raise ValidationError("Slug is required")
    exclude = None if creating else obj.id
    if ct.slug_policy == "suffix":
        base = unique_slug(s, ct.model, base, exclude)
    elif slug_taken(s, ct.model, base, exclude):
        raise ValidationError(f"A {ct.label.lower()} with this slug already exists")
    setattr(obj, ct.slug_field, base)


def _stamp_published(obj: Any) -> None:
    if getattr(obj, "status", None) == "published" and hasattr(obj, "published_at") and obj.published_at is None:
        obj.published_at = datetime.utcnow()


# ---------- Reads ----------
def list_items(s: "Session", ct: ContentType, filters: Mapping[str, Any] | None = None) -> list:
    q = s.query(ct.model)
    for rel in ct.joins:
        q = q.outerjoin(rel)
    for param, column in ct.query_filters.items():
        value = (filters or {}).get(param)
        if value in (None, ""):
            continue
        try:
            value = coerce_value(_column(ct, column), value)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValidationError(f"Invalid {param}") from e
        q = q.filter(getattr(ct.model, column) == value)
    if ct.order_by:
        q = q.order_by(*ct.order_by)
    return q.all()


def get_item(s: "Session", ct: ContentType, item_id: int) -> Any:
    obj = s.get(ct.model, item_id)
    if obj is None:
        raise NotFoundError(f"{ct.label} not found")
    return obj


def slug_available(s: "Session", ct: ContentType, slug: str, exclude_id: int | None = None) -> dict:
    clean = slugify(slug)
    existing = None
    if clean:
        row = s.query(ct.model).filter(getattr(ct.model, ct.slug_field) == clean)
        if exclude_id is not None:
            row = row.filter(ct.model.id != exclude_id)
        found = row.first()
        if found is not None:
            existing = {"id": found.id, "title": ct.title_of(found)}
    return {"slug": clean, "available": bool(clean) and existing is None, "existing": existing}


# ---------- Writes ----------
def create_item(s: "Session", ct: ContentType, payload: Mapping[str, Any], user: "User") -> Any:
    values = clean_payload(s, ct, payload, creating=True)
    now = datetime.utcnow()
    obj = ct.model(**values)
    if "status" in ct.fields and getattr(obj, "status", None) is None:
        obj.status = ct.default_status
    if hasattr(obj, "created_at"):
        obj.created_at = now
    if hasattr(obj, "updated_at"):
        obj.updated_at = now
    if ct.prepare:
        ct.prepare(s, obj, dict(payload), user, True)
    _apply_slug(s, ct, obj, payload, creating=True)
    _stamp_published(obj)
    s.add(obj)
    s.flush()
    s.refresh(obj)

    record_event(
        s,
        actor=user,
        action="create",
        entity_type=ct.entity_type,
        entity_id=obj.id,
        details=f"Created: {ct.title_of(obj)}",
    )
    return obj


def save_revision(s: "Session", ct: ContentType, obj: Any, user: "User | None", revision_type: str = "manual") -> Revision:
    """Snapshot `obj` as it is now; keep only the newest MAX_REVISIONS per item."""
    skip = {ct.title_field, ct.content_field}
    meta = {name: _plain(getattr(obj, name)) for name in ct.fields if name not in skip}
    rev = Revision(
        entity_type=ct.entity_type,
        entity_id=obj.id,
        title=getattr(obj, ct.title_field, None),
        content=getattr(obj, ct.content_field, None) if ct.content_field else None,
        meta_json=meta,
        user_id=user.id if user else None,
        revision_type=revision_type,
        created_at=datetime.utcnow(),
    )
    s.add(rev)
    s.flush()

    stale = (
        s.execute(
            select(Revision.id)
            .where(Revision.entity_type == ct.entity_type, Revision.entity_id == obj.id)
            .order_by(Revision.created_at.desc(), Revision.id.desc())
            .offset(MAX_REVISIONS)
        )
        .scalars()
        .all()
    )
    if stale:
        s.execute(delete(Revision).where(Revision.id.in_(stale)))
    return rev


def update_item(
    s: "Session",
    ct: ContentType,
    obj: Any,
    payload: Mapping[str, Any],
    user: "User",
    *,
    autosave: bool = False,
) -> Any:
    """Partial update: only keys present in `payload` change."""
    values = clean_payload(s, ct, payload, creating=False)
    if ct.revisions:
        save_revision(s, ct, obj, user, "autosave" if autosave else "manual")

    changes = {}
    for name, value in values.items():
        old = getattr(obj, name)
        if old != value:
            changes[name] = {"old": _plain(old), "new": _plain(value)}
            setattr(obj, name, value)
    if ct.prepare:
        ct.prepare(s, obj, dict(payload), user, False)
    _apply_slug(s, ct, obj, payload, creating=False)
    _stamp_published(obj)
    if hasattr(obj, "updated_at"):
        obj.updated_at = datetime.utcnow()
    s.flush()
    s.refresh(obj)

    if not autosave:
        record_event(
            s,
            actor=user,
            action="update",
            entity_type=ct.entity_type,
            entity_id=obj.id,
            details=f"Updated: {ct.title_of(obj)}",
            metadata={"changes": sorted(changes)} if changes else None,
        )
    return obj


def find_dependents(s: "Session", ct: ContentType, item_id: int) -> list[str]:
    found = []
    for dep in ct.dependencies:
        n = s.execute(
            select(func.count()).select_from(dep.model).where(getattr(dep.model, dep.column) == item_id)
        ).scalar_one()
        if n:
            found.append(f"{n} {dep.label}")
    return found


def _clear_junctions(s: "Session", ct: ContentType, item_id: int) -> None:
    for j in ct.junctions:
        s.execute(delete(j.model).where(getattr(j.model, j.column) == item_id))


def delete_item(s: "Session", ct: ContentType, obj: Any, user: "User") -> None:
    deps = find_dependents(s, ct, obj.id)
    if deps:
        raise ConflictError(
            f"Cannot delete: linked to {', '.join(deps)}. Remove them first.",
            payload={"dependencies": deps},
        )
    title = ct.title_of(obj)
    item_id = obj.id
    _clear_junctions(s, ct, item_id)
    s.delete(obj)
    s.flush()
    record_event(s, actor=user, action="delete", entity_type=ct.entity_type, entity_id=item_id, details=f"Deleted: {title}")


def bulk_action(s: "Session", ct: ContentType, ids: Any, action: str, user: "User") -> int:
    """Apply a status change or delete to many items; returns the number affected."""
    if not isinstance(ids, (list, tuple)) or not ids:
        raise ValidationError("No items selected")
    try:
        id_list = sorted({int(i) for i in ids})
    except (TypeError, ValueError):
        raise ValidationError("Invalid item ids")
    if action not in ct.bulk_actions:
        raise ValidationError("Invalid action")
    if action == "delete" and not user_has_permission(user, ct.delete_permission):
        raise ForbiddenError("Only admins can delete")

    objs = s.query(ct.model).filter(ct.model.id.in_(id_list)).all()
    if action == "delete":
        blocked = []
        for obj in objs:
            deps = find_dependents(s, ct, obj.id)
            if deps:
                blocked.append({"id": obj.id, "title": ct.title_of(obj), "dependencies": deps})
        if blocked:
            summary = "; ".join(f"{b['title']} ({', '.join(b['dependencies'])})" for b in blocked)
            raise ConflictError(f"Cannot delete: {summary}. Remove them first.", payload={"blocked": blocked})
        for obj in objs:
            _clear_junctions(s, ct, obj.id)
            s.delete(obj)
    else:
        new_status = ct.bulk_statuses[action]
        now = datetime.utcnow()
        for obj in objs:
            obj.status = new_status
            _stamp_published(obj)
            if hasattr(obj, "updated_at"):
                obj.updated_at = now
    s.flush()

    record_event(
        s,
        actor=user,
        action=f"bulk_{action}",
        entity_type=ct.entity_type,
        details=f"Bulk {action}: {len(objs)} {ct.plural.lower()}",
        metadata={"ids": [o.id for o in objs]} if action != "delete" else {"ids": id_list},
    )
    logger.info("bulk %s on %s: %s item(s) by user %s", action, ct.key, len(objs), user.id)
    return len(objs)


def replace_links(s: "Session", link_model: Any, owner_column: str, owner_id: int, target_column: str, target_ids: Any, target_model: Any) -> list[int]:
    """
    Replace every link row of one owner with the given target ids (junction tables).
    Unknown target ids are rejected.
    """
    if target_ids is None:
        target_ids = []
    if not isinstance(target_ids, (list, tuple)):
        raise ValidationError("Expected a list of ids")
    try:
        wanted = sorted({int(t) for t in target_ids})
    except (TypeError, ValueError):
        raise ValidationError("Invalid ids")
    if wanted:
        known = set(s.execute(select(target_model.id).where(target_model.id.in_(wanted))).scalars())
        unknown = [t for t in wanted if t not in known]
        if unknown:
            raise ValidationError(f"Unknown ids: {', '.join(str(u) for u in unknown)}")
    s.execute(delete(link_model).where(getattr(link_model, owner_column) == owner_id))
    for t in wanted:
        s.add(link_model(**{owner_column: owner_id, target_column: t}))
    s.flush()
    return wanted
