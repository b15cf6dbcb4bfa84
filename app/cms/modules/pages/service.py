from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.cms.audit import record_event
from app.cms.constants import FIELD_TYPES
from app.cms.errors import ValidationError
from app.cms.modules.pages.models import PageContent, StaticPage
from app.cms.utils import parse_bool

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.models import User

SETTINGS_PAGE = "site"
SETTINGS_SECTION = "settings"
MAINTENANCE_KEY = "maintenance_mode"
MAINTENANCE_MESSAGE_KEY = "maintenance_message"


def prepare_static_page(s: "Session", page: StaticPage, payload: dict, user: "User", creating: bool) -> None:
    page.updated_by = user.id


def list_page_content(s: "Session", page: str | None = None) -> list[PageContent]:
    q = s.query(PageContent)
    if page:
        q = q.filter(PageContent.page == page)
    return q.order_by(PageContent.page, PageContent.section, PageContent.field_key).all()


def _stringify(value: Any, field_type: str) -> str | None:
    if value is None:
        return None
    if field_type == "json" and not isinstance(value, str):
        return json.dumps(value)
    return str(value)


def upsert_page_content(s: "Session", items: Any, user: "User | None") -> list[PageContent]:
    """
    Insert or update (page, section, field_key) blocks.
    Accepts a list of dicts or {"items": [...]}.
    """
    if isinstance(items, dict):
        items = items.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("No content items supplied")

    saved: list[PageContent] = []
    now = datetime.utcnow()
    for raw in items:
        if not isinstance(raw, dict):
            raise ValidationError("Each item must be an object")
        page = (raw.get("page") or "").strip()
        section = (raw.get("section") or "").strip()
        key = (raw.get("field_key") or "").strip()
        if not page or not section or not key:
            raise ValidationError("page, section and field_key are required")
        field_type = (raw.get("field_type") or "text").strip()
        if field_type not in FIELD_TYPES:
            raise ValidationError(f"Invalid field_type. Must be one of: {', '.join(FIELD_TYPES)}")

        row = (
            s.query(PageContent)
            .filter(PageContent.page == page, PageContent.section == section, PageContent.field_key == key)
            .one_or_none()
        )
        if row is None:
            row = PageContent(page=page, section=section, field_key=key)
            s.add(row)
        row.field_value = _stringify(raw.get("field_value"), field_type)
        row.field_type = field_type
        row.updated_by = user.id if user else None
        row.updated_at = now
        saved.append(row)
    s.flush()

    record_event(
        s,
        actor=user,
        action="update",
        entity_type="page_content",
        details=f"Updated {len(saved)} content field(s)",
        metadata={"keys": [f"{r.page}.{r.section}.{r.field_key}" for r in saved]},
    )
    return saved


def get_settings(s: "Session") -> dict[str, str | None]:
    rows = s.query(PageContent).filter(PageContent.page == SETTINGS_PAGE, PageContent.section == SETTINGS_SECTION).all()
    return {r.field_key: r.field_value for r in rows}


def save_settings(s: "Session", values: dict, user: "User") -> dict[str, str | None]:
    if not isinstance(values, dict) or not values:
        raise ValidationError("No settings supplied")
    items = [
        {
            "page": SETTINGS_PAGE,
            "section": SETTINGS_SECTION,
            "field_key": key,
            "field_value": value,
            "field_type": "json" if isinstance(value, (dict, list)) else "text",
        }
        for key, value in values.items()
        if key != "csrf_token"
    ]
    upsert_page_content(s, items, user)
    return get_settings(s)


def maintenance_status(s: "Session") -> dict:
    settings = get_settings(s)
    return {
        "maintenance": parse_bool(settings.get(MAINTENANCE_KEY)),
        "message": settings.get(MAINTENANCE_MESSAGE_KEY) or "",
    }


def set_maintenance(s: "Session", enabled: bool, user: "User", message: str | None = None) -> dict:
    values: dict[str, Any] = {MAINTENANCE_KEY: "true" if enabled else "false"}
    if message is not None:
        values[MAINTENANCE_MESSAGE_KEY] = message
    save_settings(s, values, user)
    record_event(
        s,
        actor=user,
        action="maintenance_on" if enabled else "maintenance_off",
        entity_type="settings",
        details="Maintenance mode enabled" if enabled else "Maintenance mode disabled",
    )
    return maintenance_status(s)
