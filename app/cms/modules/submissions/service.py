from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.cms.audit import record_event
from app.cms.constants import FORM_TYPES
from app.cms.errors import ValidationError
from app.cms.modules.submissions.models import Submission

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_COLUMNS = ("name", "email", "phone", "country", "treatment", "message")
_MAX_FIELD = 5000


def create_submission(s: "Session", payload: dict[str, Any]) -> Submission:
    """
    Store a form posted from the public website.
    Known fields go to columns; anything else is kept in form_data.
    """
    form_type = (str(payload.get("form_type") or payload.get("type") or "")).strip()
    if form_type not in FORM_TYPES:
        raise ValidationError(f"Invalid form type. Must be one of: {', '.join(FORM_TYPES)}")

    values: dict[str, Any] = {}
    for name in _COLUMNS:
        raw = payload.get(name)
        if raw is None:
            continue
        text = str(raw).strip()[:_MAX_FIELD]
        values[name] = text or None

    email = values.get("email")
    if email and not _EMAIL.match(email):
        raise ValidationError("Invalid email address")
    if not email and not values.get("phone"):
        raise ValidationError("Email or phone is required")

    nested = payload.get("form_data")
    extra: dict[str, Any] = dict(nested) if isinstance(nested, dict) else {}
    for k, v in payload.items():
        if k in _COLUMNS or k in ("form_type", "type", "csrf_token", "form_data") or k.startswith("_"):
            continue
        extra[k] = v
    now = datetime.utcnow()
    sub = Submission(
        form_type=form_type,
        form_data=extra or None,
        status="new",
        created_at=now,
        updated_at=now,
        **values,
    )
    s.add(sub)
    s.flush()
    record_event(
        s,
        actor=None,
        action="submission",
        entity_type="submission",
        entity_id=sub.id,
        details=f"New {form_type} submission from {sub.name or sub.email or sub.phone}",
    )
    logger.info("Stored %s submission id=%s", form_type, sub.id)
    return sub
