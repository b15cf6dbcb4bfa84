import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.cms.models import ActivityLog, User


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: int | None = None,
    details: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> ActivityLog:
    """
    Append-only activity log helper.
    """
    in_request = has_request_context()
    rid = request_id or (getattr(g, "request_id", None) if in_request else None)
    ev = ActivityLog(
        request_id=rid,
        user_id=actor.id if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
        client_ip=request.remote_addr if in_request else None,
    )
    s.add(ev)
    return ev
