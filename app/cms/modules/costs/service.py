from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.cms.audit import record_event
from app.cms.errors import ValidationError
from app.cms.modules.costs.models import TreatmentCost

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.content import ContentType
    from app.cms.models import User


def _existing(s: "Session", treatment_id: int | None, destination_id: int | None) -> TreatmentCost | None:
    return (
        s.query(TreatmentCost)
        .filter(TreatmentCost.treatment_id == treatment_id, TreatmentCost.destination_id == destination_id)
        .one_or_none()
    )


def prepare_cost(s: "Session", cost: TreatmentCost, payload: dict, user: "User", creating: bool) -> None:
    """One row per (treatment, destination) pair; min must not exceed max."""
    other = _existing(s, cost.treatment_id, cost.destination_id)
    if other is not None and other is not cost:
        raise ValidationError("A cost for this treatment and destination already exists")
    if cost.cost_min_usd is not None and cost.cost_max_usd is not None and cost.cost_min_usd > cost.cost_max_usd:
        raise ValidationError("Minimum cost cannot exceed maximum cost")


def upsert_cost(s: "Session", ct: "ContentType", payload: dict, user: "User") -> tuple[TreatmentCost, bool]:
    """
    Insert or update the cost for (treatment_id, destination_id).
    On update, fields sent as null/blank keep their stored values.
    Returns (row, created).
    """
    from app.cms.content import clean_payload, create_item

    keys = clean_payload(s, ct, {k: payload.get(k) for k in ("treatment_id", "destination_id")}, creating=True)
    cost = _existing(s, keys["treatment_id"], keys["destination_id"])
    if cost is None:
        return create_item(s, ct, payload, user), True

    values = clean_payload(s, ct, {k: v for k, v in payload.items() if v not in (None, "")}, creating=False)
    for name, value in values.items():
        if value is not None:
            setattr(cost, name, value)
    prepare_cost(s, cost, payload, user, False)
    cost.updated_at = datetime.utcnow()
    s.flush()
    s.refresh(cost)
    record_event(
        s,
        actor=user,
        action="update",
        entity_type=ct.entity_type,
        entity_id=cost.id,
        details=f"Updated: {cost.display_name}",
    )
    return cost, False
