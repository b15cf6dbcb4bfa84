from __future__ import annotations

from flask import g, jsonify

from app.cms.content import ContentType, serialize
from app.cms.content_admin import build_blueprint, request_payload
from app.cms.db import db_session
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField
from app.cms.modules.costs.models import TreatmentCost
from app.cms.modules.costs.service import prepare_cost, upsert_cost
from app.cms.rbac import require_permission


def _extras(c: TreatmentCost) -> dict:
    return {
        "display_name": c.display_name,
        "treatment_name": c.treatment.name if c.treatment else None,
        "destination_name": c.destination.name if c.destination else None,
    }


COSTS = ContentType(
    key="treatment-costs",
    model=TreatmentCost,
    entity_type="treatment_cost",
    label="Treatment cost",
    plural="Treatment costs",
    fields=(
        "treatment_id",
        "destination_id",
        "cost_min_usd",
        "cost_max_usd",
        "usa_cost",
        "cost_local",
        "includes",
        "hospital_stay",
        "notes",
        "status",
    ),
    required=("treatment_id", "destination_id"),
    title_field="display_name",
    slug_field=None,
    default_status="published",
    order_by=(TreatmentCost.treatment_id.asc(), TreatmentCost.destination_id.asc()),
    query_filters={"status": "status", "treatment_id": "treatment_id", "destination_id": "destination_id"},
    prepare=prepare_cost,
    extras=_extras,
    list_url="/treatment-costs",
    listing=ListingConfig(
        title_field="display_name",
        columns=(
            Column("treatment_name", "Treatment"),
            Column("destination_name", "Destination", badge=True),
            Column("cost_min_usd", "Min (USD)"),
            Column("cost_max_usd", "Max (USD)"),
            Column("usa_cost", "USA cost"),
        ),
        filters=(
            ListingFilter("treatment", "treatment_id", "All treatments", source="/api/treatments"),
            ListingFilter("destination", "destination_id", "All destinations", source="/api/destinations"),
        ),
        quick_edit_fields=(
            QuickEditField("cost_min_usd", "Min (USD)", type="number"),
            QuickEditField("cost_max_usd", "Max (USD)", type="number"),
            QuickEditField("usa_cost", "USA cost", type="number"),
            QuickEditField("hospital_stay", "Hospital stay"),
        ),
        default_sort="treatment_name",
        default_dir="asc",
        search_fields=("treatment_name", "destination_name", "notes"),
    ),
)

bp = build_blueprint(COSTS)


@bp.post("/api/treatment-costs/upsert")
@require_permission("content.edit")
def treatment_cost_upsert():
    s = db_session()
    cost, created = upsert_cost(s, COSTS, request_payload(), g.current_user)
    s.commit()
    return jsonify(serialize(COSTS, cost)), 201 if created else 200
