from __future__ import annotations

from app.cms.constants import FORM_TYPES, SUBMISSION_STATUSES
from app.cms.content import ContentType
from app.cms.content_admin import build_blueprint
from app.cms.listing import Column, ListingConfig, ListingFilter, QuickEditField, Tab
from app.cms.modules.submissions.models import Submission


def _extras(sub: Submission) -> dict:
    return {"assignee_name": sub.assignee.name if sub.assignee else None}


_STATUS_LABELS = {"new": "New", "in_progress": "In progress", "responded": "Responded", "closed": "Closed"}

SUBMISSIONS = ContentType(
    key="submissions",
    model=Submission,
    entity_type="submission",
    label="Submission",
    plural="Submissions",
    fields=("status", "notes", "assigned_to"),
    title_field="name",
    slug_field=None,
    statuses=SUBMISSION_STATUSES,
    default_status="new",
    order_by=(Submission.created_at.desc(),),
    query_filters={"status": "status", "type": "form_type"},
    bulk_statuses={s: s for s in SUBMISSION_STATUSES},
    allow_create=False,
    extras=_extras,
    list_url="/submissions",
    nav_group="Inbox",
    view_permission="submissions.view",
    edit_permission="submissions.edit",
    delete_permission="submissions.delete",
    listing=ListingConfig(
        title_field="name",
        columns=(
            Column("form_type", "Form", badge=True),
            Column("email", "Email"),
            Column("phone", "Phone"),
            Column("country", "Country"),
            Column("treatment", "Treatment"),
            Column("assignee_name", "Assigned to"),
        ),
        filters=(ListingFilter("type", "form_type", "All forms", options=tuple((f, f.title()) for f in FORM_TYPES)),),
        quick_edit_fields=(
            QuickEditField("status", "Status", type="select", options=SUBMISSION_STATUSES),
            QuickEditField("notes", "Notes"),
        ),
        base_tabs=(Tab("all", "All"),) + tuple(Tab(s, _STATUS_LABELS[s]) for s in SUBMISSION_STATUSES),
        search_fields=("email", "phone", "message", "country", "treatment"),
    ),
)

bp = build_blueprint(SUBMISSIONS)
