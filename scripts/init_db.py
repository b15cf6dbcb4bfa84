import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts._db_utils import script_session
from app.cms.auth import ensure_default_admin
from app.cms.models import Destination, PageContent, Specialty, Treatment, TreatmentCost
from app.cms.modules.pages.service import (
    MAINTENANCE_KEY,
    MAINTENANCE_MESSAGE_KEY,
    SETTINGS_PAGE,
    SETTINGS_SECTION,
)

DEFAULT_SETTINGS = {
    "site_name": "Medical Tourism",
    MAINTENANCE_KEY: "false",
    MAINTENANCE_MESSAGE_KEY: "We are updating the site. Please check back shortly.",
}

SAMPLE_SPECIALTIES = [
    {"name": "Cardiology", "slug": "cardiology", "icon": "❤️", "category": "super_specialty", "display_order": 1},
    {"name": "Orthopedics", "slug": "orthopedics", "icon": "🦴", "category": "surgical", "display_order": 2},
    {"name": "Oncology", "slug": "oncology", "icon": "🎗️", "category": "oncology", "display_order": 3},
]

SAMPLE_DESTINATIONS = [
    {"name": "India", "slug": "india", "flag": "🇮🇳", "avg_savings": "60-90%", "currency": "INR", "display_order": 1},
    {"name": "Thailand", "slug": "thailand", "flag": "🇹🇭", "avg_savings": "50-70%", "currency": "THB", "display_order": 2},
]

SAMPLE_TREATMENTS = [
    {"name": "Knee Replacement", "slug": "knee-replacement", "specialty": "orthopedics", "duration": "2-3 hours"},
    {"name": "Heart Bypass Surgery", "slug": "heart-bypass-surgery", "specialty": "cardiology", "duration": "4-6 hours"},
]

SAMPLE_COSTS = [
    ("knee-replacement", "india", 4000, 7000, 35000),
    ("knee-replacement", "thailand", 9000, 13000, 35000),
    ("heart-bypass-surgery", "india", 5000, 9000, 120000),
]


def _ensure_settings(s) -> int:
    created = 0
    for key, value in DEFAULT_SETTINGS.items():
        row = (
            s.query(PageContent)
            .filter(
                PageContent.page == SETTINGS_PAGE,
                PageContent.section == SETTINGS_SECTION,
                PageContent.field_key == key,
            )
            .one_or_none()
        )
        if not row:
            s.add(
                PageContent(
                    page=SETTINGS_PAGE,
                    section=SETTINGS_SECTION,
                    field_key=key,
                    field_value=value,
                    field_type="text",
                    updated_at=datetime.utcnow(),
                )
            )
            created += 1
    return created


def _seed_sample_content(s) -> None:
    """Published starter rows so a fresh install has something to list. Skips slugs that exist."""
    now = datetime.utcnow()
    specialties = {}
    for row in SAMPLE_SPECIALTIES:
        sp = s.query(Specialty).filter(Specialty.slug == row["slug"]).one_or_none()
        if not sp:
            sp = Specialty(**row, status="published", created_at=now, updated_at=now)
            s.add(sp)
        specialties[row["slug"]] = sp

    destinations = {}
    for row in SAMPLE_DESTINATIONS:
        d = s.query(Destination).filter(Destination.slug == row["slug"]).one_or_none()
        if not d:
            d = Destination(**row, status="published", created_at=now, updated_at=now)
            s.add(d)
        destinations[row["slug"]] = d
    s.flush()

    treatments = {}
    for row in SAMPLE_TREATMENTS:
        t = s.query(Treatment).filter(Treatment.slug == row["slug"]).one_or_none()
        if not t:
            t = Treatment(
                name=row["name"],
                slug=row["slug"],
                specialty_id=specialties[row["specialty"]].id,
                duration=row["duration"],
                status="published",
                created_at=now,
                updated_at=now,
            )
            s.add(t)
        treatments[row["slug"]] = t
    s.flush()

    for sp in specialties.values():
        sp.treatment_count = s.query(Treatment).filter(Treatment.specialty_id == sp.id).count()

    for t_slug, d_slug, low, high, usa in SAMPLE_COSTS:
        t, d = treatments[t_slug], destinations[d_slug]
        exists = (
            s.query(TreatmentCost.id)
            .filter(TreatmentCost.treatment_id == t.id, TreatmentCost.destination_id == d.id)
            .first()
        )
        if not exists:
            s.add(
                TreatmentCost(
                    treatment_id=t.id,
                    destination_id=d.id,
                    cost_min_usd=low,
                    cost_max_usd=high,
                    usa_cost=usa,
                    created_at=now,
                    updated_at=now,
                )
            )


def seed_only(*, database_url: str | None = None, sample: bool = False) -> None:
    """
    Seed the first super admin and default site settings in an idempotent way.
    Does NOT touch existing users.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@example.com").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///cms.db").strip()

    # Direct engine/session so this can run in release without importing app.wsgi.
    with script_session(db_url) as s:
        admin = ensure_default_admin(s, admin_email, admin_password)
        created = _ensure_settings(s)
        if sample:
            _seed_sample_content(s)

    print("Initialized database (seed_only).")
    if admin:
        print(f"Admin email: {admin_email}")
        print("Admin password: (from ADMIN_PASSWORD)")
    else:
        print("Users already exist; admin not created.")
    print(f"Default settings created: {created}")
    if sample:
        print("Sample content seeded.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the CMS database.")
    parser.add_argument("--sample", action="store_true", help="also add sample specialties, destinations and costs")
    args = parser.parse_args()
    seed_only(database_url=None, sample=args.sample)


if __name__ == "__main__":
    main()
