from __future__ import annotations

import json
import re
import unicodedata
from datetime import date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")
_YOUTUBE_ID = re.compile(r"(?:youtu\.be/|v=|/embed/|/shorts/)([A-Za-z0-9_-]{11})")

MAX_SLUG_SUFFIX = 50


def slugify(value: str | None, max_length: int = 200) -> str:
    """Lowercase ASCII slug: 'Knee Replacement (TKR)' -> 'knee-replacement-tkr'."""
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    text = _SLUG_STRIP.sub("-", text.lower()).strip("-")
    return text[:max_length].rstrip("-")


def slug_taken(s: Session, model, slug: str, exclude_id: int | None = None) -> bool:
    q = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        q = q.where(model.id != exclude_id)
    return s.execute(q.limit(1)).first() is not None


def unique_slug(s: Session, model, base: str, exclude_id: int | None = None) -> str:
    """
    Return `base` or the first free `base-2` .. `base-50`.
    Past the limit the last candidate is returned and the UNIQUE constraint decides.
    """
    candidate = base
    n = 2
    while slug_taken(s, model, candidate, exclude_id) and n <= MAX_SLUG_SUFFIX:
        candidate = f"{base}-{n}"
        n += 1
    return candidate


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_date(value: Any) -> date | None:
    """Parse YYYY-MM-DD (or a full ISO timestamp)."""
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1]
    return datetime.fromisoformat(text)


def parse_list(value: Any) -> list:
    """Accept a JSON list, a JSON-encoded string, or comma/newline separated text."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v not in (None, "")]
    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError:
            loaded = None
        if isinstance(loaded, list):
            return loaded
    return [part.strip() for part in re.split(r"[,\n]", text) if part.strip()]


def youtube_id(url: str | None) -> str | None:
    if not url:
        return None
    m = _YOUTUBE_ID.search(url)
    return m.group(1) if m else None


def isoformat(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
