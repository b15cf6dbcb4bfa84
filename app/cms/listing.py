"""
Listing engine: tabbed, searchable, filterable, sortable, paginated content
lists driven by a declarative ListingConfig.

The same config feeds the server-rendered listing page and the
`/api/<entity>/listing` endpoint; `listing.js` only handles interaction.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

PER_PAGE_OPTIONS = (20, 50, 100)
DEFAULT_PER_PAGE = 20


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    badge: bool = False
    sortable: bool = True


@dataclass(frozen=True)
class ListingFilter:
    """Dropdown filter: keeps items whose `field` equals the selected value."""

    id: str
    field: str
    label: str
    source: str | None = None  # API path the dropdown options are loaded from
    options: tuple[tuple[str, str], ...] = ()  # static (value, label) choices


@dataclass(frozen=True)
class QuickEditField:
    key: str
    label: str
    type: str = "text"  # text | number | select | checkbox
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class Tab:
    key: str
    label: str
    match: Callable[[Mapping[str, Any]], bool] | None = None

    def matches(self, item: Mapping[str, Any]) -> bool:
        if self.key == "all":
            return True
        if self.match is not None:
            return bool(self.match(item))
        return item.get("status") == self.key


BASE_TABS = (
    Tab("all", "All"),
    Tab("published", "Published"),
    Tab("draft", "Drafts"),
)


@dataclass(frozen=True)
class ListingConfig:
    title_field: str = "name"
    columns: tuple[Column, ...] = ()
    filters: tuple[ListingFilter, ...] = ()
    quick_edit_fields: tuple[QuickEditField, ...] = ()
    extra_tabs: tuple[Tab, ...] = ()
    base_tabs: tuple[Tab, ...] = BASE_TABS
    image_field: str | None = None
    default_sort: str = "date"
    default_dir: str = "desc"
    search_fields: tuple[str, ...] = ("slug", "description")

    @property
    def tabs(self) -> tuple[Tab, ...]:
        return self.base_tabs + self.extra_tabs

    def to_client(self) -> dict:
        return {
            "titleField": self.title_field,
            "columns": [{"key": c.key, "label": c.label, "badge": c.badge, "sortable": c.sortable} for c in self.columns],
            "filters": [
                {
                    "id": f.id,
                    "field": f.field,
                    "label": f.label,
                    "source": f.source,
                    "options": [{"value": v, "label": lbl} for v, lbl in f.options],
                }
                for f in self.filters
            ],
            "quickEditFields": [
                {"key": q.key, "label": q.label, "type": q.type, "options": list(q.options)} for q in self.quick_edit_fields
            ],
            "tabs": [{"key": t.key, "label": t.label} for t in self.tabs],
            "imageField": self.image_field,
            "defaultSort": self.default_sort,
            "defaultDir": self.default_dir,
            "perPageOptions": list(PER_PAGE_OPTIONS),
        }


@dataclass
class ListingPage:
    items: list[dict]
    total: int
    page: int
    pages: int
    per_page: int
    sort: str
    direction: str
    tab: str
    counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "per_page": self.per_page,
            "sort": self.sort,
            "dir": self.direction,
            "tab": self.tab,
            "counts": self.counts,
        }


def next_sort(current_sort: str, current_dir: str, clicked: str) -> tuple[str, str]:
    """Header click: same column toggles direction; a new column starts desc for date, asc otherwise."""
    if clicked == current_sort:
        return clicked, "desc" if current_dir == "asc" else "asc"
    return clicked, "desc" if clicked == "date" else "asc"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def _search_keys(cfg: ListingConfig) -> list[str]:
    keys = ["name", "title", cfg.title_field, *cfg.search_fields, *(c.key for c in cfg.columns)]
    seen: list[str] = []
    for k in keys:
        if k not in seen:
            seen.append(k)
    return seen


def matches_search(item: Mapping[str, Any], q: str, cfg: ListingConfig) -> bool:
    needle = q.strip().lower()
    if not needle:
        return True
    return any(needle in _text(item.get(k)).lower() for k in _search_keys(cfg))


def _sort_value(item: Mapping[str, Any], sort: str, cfg: ListingConfig):
    if sort == "name":
        value = item.get(cfg.title_field) or item.get("name") or item.get("title")
    elif sort == "date":
        value = item.get("updated_at") or item.get("created_at")
    else:
        value = item.get(sort)
    if value is None:
        return (1, "")
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (0, str(value).lower())


def _resolve_sort(cfg: ListingConfig, sort: str | None, direction: str | None) -> tuple[str, str]:
    valid = {"name", "status", "date"} | {c.key for c in cfg.columns if c.sortable}
    sort = sort if sort in valid else cfg.default_sort
    if direction not in ("asc", "desc"):
        direction = cfg.default_dir if sort == cfg.default_sort else ("desc" if sort == "date" else "asc")
    return sort, direction


def apply_listing(
    items: Sequence[Mapping[str, Any]],
    cfg: ListingConfig,
    *,
    tab: str | None = None,
    q: str | None = None,
    filters: Mapping[str, str] | None = None,
    sort: str | None = None,
    direction: str | None = None,
    page: int | str | None = 1,
    per_page: int | str | None = DEFAULT_PER_PAGE,
) -> ListingPage:
    tabs = {t.key: t for t in cfg.tabs}
    tab_key = tab if tab in tabs else "all"
    counts = {t.key: sum(1 for i in items if t.matches(i)) for t in cfg.tabs}

    rows = [i for i in items if tabs[tab_key].matches(i)]
    if q:
        rows = [i for i in rows if matches_search(i, q, cfg)]
    for f in cfg.filters:
        wanted = (filters or {}).get(f.id)
        if wanted not in (None, ""):
            rows = [i for i in rows if _text(i.get(f.field)) == str(wanted)]

    sort_key, sort_dir = _resolve_sort(cfg, sort, direction)
    # None-valued rows always sink to the bottom regardless of direction.
    present = [i for i in rows if _sort_value(i, sort_key, cfg)[0] == 0]
    missing = [i for i in rows if _sort_value(i, sort_key, cfg)[0] == 1]
    present.sort(key=lambda i: _sort_value(i, sort_key, cfg)[1], reverse=sort_dir == "desc")
    rows = present + missing

    try:
        size = int(per_page or DEFAULT_PER_PAGE)
    except (TypeError, ValueError):
        size = DEFAULT_PER_PAGE
    if size not in PER_PAGE_OPTIONS:
        size = DEFAULT_PER_PAGE
    total = len(rows)
    pages = max(1, math.ceil(total / size))
    try:
        current = int(page or 1)
    except (TypeError, ValueError):
        current = 1
    current = min(max(current, 1), pages)
    start = (current - 1) * size

    return ListingPage(
        items=[dict(i) for i in rows[start : start + size]],
        total=total,
        page=current,
        pages=pages,
        per_page=size,
        sort=sort_key,
        direction=sort_dir,
        tab=tab_key,
        counts=counts,
    )
