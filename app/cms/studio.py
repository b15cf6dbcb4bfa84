"""
Studio engine: the rich content editor page.

Each content type declares a StudioConfig; `to_client()` is injected into
`studio.html` as `window.CPT_CONFIG` and drives `studio.js`.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StudioField:
    id: str
    label: str
    type: str = "text"  # text | number | select | textarea | checkbox | image | date
    placeholder: str = ""
    source: str | None = None  # API path for select options
    source_label: str = "name"
    options: tuple[tuple[str, str], ...] = ()
    width: str | None = None
    flex: int | None = None
    rows: int | None = None
    onchange: str | None = None  # "permalink" rebuilds the dynamic permalink

    def to_client(self) -> dict:
        out: dict = {"id": self.id, "label": self.label, "type": self.type}
        if self.placeholder:
            out["placeholder"] = self.placeholder
        if self.source:
            out["source"] = self.source
            out["sourceLabel"] = self.source_label
        if self.options:
            out["options"] = [{"value": v, "label": lbl} for v, lbl in self.options]
        if self.width:
            out["width"] = self.width
        if self.flex:
            out["flex"] = self.flex
        if self.rows:
            out["rows"] = self.rows
        if self.onchange:
            out["onchange"] = self.onchange
        return out


@dataclass(frozen=True)
class PermalinkDynamic:
    """Permalink prefix built from the selected option of another field."""

    field: str
    source: str
    slug_key: str = "slug"
    pattern: str = "/{value}/"


@dataclass(frozen=True)
class StudioConfig:
    cpt: str
    label: str
    api: str
    edit_base: str
    list_url: str
    placeholder: str = "Enter title"
    title_field: str = "name"
    content_field: str | None = "long_description"
    rich_text: bool = True
    view_base: str | None = None
    permalink_prefix: str | None = None
    permalink_dynamic: PermalinkDynamic | None = None
    field_rows: tuple[tuple[StudioField, ...], ...] = field(default_factory=tuple)
    revisions: bool = False
    autosave_seconds: int = 15

    def to_client(self, item_id: int | None = None) -> dict:
        out = {
            "cpt": self.cpt,
            "label": self.label,
            "api": self.api,
            "editBase": self.edit_base,
            "listUrl": self.list_url,
            "viewBase": self.view_base,
            "placeholder": self.placeholder,
            "titleField": self.title_field,
            "contentField": self.content_field,
            "noQuill": not self.rich_text,
            "permalinkPrefix": self.permalink_prefix,
            "fieldRows": [[f.to_client() for f in row] for row in self.field_rows],
            "revisions": self.revisions,
            "autosaveSeconds": self.autosave_seconds,
            "itemId": item_id,
        }
        if self.permalink_dynamic:
            pd = self.permalink_dynamic
            out["permalinkDynamic"] = {
                "field": pd.field,
                "source": pd.source,
                "slugKey": pd.slug_key,
                "pattern": pd.pattern,
            }
        return out


SEO_ROW = (
    StudioField("meta_title", "Meta title", placeholder="SEO title", flex=1),
    StudioField("meta_description", "Meta description", type="textarea", rows=2, flex=2),
)

STATUS_OPTIONS = (("draft", "Draft"), ("published", "Published"), ("archived", "Archived"))
