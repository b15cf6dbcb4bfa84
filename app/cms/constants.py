"""
Central constants for the CMS application.
"""
from __future__ import annotations

ROLES = ("super_admin", "editor", "viewer")
ROLE_LABELS = {
    "super_admin": "Super Admin",
    "editor": "Editor",
    "viewer": "Viewer",
}

CONTENT_STATUSES = ("draft", "published", "archived")

SPECIALTY_CATEGORIES = ("surgical", "medical", "oncology", "super_specialty")

PAGE_TYPES = ("page", "legal", "landing", "form")

FORM_TYPES = ("quote", "consultation", "contact", "partner", "career")
SUBMISSION_STATUSES = ("new", "in_progress", "responded", "closed")

FIELD_TYPES = ("text", "number", "html", "image", "json")

REVISION_TYPES = ("manual", "autosave")
MAX_REVISIONS = 30

# Media library
ALLOWED_MEDIA_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp", "svg", "pdf"})
RASTER_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp"})
MAX_MEDIA_BYTES = 10 * 1024 * 1024
MAX_IMPORT_BYTES = 20 * 1024 * 1024
IMPORT_EXTENSIONS = frozenset({"docx", "txt", "md"})

# name -> (width, height, crop). height None keeps the aspect ratio.
IMAGE_SIZES = {
    "thumbnail": (150, 150, True),
    "medium": (400, None, False),
    "medium_large": (768, None, False),
    "large": (1200, None, False),
}

AUTH_COOKIE = "token"
