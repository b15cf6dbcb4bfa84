from __future__ import annotations

import io
import logging
import mimetypes
import os
import re
from datetime import datetime
from typing import TYPE_CHECKING, Any

from PIL import Image, ImageOps, UnidentifiedImageError
from werkzeug.utils import secure_filename

from app.cms.audit import record_event
from app.cms.constants import ALLOWED_MEDIA_EXTENSIONS, IMAGE_SIZES, MAX_MEDIA_BYTES, RASTER_EXTENSIONS
from app.cms.errors import ValidationError
from app.cms.modules.media.models import Media

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.cms.models import User
    from app.cms.storage import Storage

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_PIL_FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP", "gif": "GIF"}
WEBP_QUALITY = 82
JPEG_QUALITY = 85


def media_url(key: str) -> str:
    return f"/uploads/{key}"


def split_filename(original: str) -> tuple[str, str]:
    """'My Photo (1).JPG' -> ('my-photo-1', 'jpg')"""
    name, ext = os.path.splitext(original or "")
    ext = ext.lower().lstrip(".")
    base = _NON_ALNUM.sub("-", secure_filename(name).lower()).strip("-")[:80].rstrip("-")
    return base or "file", ext


def title_from_filename(original: str) -> str:
    """'knee-replacement_after.jpg' -> 'Knee Replacement After'"""
    name = os.path.splitext(os.path.basename(original or ""))[0]
    words = re.sub(r"[-_]+", " ", name).split()
    return " ".join(w.capitalize() for w in words) or "Untitled"


def unique_base(s: "Session", storage: "Storage", prefix: str, base: str, ext: str) -> str:
    """First of base, base-1, base-2, ... whose original and .webp keys are both free."""
    candidate = base
    n = 1
    while True:
        keys = {f"{prefix}/{candidate}.{ext}", f"{prefix}/{candidate}.webp"}
        taken = any(storage.exists(k) for k in keys) or (
            s.query(Media.id).filter(Media.storage_key.in_(keys)).first() is not None
        )
        if not taken:
            return candidate
        candidate = f"{base}-{n}"
        n += 1


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    if fmt == "JPEG":
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        img.save(buf, fmt, quality=JPEG_QUALITY, optimize=True, progressive=True)
    elif fmt == "WEBP":
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() or img.mode == "P" else "RGB")
        img.save(buf, fmt, quality=WEBP_QUALITY, method=4)
    elif fmt == "PNG":
        img.save(buf, fmt, optimize=True)
    else:
        img.save(buf, fmt)
    return buf.getvalue()


def _resize(img: Image.Image, width: int, height: int | None, crop: bool) -> Image.Image | None:
    """None when the original already fits inside the target size."""
    w, h = img.size
    if crop:
        if w <= width and h <= (height or width):
            return None
        return ImageOps.fit(img, (width, height or width), Image.Resampling.LANCZOS)
    if w <= width:
        return None
    new_h = max(1, round(h * width / w))
    return img.resize((width, new_h), Image.Resampling.LANCZOS)


def build_image_sizes(storage: "Storage", prefix: str, base: str, ext: str, data: bytes) -> tuple[int, int, dict]:
    """
    Write resized copies (plus WebP variants) next to the original.
    Returns (width, height, sizes).
    """
    fmt = _PIL_FORMATS[ext]
    with Image.open(io.BytesIO(data)) as opened:
        opened.load()
        img = ImageOps.exif_transpose(opened)
    width, height = img.size
    sizes: dict[str, dict[str, Any]] = {}

    def _put(name: str, key: str, im: Image.Image, out_fmt: str, mime: str) -> None:
        storage.put_bytes(key, _encode(im, out_fmt), content_type=mime)
        sizes[name] = {"key": key, "url": media_url(key), "width": im.size[0], "height": im.size[1], "mime_type": mime}

    # Animated GIFs keep only the original; resizing would drop the frames.
    if ext == "gif":
        return width, height, sizes

    for name, (w, h, crop) in IMAGE_SIZES.items():
        resized = _resize(img, w, h, crop)
        if resized is None:
            continue
        rw, rh = resized.size
        _put(name, f"{prefix}/{base}-{rw}x{rh}.{ext}", resized, fmt, mimetypes.types_map.get(f".{ext}", "image/jpeg"))
        _put(f"{name}_webp", f"{prefix}/{base}-{rw}x{rh}.webp", resized, "WEBP", "image/webp")

    if ext != "webp":
        _put("full_webp", f"{prefix}/{base}.webp", img, "WEBP", "image/webp")
    return width, height, sizes


def upload_media(
    s: "Session",
    storage: "Storage",
    *,
    data: bytes,
    original_name: str,
    user: "User",
    folder: str | None = None,
    now: datetime | None = None,
) -> Media:
    """Store an uploaded file under YYYY/MM/ and register it in the media library."""
    if not data:
        raise ValidationError("No file provided")
    if len(data) > MAX_MEDIA_BYTES:
        raise ValidationError(f"File too large. Maximum size is {MAX_MEDIA_BYTES // (1024 * 1024)}MB.")
    base, ext = split_filename(original_name)
    if ext not in ALLOWED_MEDIA_EXTENSIONS:
        raise ValidationError(f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_MEDIA_EXTENSIONS))}")

    now = now or datetime.utcnow()
    prefix = now.strftime("%Y/%m")
    base = unique_base(s, storage, prefix, base, ext)
    key = f"{prefix}/{base}.{ext}"
    mime = "image/svg+xml" if ext == "svg" else (mimetypes.guess_type(f"x.{ext}")[0] or "application/octet-stream")

    width = height = None
    sizes: dict = {}
    if ext in RASTER_EXTENSIONS:
        try:
            width, height, sizes = build_image_sizes(storage, prefix, base, ext, data)
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError("File is not a valid image") from e

    storage.put_bytes(key, data, content_type=mime)
    media = Media(
        filename=f"{base}.{ext}",
        original_name=original_name,
        mime_type=mime,
        size=len(data),
        storage_key=key,
        url=media_url(key),
        title=title_from_filename(original_name),
        width=width,
        height=height,
        sizes=sizes or None,
        folder=(folder or "").strip() or None,
        uploaded_by=user.id,
        created_at=now,
    )
    s.add(media)
    s.flush()
    record_event(s, actor=user, action="upload", entity_type="media", entity_id=media.id, details=f"Uploaded: {media.filename}")
    logger.info("Stored media %s (%s bytes, %s sizes)", key, len(data), len(sizes))
    return media


def list_media(s: "Session", *, q: str | None = None, folder: str | None = None, kind: str | None = None) -> list[Media]:
    query = s.query(Media)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(
            (Media.filename.ilike(like)) | (Media.title.ilike(like)) | (Media.alt_text.ilike(like))
        )
    if folder:
        query = query.filter(Media.folder == folder)
    if kind == "image":
        query = query.filter(Media.mime_type.like("image/%"))
    elif kind == "document":
        query = query.filter(~Media.mime_type.like("image/%"))
    return query.order_by(Media.created_at.desc(), Media.id.desc()).all()


_EDITABLE = ("alt_text", "title", "caption", "description", "folder")


def update_media(s: "Session", media: Media, payload: dict, user: "User") -> Media:
    """Only keys sent with a non-null value change."""
    changed = []
    for name in _EDITABLE:
        if name in payload and payload[name] is not None:
            value = str(payload[name]).strip()
            if getattr(media, name) != value:
                setattr(media, name, value)
                changed.append(name)
    s.flush()
    if changed:
        record_event(
            s,
            actor=user,
            action="update",
            entity_type="media",
            entity_id=media.id,
            details=f"Updated: {media.filename}",
            metadata={"changes": changed},
        )
    return media


def media_keys(media: Media) -> list[str]:
    keys = [media.storage_key]
    for entry in (media.sizes or {}).values():
        if isinstance(entry, dict) and entry.get("key"):
            keys.append(entry["key"])
    return keys


def delete_media(s: "Session", storage: "Storage", media: Media, user: "User") -> None:
    """Remove the row, the original file and every generated size."""
    for key in media_keys(media):
        storage.delete(key)
    media_id, filename = media.id, media.filename
    s.delete(media)
    s.flush()
    record_event(s, actor=user, action="delete", entity_type="media", entity_id=media_id, details=f"Deleted: {filename}")


def optimize_media(s: "Session", storage: "Storage", media: Media) -> bool:
    """(Re)build sizes for one raster image. Returns False when there is nothing to do."""
    base, ext = os.path.splitext(os.path.basename(media.storage_key))
    ext = ext.lstrip(".").lower()
    if ext not in RASTER_EXTENSIONS or ext == "gif":
        return False
    prefix = os.path.dirname(media.storage_key)
    with storage.open(media.storage_key) as fh:
        data = fh.read()
    width, height, sizes = build_image_sizes(storage, prefix, base, ext, data)
    media.width, media.height = width, height
    media.sizes = sizes or None
    s.flush()
    return True


def optimize_all(s: "Session", storage: "Storage", user: "User") -> dict[str, int]:
    """Build sizes for every raster image that has no WebP copy yet."""
    processed = skipped = failed = 0
    for media in s.query(Media).order_by(Media.id).all():
        if (media.sizes or {}).get("full_webp") or not (media.mime_type or "").startswith("image/"):
            skipped += 1
            continue
        try:
            done = optimize_media(s, storage, media)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Optimize failed for media %s: %s", media.id, e)
            failed += 1
            continue
        if done:
            processed += 1
        else:
            skipped += 1
    record_event(
        s,
        actor=user,
        action="optimize",
        entity_type="media",
        details=f"Optimized {processed} image(s)",
        metadata={"processed": processed, "skipped": skipped, "failed": failed},
    )
    return {"processed": processed, "skipped": skipped, "failed": failed}
