from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.cms.models import Base, JSONType


class Media(Base):
    __tablename__ = "media"
    __table_args__ = (
        Index("idx_media_created_at", "created_at"),
        Index("idx_media_folder", "folder"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # bytes
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)  # e.g. "2024/05/knee.jpg"
    url: Mapped[str] = mapped_column(String(500), nullable=False)

    alt_text: Mapped[str | None] = mapped_column(String(500), nullable=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # {"thumbnail": {"key", "url", "width", "height"}, "thumbnail_webp": {...}, "full_webp": {...}}
    sizes: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    folder: Mapped[str | None] = mapped_column(String(128), nullable=True)

    uploaded_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "url": self.url,
            "alt_text": self.alt_text,
            "title": self.title,
            "caption": self.caption,
            "description": self.description,
            "width": self.width,
            "height": self.height,
            "sizes": self.sizes or {},
            "folder": self.folder,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
