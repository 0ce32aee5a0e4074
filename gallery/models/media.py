"""Media payloads and the piece that tags which one an entry holds."""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from gallery.models.base import Base

IMAGE_ENTRY = "image"
VIDEO_ENTRY = "video"
OTHER_ENTRY = "other"
ENTRY_TYPES = (IMAGE_ENTRY, VIDEO_ENTRY, OTHER_ENTRY)

YOUTUBE = "youtube"
VIMEO = "vimeo"


class Image(Base):
    """Uploaded image. `path` is relative to the upload image directory."""

    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    horiz_dim_inch: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    vert_dim_inch: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    media_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)  # e.g. "Oil on canvas"


class Video(Base):
    """Video hosted by a third party."""

    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(16), nullable=False)  # youtube, vimeo
    video_id: Mapped[str] = mapped_column(String(64), nullable=False)


class Other(Base):
    """Any other uploaded media (pdf, audio, ...)."""

    __tablename__ = "others"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(255), nullable=False)


MEDIA_MODELS = {
    IMAGE_ENTRY: Image,
    VIDEO_ENTRY: Video,
    OTHER_ENTRY: Other,
}


class SinglePiece(Base):
    """Title and comment for one entry; `piece_type` says which media table `media_id` points into."""

    __tablename__ = "single_pieces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    piece_type: Mapped[str] = mapped_column(String(16), nullable=False)  # image, video, other
    media_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="Untitled")
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    async def load_media(self, session: AsyncSession) -> Image | Video | Other | None:
        model = MEDIA_MODELS.get(self.piece_type)
        if model is None:
            raise ValueError(f"Unknown piece type: {self.piece_type}")
        return await session.get(model, self.media_id)
