"""Show model."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gallery.models.base import Base, utcnow


class Show(Base):
    """Judged exhibition with an entry window followed by a judging window."""

    __tablename__ = "shows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    entry_cap: Mapped[int] = mapped_column(Integer, nullable=False, default=3)  # per-student individual entries
    entry_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    entry_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    judging_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    judging_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    entries = relationship("Entry", back_populates="show", cascade="all, delete-orphan")

    def is_entry_open(self, now: datetime) -> bool:
        return now < self.entry_end
