"""Group model - several students submitting one entry."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gallery.models.base import Base


class Group(Base):
    """Multi-student submitter. `participants` is free text as typed by the creator."""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_username: Mapped[str] = mapped_column(ForeignKey("users.username"), nullable=False)
    participants: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    entries = relationship("Entry", back_populates="group")

    @property
    def display_name(self) -> str:
        return self.name or self.participants
