"""Entry model - one submission of a piece to a show."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gallery.models.base import Base, utcnow


class Entry(Base):
    """Submission by either a single student or a group, never both."""

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    show_id: Mapped[int] = mapped_column(ForeignKey("shows.id"), nullable=False, index=True)
    student_username: Mapped[Optional[str]] = mapped_column(ForeignKey("users.username"), nullable=True, index=True)
    group_id: Mapped[Optional[int]] = mapped_column(ForeignKey("groups.id"), nullable=True)
    piece_id: Mapped[int] = mapped_column(ForeignKey("single_pieces.id"), nullable=False, unique=True)
    entry_type: Mapped[str] = mapped_column(String(16), nullable=False)  # image, video, other
    for_sale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invited: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)  # set by admins after review
    year_level: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    academic_program: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    more_copies: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    exclude_from_judging: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    show: Mapped["Show"] = relationship("Show", back_populates="entries")
    student: Mapped[Optional["User"]] = relationship("User", back_populates="entries")
    group: Mapped[Optional["Group"]] = relationship("Group", back_populates="entries")
    piece: Mapped["SinglePiece"] = relationship("SinglePiece")

    __table_args__ = (
        CheckConstraint(
            "(student_username IS NULL) <> (group_id IS NULL)",
            name="check_single_entrant",
        ),
    )

    def is_student_submission(self) -> bool:
        return self.student_username is not None

    def is_group_submission(self) -> bool:
        return self.group_id is not None
