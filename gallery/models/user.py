"""User model: students, judges and admins."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gallery.models.base import Base

STUDENT = "student"
JUDGE = "judge"
ADMIN = "admin"
USER_TYPES = (STUDENT, JUDGE, ADMIN)


class User(Base):
    """Account keyed by username. Students sign in through SSO and have no password."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    display_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    hometown: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=STUDENT)  # student, judge, admin
    password_hash: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    entries = relationship("Entry", back_populates="student")
