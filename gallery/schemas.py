"""Request and response bodies. Field names are camelCase on the wire."""
from __future__ import annotations

from datetime import datetime
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def relative_upload_path(value: str) -> str:
    """Uploaded file paths must stay inside the upload directory."""
    normalized = value.replace("\\", "/")
    if (
        not normalized.strip()
        or PurePosixPath(normalized).is_absolute()
        or PureWindowsPath(value).drive
        or ".." in PurePosixPath(normalized).parts
    ):
        raise ValueError("path must be relative to the upload directory")
    return value


# --- Submissions ---


class GroupInput(CamelModel):
    creator_username: Optional[str] = None
    participants: str
    name: Optional[str] = None


class EntryInput(CamelModel):
    """Fields shared by every submission, whatever the media type."""

    student_username: Optional[str] = None
    group: Optional[GroupInput] = None
    show_id: int
    title: str = "Untitled"
    comment: Optional[str] = None
    for_sale: bool = False
    year_level: Optional[str] = None
    academic_program: Optional[str] = None
    more_copies: bool = False
    # Profile fields copied onto the student's User row for individual entries
    hometown: Optional[str] = None
    display_name: Optional[str] = None


class PhotoInput(CamelModel):
    entry: EntryInput
    path: str
    horiz_dim_inch: Optional[float] = None
    vert_dim_inch: Optional[float] = None
    media_type: Optional[str] = None

    @field_validator("path")
    @classmethod
    def check_path(cls, v):
        return relative_upload_path(v)


class VideoInput(CamelModel):
    entry: EntryInput
    url: str


class OtherMediaInput(CamelModel):
    entry: EntryInput
    path: str

    @field_validator("path")
    @classmethod
    def check_path(cls, v):
        return relative_upload_path(v)


class EntryUpdate(CamelModel):
    for_sale: Optional[bool] = None
    invited: Optional[bool] = None
    year_level: Optional[str] = None
    academic_program: Optional[str] = None
    more_copies: Optional[bool] = None
    exclude_from_judging: Optional[bool] = None
    title: Optional[str] = None
    comment: Optional[str] = None


class EntryResponse(CamelModel):
    id: int
    show_id: int
    student_username: Optional[str] = None
    group_id: Optional[int] = None
    piece_id: int
    entry_type: str
    for_sale: bool
    invited: Optional[bool] = None
    year_level: Optional[str] = None
    academic_program: Optional[str] = None
    more_copies: bool
    exclude_from_judging: bool
    title: Optional[str] = None
    comment: Optional[str] = None


# --- Shows ---


class ShowCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    entry_cap: int = Field(default=3, ge=0)
    entry_start: datetime
    entry_end: datetime
    judging_start: datetime
    judging_end: datetime


class ShowUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    entry_cap: Optional[int] = Field(default=None, ge=0)
    entry_start: Optional[datetime] = None
    entry_end: Optional[datetime] = None
    judging_start: Optional[datetime] = None
    judging_end: Optional[datetime] = None


class ShowResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    entry_cap: int
    entry_start: datetime
    entry_end: datetime
    judging_start: datetime
    judging_end: datetime
