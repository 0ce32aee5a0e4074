"""Entry submission and update workflows.

Each submission runs in a single transaction: the guards read the show and
the student's existing entries, then the group, media, piece, profile update
and entry rows are written in that order. Any error raised along the way
rolls the whole unit back.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.errors import NotFound, PermissionDenied, UserInputError
from gallery.models import Entry, Group, Image, Other, Show, SinglePiece, User, Video
from gallery.models.base import Base, async_session_factory, utcnow
from gallery.models.media import IMAGE_ENTRY, OTHER_ENTRY, VIDEO_ENTRY
from gallery.models.user import ADMIN
from gallery.schemas import (
    EntryInput,
    EntryResponse,
    EntryUpdate,
    OtherMediaInput,
    PhotoInput,
    VideoInput,
)
from gallery.services.submission import allowed_to_submit, parse_video

logger = logging.getLogger("gallery.entries")

# Fields an admin may patch on each table
ENTRY_UPDATE_FIELDS = (
    "for_sale",
    "invited",
    "year_level",
    "academic_program",
    "more_copies",
    "exclude_from_judging",
)
PIECE_UPDATE_FIELDS = ("title", "comment")


def entry_response(entry: Entry, piece: Optional[SinglePiece]) -> EntryResponse:
    """Merge an entry and its piece into one response body."""
    data = EntryResponse.model_validate(entry)
    if piece is not None:
        data.title = piece.title
        data.comment = piece.comment
    return data


# --- Guards ---


async def get_show(session: AsyncSession, show_id: int, lock: bool = False) -> Show:
    """Load a show; `lock` takes a row lock (SELECT ... FOR UPDATE) for the rest of the transaction."""
    show = await session.get(Show, show_id, with_for_update=lock)
    if not show:
        raise NotFound("Show not found")
    return show


async def check_can_make_more_single_entries(session: AsyncSession, entry: EntryInput, show: Show) -> None:
    """Reject an individual submission once the student has reached the show's entry cap."""
    if not entry.student_username and entry.group is None:
        raise UserInputError("Entry must have an entrant")
    if entry.student_username and entry.group is not None:
        raise UserInputError("Entry must have a single entrant")
    if entry.group is not None:
        if not entry.group.creator_username:
            raise UserInputError("Group entries must have a creator")
        # Group submissions do not count against anyone's cap
        return
    count = await session.scalar(
        select(func.count(Entry.id)).where(
            Entry.show_id == show.id,
            Entry.student_username == entry.student_username,
        )
    )
    if count >= show.entry_cap:
        raise UserInputError("Individual submission limit reached")


def check_submission_open(show: Show) -> None:
    if not show.is_entry_open(utcnow()):
        raise UserInputError("Submission deadline has ended")


# --- Write stages ---


async def _create_group(session: AsyncSession, entry: EntryInput) -> Optional[Group]:
    if entry.group is None:
        return None
    group = Group(
        creator_username=entry.group.creator_username,
        participants=entry.group.participants,
        name=entry.group.name,
    )
    session.add(group)
    await session.flush()
    return group


async def _create_media(session: AsyncSession, media: Base) -> Base:
    session.add(media)
    await session.flush()
    return media


async def _create_piece(session: AsyncSession, entry: EntryInput, entry_type: str, media_id: int) -> SinglePiece:
    piece = SinglePiece(
        piece_type=entry_type,
        media_id=media_id,
        title=entry.title,
        comment=entry.comment,
    )
    session.add(piece)
    await session.flush()
    return piece


async def _update_student_profile(session: AsyncSession, entry: EntryInput) -> None:
    """Copy changed hometown/display name onto the student. Must run before the entry insert."""
    if entry.group is not None:
        return
    user = await session.get(User, entry.student_username)
    if not user:
        raise NotFound("User not found")
    changed = False
    if entry.hometown is not None and entry.hometown != user.hometown:
        user.hometown = entry.hometown
        changed = True
    if entry.display_name is not None and entry.display_name != user.display_name:
        user.display_name = entry.display_name
        changed = True
    if changed:
        await session.flush()


async def _create_entry(
    session: AsyncSession,
    entry: EntryInput,
    entry_type: str,
    piece: SinglePiece,
    group: Optional[Group],
) -> Entry:
    row = Entry(
        student_username=None if group else entry.student_username,
        group_id=group.id if group else None,
        show_id=entry.show_id,
        piece_id=piece.id,
        entry_type=entry_type,
        for_sale=entry.for_sale,
        year_level=entry.year_level,
        academic_program=entry.academic_program,
        more_copies=entry.more_copies,
    )
    session.add(row)
    await session.flush()
    return row


async def _submit(entry: EntryInput, entry_type: str, build_media: Callable[[], Base]) -> Show:
    async with async_session_factory() as session:
        async with session.begin():
            show = await get_show(session, entry.show_id, lock=True)
            await check_can_make_more_single_entries(session, entry, show)
            check_submission_open(show)

            group = await _create_group(session, entry)
            media = await _create_media(session, build_media())
            piece = await _create_piece(session, entry, entry_type, media.id)
            await _update_student_profile(session, entry)
            created = await _create_entry(session, entry, entry_type, piece, group)

        logger.info(
            "Entry %s (%s) submitted to show %s by %s",
            created.id,
            entry_type,
            show.id,
            entry.student_username or f"group {group.id}",
        )
        await session.refresh(show)
        return show


def _authorize(entry: EntryInput, caller: User) -> None:
    if caller.type != ADMIN and not allowed_to_submit(entry, caller):
        # don't allow non-admins to submit work claiming to be from someone else
        raise PermissionDenied()


# --- Operations ---


async def create_photo(data: PhotoInput, caller: User) -> Show:
    _authorize(data.entry, caller)
    return await _submit(
        data.entry,
        IMAGE_ENTRY,
        lambda: Image(
            path=data.path,
            horiz_dim_inch=data.horiz_dim_inch,
            vert_dim_inch=data.vert_dim_inch,
            media_type=data.media_type,
        ),
    )


async def create_video(data: VideoInput, caller: User) -> Show:
    _authorize(data.entry, caller)
    provider, video_id = parse_video(data.url)
    if not provider or not video_id:
        raise UserInputError("The video URL must be a valid URL from Youtube or Vimeo")
    return await _submit(
        data.entry,
        VIDEO_ENTRY,
        lambda: Video(provider=provider, video_id=video_id),
    )


async def create_other_media(data: OtherMediaInput, caller: User) -> Show:
    _authorize(data.entry, caller)
    return await _submit(data.entry, OTHER_ENTRY, lambda: Other(path=data.path))


async def update_entry(entry_id: int, patch: EntryUpdate, caller: User) -> EntryResponse:
    """Admin-only patch of an entry and its piece; returns both merged."""
    if caller.type != ADMIN:
        raise PermissionDenied()
    values = patch.model_dump(exclude_unset=True)
    async with async_session_factory() as session:
        async with session.begin():
            entry = await session.get(Entry, entry_id)
            if not entry:
                raise NotFound("Entry not found")
            piece = await session.get(SinglePiece, entry.piece_id)
            for field in ENTRY_UPDATE_FIELDS:
                if values.get(field) is not None:
                    setattr(entry, field, values[field])
            for field in PIECE_UPDATE_FIELDS:
                if values.get(field) is not None:
                    setattr(piece, field, values[field])
        return entry_response(entry, piece)


async def list_show_entries(show_id: int) -> List[EntryResponse]:
    async with async_session_factory() as session:
        await get_show(session, show_id)
        result = await session.execute(
            select(Entry, SinglePiece)
            .join(SinglePiece, Entry.piece_id == SinglePiece.id)
            .where(Entry.show_id == show_id)
            .order_by(Entry.id)
        )
        return [entry_response(entry, piece) for entry, piece in result.all()]
