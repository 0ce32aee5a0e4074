"""Show creation and editing."""
from __future__ import annotations

from typing import List

from sqlalchemy import select

from gallery.errors import NotFound, UserInputError
from gallery.models import Show
from gallery.models.base import as_naive_utc, async_session_factory
from gallery.schemas import ShowCreate, ShowUpdate

_DATE_FIELDS = ("entry_start", "entry_end", "judging_start", "judging_end")


def validate_windows(show: Show) -> None:
    """Entry window must be non-empty and come before a non-empty judging window."""
    if show.entry_end <= show.entry_start:
        raise UserInputError("Entry end must be after entry start")
    if show.judging_start < show.entry_end:
        raise UserInputError("Judging must start after the entry period ends")
    if show.judging_end <= show.judging_start:
        raise UserInputError("Judging end must be after judging start")


async def list_shows() -> List[Show]:
    async with async_session_factory() as session:
        result = await session.execute(select(Show).order_by(Show.entry_start.desc(), Show.id.desc()))
        return list(result.scalars().all())


async def get_show_by_id(show_id: int) -> Show:
    async with async_session_factory() as session:
        show = await session.get(Show, show_id)
        if not show:
            raise NotFound("Show not found")
        return show


async def create_show(body: ShowCreate) -> Show:
    values = body.model_dump()
    for field in _DATE_FIELDS:
        values[field] = as_naive_utc(values[field])
    show = Show(**values)
    validate_windows(show)
    async with async_session_factory() as session:
        session.add(show)
        await session.commit()
        await session.refresh(show)
        return show


async def update_show(show_id: int, body: ShowUpdate) -> Show:
    updates = body.model_dump(exclude_unset=True)
    async with async_session_factory() as session:
        show = await session.get(Show, show_id)
        if not show:
            raise NotFound("Show not found")
        for key, value in updates.items():
            if value is None:
                continue
            if key in _DATE_FIELDS:
                value = as_naive_utc(value)
            setattr(show, key, value)
        validate_windows(show)
        await session.commit()
        await session.refresh(show)
        return show
