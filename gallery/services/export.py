"""Zip export of every image submitted to a show.

Files are named "<Last> <First> - <title>.jpg" (or "<group> - <title>.jpg")
and sorted into "invited/" and "not invited/" folders. Names are unique over
the whole archive: a repeated name gets " (1)", " (2)", ... appended, the
counter starting from 1 for each colliding entry. Students are visited
before groups, each in key order, so the numbering is reproducible.
"""
from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import config
from gallery.models import Entry, Group, Image, Show, SinglePiece, User
from gallery.models.base import async_session_factory
from gallery.models.media import IMAGE_ENTRY
from gallery.services.entries import get_show

logger = logging.getLogger("gallery.export")

INVITED_DIR = "invited"
NOT_INVITED_DIR = "not invited"


@dataclass
class ImageEntry:
    """An image entry with the piece title and file path attached."""

    entry_id: int
    student_username: Optional[str]
    group_id: Optional[int]
    title: str
    path: str
    invited: bool


@dataclass
class ExportItem:
    name: str
    path: str
    invited: bool

    @property
    def arcname(self) -> str:
        return f"{INVITED_DIR if self.invited else NOT_INVITED_DIR}/{self.name}"


async def load_image_entries(session: AsyncSession, show_id: int) -> List[ImageEntry]:
    result = await session.execute(
        select(Entry, SinglePiece.title, Image.path)
        .join(SinglePiece, Entry.piece_id == SinglePiece.id)
        .join(Image, SinglePiece.media_id == Image.id)
        .where(Entry.show_id == show_id, Entry.entry_type == IMAGE_ENTRY)
        .order_by(Entry.id)
    )
    return [
        ImageEntry(
            entry_id=entry.id,
            student_username=entry.student_username,
            group_id=entry.group_id,
            title=title,
            path=path,
            invited=bool(entry.invited),
        )
        for entry, title, path in result.all()
    ]


def group_by_submitter(
    entries: List[ImageEntry],
) -> Tuple[Dict[str, List[ImageEntry]], Dict[int, List[ImageEntry]]]:
    """Split entries into {username: [...]} and {group_id: [...]}, keys sorted."""
    students: Dict[str, List[ImageEntry]] = {}
    groups: Dict[int, List[ImageEntry]] = {}
    for e in entries:
        if e.student_username is not None:
            students.setdefault(e.student_username, []).append(e)
        elif e.group_id is not None:
            groups.setdefault(e.group_id, []).append(e)
    return (
        {k: students[k] for k in sorted(students)},
        {k: groups[k] for k in sorted(groups)},
    )


def unique_name(prefix: str, seen: set) -> str:
    """Return prefix, or prefix + " (n)" for the first n from 1 not in seen; records it."""
    proposed = prefix
    i = 1
    while proposed in seen:
        proposed = f"{prefix} ({i})"
        i += 1
    seen.add(proposed)
    return proposed


def build_export_items(
    student_submissions: Dict[str, List[ImageEntry]],
    group_submissions: Dict[int, List[ImageEntry]],
    users: Dict[str, User],
    groups: Dict[int, Group],
) -> List[ExportItem]:
    seen: set = set()
    items: List[ExportItem] = []
    for username, entries in student_submissions.items():
        user = users.get(username)
        if user is None:
            logger.warning("No user record for %s; using username in export names", username)
            submitter = username
        else:
            submitter = f"{user.last_name} {user.first_name}"
        for e in entries:
            name = unique_name(f"{submitter} - {e.title}", seen)
            items.append(ExportItem(name=f"{name}.jpg", path=e.path, invited=e.invited))
    for group_id, entries in group_submissions.items():
        group = groups.get(group_id)
        submitter = group.display_name if group else f"Group {group_id}"
        for e in entries:
            name = unique_name(f"{submitter} - {e.title}", seen)
            items.append(ExportItem(name=f"{name}.jpg", path=e.path, invited=e.invited))
    return items


async def _fetch_submitters(
    session: AsyncSession, usernames: List[str], group_ids: List[int]
) -> Tuple[Dict[str, User], Dict[int, Group]]:
    users: Dict[str, User] = {}
    groups: Dict[int, Group] = {}
    if usernames:
        result = await session.execute(select(User).where(User.username.in_(usernames)))
        users = {u.username: u for u in result.scalars().all()}
    if group_ids:
        result = await session.execute(select(Group).where(Group.id.in_(group_ids)))
        groups = {g.id: g for g in result.scalars().all()}
    return users, groups


def resolve_upload(image_dir: Path, path: str) -> Path:
    """Absolute location of an uploaded file; raises ValueError if it escapes image_dir."""
    root = image_dir.resolve()
    target = (root / path).resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"Upload path escapes the image directory: {path!r}")
    return target


async def read_images(items: List[ExportItem], image_dir: Path) -> List[bytes]:
    """Read every image file concurrently; the first failure propagates."""
    targets = [resolve_upload(image_dir, item.path) for item in items]
    return await asyncio.gather(*(asyncio.to_thread(target.read_bytes) for target in targets))


def build_archive(items: List[ExportItem], contents: List[bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
        bundle.writestr(f"{INVITED_DIR}/", "")
        bundle.writestr(f"{NOT_INVITED_DIR}/", "")
        for item, data in zip(items, contents):
            bundle.writestr(item.arcname, data)
    return buffer.getvalue()


async def export_show(show_id: int, image_dir: Optional[Path] = None) -> Tuple[Show, bytes]:
    """Build the zip for a show. Raises NotFound when the show does not exist."""
    image_dir = image_dir or config.UPLOAD_IMAGE_DIR
    async with async_session_factory() as session:
        show = await get_show(session, show_id)
        entries = await load_image_entries(session, show_id)
        student_submissions, group_submissions = group_by_submitter(entries)
        users, groups = await _fetch_submitters(
            session, list(student_submissions), list(group_submissions)
        )
    items = build_export_items(student_submissions, group_submissions, users, groups)
    contents = await read_images(items, image_dir)
    archive = build_archive(items, contents)
    logger.info("Exported %d image(s) for show %s", len(items), show.id)
    return show, archive
