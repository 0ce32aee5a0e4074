"""API routes for shows and entry submissions."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from gallery.models import User
from gallery.schemas import (
    EntryResponse,
    EntryUpdate,
    OtherMediaInput,
    PhotoInput,
    ShowCreate,
    ShowResponse,
    ShowUpdate,
    VideoInput,
)
from gallery.services import entries, shows
from web.auth import require_admin_user, require_user

router = APIRouter(prefix="/api", tags=["shows"])


# --- Shows ---


@router.get("/shows", response_model=list[ShowResponse])
async def list_shows():
    """List shows, most recent entry period first."""
    return await shows.list_shows()


@router.get("/shows/{show_id}", response_model=ShowResponse)
async def get_show(show_id: int):
    return await shows.get_show_by_id(show_id)


@router.post("/shows", response_model=ShowResponse)
async def create_show(body: ShowCreate, admin: User = Depends(require_admin_user)):
    """Create a show (admin only)."""
    return await shows.create_show(body)


@router.patch("/shows/{show_id}", response_model=ShowResponse)
async def update_show(show_id: int, body: ShowUpdate, admin: User = Depends(require_admin_user)):
    """Update a show's name, cap or windows (admin only)."""
    return await shows.update_show(show_id, body)


@router.get("/shows/{show_id}/entries", response_model=list[EntryResponse])
async def list_show_entries(show_id: int, admin: User = Depends(require_admin_user)):
    """All entries of a show with their titles (admin only)."""
    return await entries.list_show_entries(show_id)


# --- Entries ---
# Each create route returns the show the entry was submitted to.


@router.post("/entries/photo", response_model=ShowResponse)
async def create_photo(body: PhotoInput, user: User = Depends(require_user)):
    return await entries.create_photo(body, user)


@router.post("/entries/video", response_model=ShowResponse)
async def create_video(body: VideoInput, user: User = Depends(require_user)):
    return await entries.create_video(body, user)


@router.post("/entries/other", response_model=ShowResponse)
async def create_other_media(body: OtherMediaInput, user: User = Depends(require_user)):
    return await entries.create_other_media(body, user)


@router.patch("/entries/{entry_id}", response_model=EntryResponse)
async def update_entry(entry_id: int, body: EntryUpdate, user: User = Depends(require_user)):
    """Patch entry flags and piece title/comment. Admin only; checked by the workflow."""
    return await entries.update_entry(entry_id, body, user)
