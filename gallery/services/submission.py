"""Helpers for checking who may submit and for reading video URLs."""
from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlparse

from gallery.models import User
from gallery.models.media import VIMEO, YOUTUBE
from gallery.models.user import ADMIN, STUDENT
from gallery.schemas import EntryInput

_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com"}
_YOUTUBE_PATH = re.compile(r"^/(?:embed|v)/([\w-]+)")
_YOUTUBE_ID = re.compile(r"^[\w-]+$")
_VIMEO_HOSTS = {"vimeo.com", "www.vimeo.com", "player.vimeo.com"}
_VIMEO_PATH = re.compile(r"^/(?:video/)?(\d+)")


def allowed_to_submit(entry: EntryInput, caller: User) -> bool:
    """Admins may submit for anyone; students only as themselves or as creator of the group."""
    if caller.type == ADMIN:
        return True
    if caller.type != STUDENT:
        return False
    if entry.group is not None:
        return entry.group.creator_username == caller.username
    return entry.student_username == caller.username


def parse_video(url: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (provider, video_id) for a YouTube or Vimeo URL, or (None, None)."""
    if not url:
        return None, None
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None, None
    host = (parsed.hostname or "").lower()

    if host in _YOUTUBE_HOSTS:
        if parsed.path == "/watch":
            video_id = (parse_qs(parsed.query).get("v") or [""])[0]
            if _YOUTUBE_ID.match(video_id):
                return YOUTUBE, video_id
            return None, None
        m = _YOUTUBE_PATH.match(parsed.path)
        return (YOUTUBE, m.group(1)) if m else (None, None)
    if host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]
        return (YOUTUBE, video_id) if _YOUTUBE_ID.match(video_id) else (None, None)
    if host in _VIMEO_HOSTS:
        m = _VIMEO_PATH.match(parsed.path)
        return (VIMEO, m.group(1)) if m else (None, None)
    return None, None
