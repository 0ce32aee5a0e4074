"""Database models."""
from gallery.models.base import Base, init_db
from gallery.models.user import User
from gallery.models.show import Show
from gallery.models.group import Group
from gallery.models.media import Image, Other, SinglePiece, Video
from gallery.models.entry import Entry

__all__ = [
    "Base",
    "User",
    "Show",
    "Group",
    "Image",
    "Video",
    "Other",
    "SinglePiece",
    "Entry",
    "init_db",
]
