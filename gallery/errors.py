"""Errors raised by the submission and export workflows.

Messages are shown to the end user as-is, so they must never carry internal
details. Anything that is not a GalleryError is treated as an infrastructure
failure and reported generically.
"""
from __future__ import annotations


class GalleryError(Exception):
    """Base for user-facing errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PermissionDenied(GalleryError):
    status_code = 403

    def __init__(self, message: str = "Permission Denied"):
        super().__init__(message)


class UserInputError(GalleryError):
    """Invalid request: bad video URL, submission cap reached, deadline passed."""

    status_code = 400


class NotFound(GalleryError):
    status_code = 404
