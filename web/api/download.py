"""Zip download of a show's image entries."""
from __future__ import annotations

import io
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, StreamingResponse

from gallery.errors import NotFound
from gallery.models import User
from gallery.services.export import export_show
from web.auth import require_admin_user

logger = logging.getLogger("gallery.download")

router = APIRouter(tags=["downloads"])


def _quoted(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _attachment(filename: str) -> str:
    """Content-Disposition value; non-latin-1 names also get an RFC 5987 form."""
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f'attachment; filename="{_quoted(ascii_name)}"; filename*=UTF-8\'\'{quote(filename)}'
    return f'attachment; filename="{_quoted(filename)}"'


@router.get("/zips/{show_id}")
async def download_show_zip(show_id: int, admin: User = Depends(require_admin_user)):
    """Every image entry of a show, sorted into invited/ and not invited/ folders."""
    try:
        show, archive = await export_show(show_id)
    except NotFound:
        return PlainTextResponse("404: Show not found", status_code=404)
    except Exception:
        logger.exception("Zip export failed for show %s", show_id)
        return PlainTextResponse("500: Oops! Try again later.", status_code=500)
    return StreamingResponse(
        io.BytesIO(archive),
        status_code=200,
        media_type="application/zip",
        headers={"Content-Disposition": _attachment(f"{show.name}.zip")},
    )
