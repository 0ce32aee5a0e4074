"""Tests for the show zip export."""
import io
import zipfile

import pytest

from gallery.models import Entry, Group, Image, SinglePiece, User
from gallery.models.base import async_session_factory
from gallery.models.media import IMAGE_ENTRY
from gallery.services.export import (
    ExportItem,
    ImageEntry,
    build_export_items,
    group_by_submitter,
    read_images,
    unique_name,
)
from web.api.download import _attachment


def _image(entry_id, title, username=None, group_id=None, invited=False):
    return ImageEntry(
        entry_id=entry_id,
        student_username=username,
        group_id=group_id,
        title=title,
        path=f"{entry_id}.jpg",
        invited=invited,
    )


def test_unique_name_counter_restarts_per_entry():
    seen = set()
    assert unique_name("Doe Jane - Untitled", seen) == "Doe Jane - Untitled"
    assert unique_name("Doe Jane - Untitled (1)", seen) == "Doe Jane - Untitled (1)"
    # Collides with both names above; counts up from 1 again
    assert unique_name("Doe Jane - Untitled", seen) == "Doe Jane - Untitled (2)"


def test_students_named_before_groups():
    entries = [
        _image(1, "Untitled", group_id=7),
        _image(2, "Untitled", username="zz111"),
        _image(3, "Untitled", username="aa222"),
        _image(4, "Untitled", username="zz111"),
    ]
    students, groups = group_by_submitter(entries)
    assert list(students) == ["aa222", "zz111"]
    assert list(groups) == [7]

    users = {
        "aa222": User(username="aa222", first_name="Jane", last_name="Doe"),
        "zz111": User(username="zz111", first_name="Jane", last_name="Doe"),
    }
    groups_by_id = {7: Group(id=7, creator_username="aa222", participants="Jane Doe", name="Doe Jane")}
    items = build_export_items(students, groups, users, groups_by_id)
    assert [i.name for i in items] == [
        "Doe Jane - Untitled.jpg",
        "Doe Jane - Untitled (1).jpg",
        "Doe Jane - Untitled (2).jpg",
        "Doe Jane - Untitled (3).jpg",
    ]
    assert [i.path for i in items] == ["3.jpg", "2.jpg", "4.jpg", "1.jpg"]


def test_group_name_falls_back_to_participants():
    students, groups = group_by_submitter([_image(1, "Mural", group_id=3, invited=True)])
    items = build_export_items(students, groups, {}, {3: Group(id=3, creator_username="x", participants="Ann, Bo")})
    assert items[0].name == "Ann, Bo - Mural.jpg"
    assert items[0].arcname == "invited/Ann, Bo - Mural.jpg"


# --- Route ---


def photo_body(show_id, username, title="Untitled", path="harbor.jpg"):
    return {
        "entry": {"studentUsername": username, "showId": show_id, "title": title},
        "path": path,
    }


def test_attachment_escapes_quotes_and_backslashes():
    assert _attachment('Say "Hi" \\ Bye.zip') == 'attachment; filename="Say \\"Hi\\" \\\\ Bye.zip"'
    assert _attachment('Café "Noir".zip') == 'attachment; filename="Café \\"Noir\\".zip"'
    assert _attachment('展 "A".zip') == (
        'attachment; filename="_ \\"A\\".zip"; filename*=UTF-8\'\'%E5%B1%95%20%22A%22.zip'
    )


@pytest.mark.asyncio
async def test_read_images_stays_inside_upload_dir(tmp_path, upload_dir):
    (tmp_path / "outside.txt").write_bytes(b"OUTSIDE")
    (upload_dir / "inside.jpg").write_bytes(b"inside")

    assert await read_images([ExportItem(name="a.jpg", path="inside.jpg", invited=False)], upload_dir) == [b"inside"]
    for path in ("../outside.txt", str(tmp_path / "outside.txt"), "sub/../../outside.txt"):
        with pytest.raises(ValueError):
            await read_images([ExportItem(name="a.jpg", path=path, invited=False)], upload_dir)


@pytest.mark.asyncio
async def test_zip_refuses_stored_path_outside_upload_dir(client, student, show, tmp_path, auth_headers):
    """A path that escapes the upload directory fails the export instead of leaking the file."""
    (tmp_path / "secret.txt").write_bytes(b"TOP SECRET")
    async with async_session_factory() as session:
        async with session.begin():
            image = Image(path="../secret.txt")
            session.add(image)
            await session.flush()
            piece = SinglePiece(piece_type=IMAGE_ENTRY, media_id=image.id, title="Leak")
            session.add(piece)
            await session.flush()
            session.add(
                Entry(
                    student_username=student.username,
                    show_id=show.id,
                    piece_id=piece.id,
                    entry_type=IMAGE_ENTRY,
                )
            )

    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    assert r.status_code == 500
    assert b"TOP SECRET" not in r.content


@pytest.mark.asyncio
async def test_zip_deduplicates_names(client, student, show, headers_for, upload_dir, auth_headers):
    (upload_dir / "one.jpg").write_bytes(b"first")
    (upload_dir / "two.jpg").write_bytes(b"second")
    for path in ("one.jpg", "two.jpg"):
        r = await client.post(
            "/api/entries/photo",
            json=photo_body(show.id, student.username, path=path),
            headers=headers_for(student),
        )
        assert r.status_code == 200, r.text

    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/zip"
    assert r.headers["content-disposition"] == f'attachment; filename="{show.name}.zip"'

    archive = zipfile.ZipFile(io.BytesIO(r.content))
    assert archive.read("not invited/Doe Jane - Untitled.jpg") == b"first"
    assert archive.read("not invited/Doe Jane - Untitled (1).jpg") == b"second"


@pytest.mark.asyncio
async def test_zip_sorts_invited(client, student, show, headers_for, upload_dir, auth_headers):
    (upload_dir / "a.jpg").write_bytes(b"a")
    (upload_dir / "b.jpg").write_bytes(b"b")
    await client.post("/api/entries/photo", json=photo_body(show.id, student.username, "Sea", "a.jpg"), headers=headers_for(student))
    await client.post("/api/entries/photo", json=photo_body(show.id, student.username, "Sky", "b.jpg"), headers=headers_for(student))
    r = await client.get(f"/api/shows/{show.id}/entries", headers=auth_headers)
    sea = next(e for e in r.json() if e["title"] == "Sea")
    r = await client.patch(f"/api/entries/{sea['id']}", json={"invited": True}, headers=auth_headers)
    assert r.status_code == 200

    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    names = set(zipfile.ZipFile(io.BytesIO(r.content)).namelist())
    assert "invited/Doe Jane - Sea.jpg" in names
    assert "not invited/Doe Jane - Sky.jpg" in names


@pytest.mark.asyncio
async def test_zip_skips_non_image_entries(client, student, show, headers_for, auth_headers):
    body = {
        "entry": {"studentUsername": student.username, "showId": show.id},
        "url": "https://vimeo.com/76979871",
    }
    r = await client.post("/api/entries/video", json=body, headers=headers_for(student))
    assert r.status_code == 200

    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    assert r.status_code == 200
    assert sorted(zipfile.ZipFile(io.BytesIO(r.content)).namelist()) == ["invited/", "not invited/"]


@pytest.mark.asyncio
async def test_zip_empty_show(client, show, auth_headers):
    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    assert r.status_code == 200
    archive = zipfile.ZipFile(io.BytesIO(r.content))
    assert archive.testzip() is None
    assert sorted(archive.namelist()) == ["invited/", "not invited/"]


@pytest.mark.asyncio
async def test_zip_unknown_show(client, auth_headers):
    r = await client.get("/zips/99999", headers=auth_headers)
    assert r.status_code == 404
    assert r.text == "404: Show not found"


@pytest.mark.asyncio
async def test_zip_missing_file_is_server_error(client, student, show, headers_for, auth_headers):
    r = await client.post(
        "/api/entries/photo",
        json=photo_body(show.id, student.username, path="gone.jpg"),
        headers=headers_for(student),
    )
    assert r.status_code == 200
    r = await client.get(f"/zips/{show.id}", headers=auth_headers)
    assert r.status_code == 500
    assert r.text == "500: Oops! Try again later."


@pytest.mark.asyncio
async def test_zip_requires_admin(client, student, show, headers_for):
    r = await client.get(f"/zips/{show.id}")
    assert r.status_code == 401
    r = await client.get(f"/zips/{show.id}", headers=headers_for(student))
    assert r.status_code == 403
