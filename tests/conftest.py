"""Pytest configuration and fixtures for API tests."""
import os
import tempfile
from datetime import timedelta

# Set test env BEFORE any imports that use config
_tmpdir = tempfile.mkdtemp(prefix="gallery-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

import config
from gallery.models import Show, User
from gallery.models.base import async_session_factory, drop_db, engine, init_db, utcnow
from gallery.models.user import ADMIN, STUDENT
from web.api.main import app
from web.auth import create_access_token


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh tables for every test (ASGI lifespan doesn't run with httpx)."""
    await drop_db()
    await init_db()
    yield
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "images"
    path.mkdir()
    monkeypatch.setattr(config, "UPLOAD_IMAGE_DIR", path)
    return path


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def auth_headers(client):
    """Login as admin and return Authorization headers for protected endpoints."""
    r = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "testpass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user():
    async def _make(username, first_name="Jane", last_name="Doe", type=STUDENT, **fields):
        async with async_session_factory() as session:
            user = User(username=username, first_name=first_name, last_name=last_name, type=type, **fields)
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest.fixture
def headers_for():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.username, user.type)}"}

    return _headers


@pytest.fixture
async def student(make_user):
    return await make_user("jxd1234", first_name="Jane", last_name="Doe")


@pytest.fixture
async def admin(make_user):
    return await make_user("boss", first_name="Ada", last_name="Admin", type=ADMIN)


@pytest.fixture
def make_show():
    async def _make(name="Honors Show", entry_cap=2, closed=False):
        now = utcnow()
        entry_end = now - timedelta(hours=1) if closed else now + timedelta(days=7)
        async with async_session_factory() as session:
            show = Show(
                name=name,
                entry_cap=entry_cap,
                entry_start=now - timedelta(days=7),
                entry_end=entry_end,
                judging_start=entry_end + timedelta(days=1),
                judging_end=entry_end + timedelta(days=8),
            )
            session.add(show)
            await session.commit()
            return show

    return _make


@pytest.fixture
async def show(make_show):
    return await make_show()


@pytest.fixture
def count_rows():
    async def _count(model):
        async with async_session_factory() as session:
            return await session.scalar(select(func.count()).select_from(model))

    return _count
