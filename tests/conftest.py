"""Pytest configuration and fixtures for engine and API tests."""
import itertools
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_EMAIL"] = "admin@example.com"

import pytest
from httpx import ASGITransport, AsyncClient

from tournament.models import Category, Player, Registration, Tournament
from tournament.models.base import async_session_factory, drop_db, init_db
from web.api.main import app

_names = itertools.count(1)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db():
    """Fresh schema for each test (ASGI lifespan doesn't run with httpx)."""
    await drop_db()
    await init_db()


@pytest.fixture
async def session(db):
    async with async_session_factory() as s:
        yield s


@pytest.fixture
async def make_category(db):
    """Factory: tournament + category + ``n`` registered players. Returns (tournament_id, category_id, reg_ids)."""

    async def _make(n: int, **category_fields):
        async with async_session_factory() as s:
            idx = next(_names)
            t = Tournament(name=f"Open {idx}", location="Club")
            s.add(t)
            await s.flush()
            c = Category(tournament_id=t.id, name=f"Singles {idx}", **category_fields)
            s.add(c)
            await s.flush()
            reg_ids = []
            for i in range(n):
                p = Player(first_name=f"First{idx}x{i}", last_name=f"Last{idx}x{i}")
                s.add(p)
                await s.flush()
                reg = Registration(tournament_id=t.id, category_id=c.id, player_id=p.id)
                s.add(reg)
                await s.flush()
                reg_ids.append(reg.id)
            await s.commit()
            return t.id, c.id, reg_ids

    return _make


@pytest.fixture
async def client(db):
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
        "/api/v1/auth/login",
        json={"email": "admin@example.com", "password": "testpass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user_headers(client):
    """Register and login a regular (non-admin) user."""
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": "player@example.com", "password": "secret-pass"},
    )
    assert r.status_code == 201, f"Register failed: {r.text}"
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "player@example.com", "password": "secret-pass"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
