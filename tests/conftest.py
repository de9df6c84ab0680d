"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from crisper.app.config import settings
from crisper.app.db import close_engine, init_db
from crisper.main import create_app

PASSWORD = "secret123"


@pytest.fixture
def crisper_env(tmp_path, monkeypatch):
    """Point the backend at a throwaway SQLite file and upload directory."""
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'crisper.db'}")
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))
    yield tmp_path
    asyncio.run(close_engine())


@pytest.fixture
def db(crisper_env):
    """An initialised, empty database for service-level tests."""
    asyncio.run(init_db())
    return crisper_env


@pytest.fixture
def client(crisper_env):
    app = create_app()
    with TestClient(app) as c:
        yield c


def register(client: TestClient, name: str, email: str, password: str = PASSWORD) -> int:
    resp = client.post(
        "/api/users/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["info"]["id"]


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    resp = client.post("/api/users/signin", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def alice(client):
    """(user id, auth headers) for a freshly registered user."""
    user_id = register(client, "Alice", "alice@example.com")
    return user_id, login(client, "alice@example.com")


@pytest.fixture
def bob(client):
    user_id = register(client, "Bob", "bob@example.com")
    return user_id, login(client, "bob@example.com")
