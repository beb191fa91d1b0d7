"""Shared fixtures: an in-memory SQLite engine per test and an app bound to it."""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from meresahar.core.security import create_admin
from meresahar.db.base import Base
from meresahar.db.session import build_engine
from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.main import create_app
from meresahar.services.lifecycle import submit_issue

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(64))
OTHER_PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(64, 160))

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


class BrokenStore(IssueStore):
    """Store whose every operation fails as if the database were down."""

    def __init__(self):
        pass

    def _connect(self, operation):
        raise StoreUnavailable(operation)


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> IssueStore:
    return IssueStore(engine)


@pytest.fixture
def app(engine):
    return create_app(engine)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client, app) -> dict:
    db = app.state.session_factory()
    try:
        create_admin(db, ADMIN_USERNAME, ADMIN_PASSWORD)
    finally:
        db.close()
    resp = client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def make_issue(store: IssueStore, **overrides) -> int:
    fields = {
        "username": "A",
        "category": "Pothole",
        "description": "deep hole",
        "latitude": 12.9,
        "longitude": 77.6,
    }
    fields.update(overrides)
    return submit_issue(store, **fields)
