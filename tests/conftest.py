"""
Shared test fixtures for the LawnCare Pro API test suite.

Provides:
- A fresh SQLite database file per test, migrated and seeded
- A ``TestClient`` for the FastAPI app
- Signed-in users (``alice``, ``bob``) with their auth headers
- An empty plan owned by ``alice``

Usage:
    def test_example(client, alice, plan):
        resp = client.get(f"/api/plans/{plan['userPlanId']}", headers=alice.headers)
"""

from __future__ import annotations

import logging

import pytest
from starlette.testclient import TestClient

from lawn_care_api.app.core.config import settings
from lawn_care_api.app.core.db import init_db
from lawn_care_api.app.main import app
from tests.helpers import SignedInUser, create_plan, sign_up_and_in

logging.getLogger("lawn_care_api").setLevel(logging.WARNING)


@pytest.fixture()
def db_path(tmp_path, monkeypatch):
    """Point the app at a throwaway database and apply migrations."""
    path = tmp_path / "lawn_care_test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    init_db()
    return path


@pytest.fixture()
def client(db_path) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def alice(client) -> SignedInUser:
    return sign_up_and_in(client, "alice")


@pytest.fixture()
def bob(client) -> SignedInUser:
    return sign_up_and_in(client, "bob")


@pytest.fixture()
def plan(client, alice) -> dict:
    """An empty new-lawn plan owned by ``alice``."""
    return create_plan(client, alice)
