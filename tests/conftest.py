from datetime import datetime

import mongomock
import pytest
from fastapi.testclient import TestClient

from clock import FixedClock, get_clock
from database import ensure_indexes, get_db
from main import app

# 固定起始时间：2026-03-02 09:00:00 (UTC)
START = datetime(2026, 3, 2, 9, 0, 0)
DAY = "2026-03-02"


@pytest.fixture
def db():
    database = mongomock.MongoClient()["time_ledger_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def client(db, clock):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, username):
    response = client.post("/api/auth/login", json={"username": username})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def headers(client):
    """ana 的认证头"""
    return login(client, "ana")


@pytest.fixture
def other_headers(client):
    return login(client, "bruno")
