"""Pytest configuration and fixtures."""
import sqlite3
import pytest
from fastapi.testclient import TestClient
import config
import main

JSON = {"Accept": "application/json"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    """App client backed by a fresh database, seeded on startup."""
    monkeypatch.setattr(config, "DB_NAME", str(tmp_path / "test.sqlite3"))
    monkeypatch.setattr(config, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
    monkeypatch.setattr(config, "SMTP_HOST", "")
    monkeypatch.setattr(config, "SEED_DATA", True)
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    """Direct connection to the test database for assertions."""
    conn = sqlite3.connect(config.DB_NAME)
    yield conn
    conn.close()


def login(client, username, password):
    response = client.post("/login", json={"username": username, "password": password}, headers=JSON)
    assert response.status_code == 200, response.text
    return response


def community_id(client, name):
    response = client.get("/communities", headers=JSON)
    assert response.status_code == 200
    for community in response.json()["communities"]:
        if community["name"] == name:
            return community["community_id"]
    raise AssertionError(f"community {name!r} not found")


def create_post(client, community, text="Hello campus"):
    response = client.post("/communities/create-post",
                           json={"post_text": text, "community_id": community}, headers=JSON)
    assert response.status_code == 201, response.text
    return response.json()["post"]
