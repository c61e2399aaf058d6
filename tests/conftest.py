import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from todoapp.app import create_app
from todoapp.config import Settings
from todoapp.infra.document_store import DocumentStore
from todoapp.schemas import RegisterRequest


def user_payload(**overrides) -> dict:
    """Registration body as the web client sends it."""
    body = {
        "firstName": "Alice",
        "lastName": "Liddell",
        "email": "alice@example.com",
        "password": "pw1",
        "dob": "1990-05-04",
        "gender": "Female",
        "username": "alice",
        "purpose": "Personal",
    }
    body.update(overrides)
    return body


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(secret_key="test-secret", data_dir=tmp_path / "data")


@pytest.fixture()
def store(settings: Settings) -> DocumentStore:
    return DocumentStore(settings.data_dir)


@pytest.fixture()
def client(settings: Settings, store: DocumentStore) -> TestClient:
    return TestClient(create_app(settings, store))


@pytest.fixture()
def make_user(store: DocumentStore):
    """Register a user straight through the credential store."""
    from todoapp.auth.users import register

    def _make(**overrides):
        return register(store, RegisterRequest(**user_payload(**overrides)))

    return _make


@pytest.fixture()
def auth_headers(client: TestClient):
    """Register + login over HTTP and return the bearer header for that user."""

    def _headers(**overrides) -> dict:
        body = user_payload(**overrides)
        r = client.post("/api/register", json=body)
        assert r.status_code == 201, r.text
        r = client.post("/api/login", json={"email": body["email"], "password": body["password"]})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _headers
