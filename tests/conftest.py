import base64
import os

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so tests never touch the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from issue_api.main import app  # noqa: E402
from issue_api.store import InMemoryDocumentStore, StoreError, get_store  # noqa: E402

REPORTER_EMAIL = "reporter@example.com"
REPORTER_PASSWORD = "s3cret-pass"


def basic_auth_headers(email: str, password: str) -> dict:
    token = base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class FlakyStore(InMemoryDocumentStore):
    """In-memory store whose issue collection can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.issues_down = False

    def _check(self, collection: str) -> None:
        if self.issues_down and collection == "issues":
            raise StoreError("connection reset")

    def insert_one(self, collection, document):
        self._check(collection)
        return super().insert_one(collection, document)

    def find(self, collection, filters=None, order_by=None, descending=False):
        self._check(collection)
        return super().find(collection, filters, order_by, descending)

    def get(self, collection, doc_id):
        self._check(collection)
        return super().get(collection, doc_id)

    def update_field(self, collection, doc_id, field, value):
        self._check(collection)
        return super().update_field(collection, doc_id, field, value)


@pytest.fixture
def store():
    s = FlakyStore()
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def auth_client(client):
    res = client.post("/api/v1/auth/signup", json={"email": REPORTER_EMAIL, "password": REPORTER_PASSWORD})
    assert res.status_code == 201
    return TestClient(app, headers=basic_auth_headers(REPORTER_EMAIL, REPORTER_PASSWORD))
