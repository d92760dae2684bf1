import os
import tempfile
import uuid

# Point the app at throwaway storage before anything imports todo_api.config
_TMP = tempfile.mkdtemp(prefix="todo_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STATIC_API_KEY"] = "test-static-key"

import pytest
from fastapi.testclient import TestClient

from todo_api.main import app
from todo_api.database import SessionLocal, Base, engine
from todo_api.storage import get_s3_storage
from todo_api.utils.auth import pwd_context
from todo_api.utils.revocation import revoked_tokens

from fakes import InMemoryStorage

# bcrypt's minimum cost keeps the suite fast
pwd_context.update(bcrypt__rounds=4)


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    revoked_tokens.clear()
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_s3():
    storage = InMemoryStorage()
    app.dependency_overrides[get_s3_storage] = lambda: storage
    return storage


@pytest.fixture
def make_user(client):
    """Register and log in a fresh user; returns (username, user_id, headers)."""
    def _make(username=None, password="Pass123!"):
        username = username or f"user_{uuid.uuid4().hex[:8]}"
        r = client.post("/register", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        r = client.post("/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return username, body["user_id"], {"Authorization": f"Bearer {body['token']}"}
    return _make
