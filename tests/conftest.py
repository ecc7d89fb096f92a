# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from estate_portal.core.config import Settings
from estate_portal.core.security import hash_password
from estate_portal.core.sessions import MemorySessionStore
from estate_portal.core.storage_utils import ImageStorage
from estate_portal.main import create_app
from estate_portal.models.user import Role, User

API = "/api/v1"


class FakeBucket:
    def __init__(self, objects: dict[str, bytes], bucket: str):
        self.objects = objects
        self.bucket = bucket

    def upload(self, path, file, file_options=None):
        self.objects[path] = file
        return {"Key": f"{self.bucket}/{path}"}

    def get_public_url(self, path):
        return f"https://test.supabase.co/storage/v1/object/public/{self.bucket}/{path}"

    def remove(self, paths):
        for path in paths:
            self.objects.pop(path, None)
        return []


class FakeStorageAPI:
    def __init__(self):
        self.objects: dict[str, bytes] = {}

    def from_(self, bucket):
        return FakeBucket(self.objects, bucket)


class FakeSupabase:
    """Just enough of supabase.Client for ImageStorage."""

    def __init__(self):
        self.storage = FakeStorageAPI()


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "SESSION_BACKEND": "memory",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def app(settings, session_store, fake_supabase):
    return create_app(
        settings,
        session_store=session_store,
        storage=ImageStorage(fake_supabase, bucket="assets"),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(app, client, make_user):
    """A second client, logged in as an Admin."""
    make_user("boss", "boss-pass", Role.ADMIN)
    c = TestClient(app)
    login(c, "boss", "boss-pass")
    return c


@pytest.fixture
def db_session(app, client):
    with Session(app.state.engine) as session:
        yield session


@pytest.fixture
def make_user(db_session):
    def _make(name: str, password: str, role: Role = Role.USER) -> User:
        user = User(name=name, password=hash_password(password), role=role.value)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


def login(client: TestClient, name: str, password: str):
    r = client.post(f"{API}/auth/login", json={"name": name, "password": password})
    assert r.status_code == 200, r.text
    return r.json()
