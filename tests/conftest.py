"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, enable_sqlite_foreign_keys, get_db
from src.main import app
from src.services.errors import StorageError
from src.services.storage import BlobStore, get_blob_store

TEST_STORAGE_BASE_URL = "http://storage.test/journal-images"


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class InMemoryBlobStore(BlobStore):
    """Blob store keeping objects in a dict; can be told to fail."""

    def __init__(self):
        super().__init__(TEST_STORAGE_BASE_URL)
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        if self.fail_uploads:
            raise StorageError(f"Upload of {path} failed: bucket unavailable")
        self.objects[path] = (data, content_type)
        return self.public_url(path)

    def delete(self, path: str) -> None:
        if self.fail_deletes:
            raise StorageError(f"Delete of {path} failed: bucket unavailable")
        self.objects.pop(path, None)

    def has_url(self, url: str) -> bool:
        path = self.path_from_url(url)
        return path is not None and path in self.objects


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/journal_app", "/journal_app_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def blob_store():
    """In-memory blob store shared by the app and the test."""
    return InMemoryBlobStore()


@pytest.fixture(scope="function")
def client(db, blob_store):
    """Create a test client with database and storage overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, password: str = "testpass123", name: str = "Test User"):
    """Register a user and return auth headers for them."""
    response = client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register(client, "other@example.com", name="Other User")


@pytest.fixture
def make_auth_headers(client):
    """Factory registering extra users."""

    def _make(email: str, password: str = "testpass123", name: str = "Test User"):
        return register(client, email, password=password, name=name)

    return _make
