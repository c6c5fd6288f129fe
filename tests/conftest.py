"""Pytest configuration and fixtures."""

import os
from io import BytesIO

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker

from messageboard import models  # noqa: F401
from messageboard.api.dependencies import get_avatar_ingestor
from messageboard.database import Base, get_db, make_engine
from messageboard.main import app
from messageboard.services.auth import issue_api_key
from messageboard.services.avatar_service import AvatarIngestor

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/board_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

IMAGE_HOST = "https://img.example.com"


def make_image_bytes(size=(200, 100), color="red", image_format="PNG") -> bytes:
    """Render a solid-color image in memory."""
    output = BytesIO()
    Image.new("RGB", size, color).save(output, format=image_format)
    return output.getvalue()


class AvatarHost:
    """Fake remote image host backing an httpx.MockTransport."""

    def __init__(self):
        self.files: dict[str, tuple[int, bytes, dict[str, str]]] = {}
        self.requested: list[str] = []

    def add(self, path: str, content: bytes | None = None, status_code: int = 200) -> str:
        """Serve ``content`` at ``path`` and return its full URL."""
        url = f"{IMAGE_HOST}{path}"
        body = make_image_bytes() if content is None else content
        self.files[url] = (status_code, body, {"Content-Type": "image/png"})
        return url

    def redirect(self, path: str, target: str) -> str:
        url = f"{IMAGE_HOST}{path}"
        self.files[url] = (302, b"", {"Location": target})
        return url

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        if url not in self.files:
            return httpx.Response(404, content=b"not found")
        status_code, body, headers = self.files[url]
        return httpx.Response(status_code, content=body, headers=headers)


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
def make_image():
    """Helper rendering in-memory test images."""
    return make_image_bytes


@pytest.fixture
def avatar_host():
    """Fake image host; register frames with ``avatar_host.add(path)``."""
    return AvatarHost()


@pytest.fixture
def asset_dir(tmp_path):
    """Directory that receives normalized avatar frames."""
    path = tmp_path / "assets"
    path.mkdir()
    return path


@pytest.fixture
def ingestor(asset_dir, avatar_host):
    """Avatar ingestor fetching from the fake host into ``asset_dir``."""
    return AvatarIngestor(
        asset_dir=asset_dir,
        base_url="http://testserver/assets",
        size=64,
        max_bytes=256 * 1024,
        fetch_timeout=2.0,
        max_redirects=2,
        transport=httpx.MockTransport(avatar_host.handler),
    )


@pytest.fixture(scope="function")
def client(db, ingestor):
    """Create a test client with database and avatar host overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_avatar_ingestor] = lambda: ingestor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(db):
    """Headers carrying an API key with the admin scope."""
    key = issue_api_key(db, ["admin"], "test operator")
    return {"X-API-Key": key}


@pytest.fixture
def submit(client, avatar_host):
    """Submit a message from ``name`` with two freshly hosted frames."""

    def _submit(name: str, email: str | None = None, content: str = "hi", avatar=None):
        if avatar is None:
            avatar = [avatar_host.add(f"/{name}/a.png"), avatar_host.add(f"/{name}/b.png")]
        return client.post(
            "/api/v1/messages",
            json={
                "author": {
                    "name": name,
                    "avatar": avatar,
                    "email": email or f"{name}@example.com",
                },
                "content": content,
            },
        )

    return _submit


@pytest.fixture
def session_factory():
    """Factory for extra sessions, one per concurrent caller."""
    return TestingSessionLocal
