"""Shared test fixtures for async database, sessions, HTTP client, and auth tokens."""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from saintshub_api.core.config import Settings
from saintshub_api.core.dependencies import get_async_session
from saintshub_api.core.security import create_access_token, hash_password
from saintshub_api.lib.mailer import MailDeliveryError, Recipient
from saintshub_api.lib.storage import ObjectStoreError, StoredObject
from saintshub_api.main import create_app
from saintshub_api.models.base import Base
from saintshub_api.models.user import User

TEST_PASSWORD = "testpassword123"


class FakeMailer:
    """Records messages instead of calling the mail API."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, Recipient]] = []

    async def _record(self, kind: str, user: Recipient) -> bool:
        if self.fail:
            msg = "Mail API returned HTTP 503"
            raise MailDeliveryError(msg, status_code=503)
        self.sent.append((kind, user))
        return True

    async def send_welcome(self, user: Recipient) -> bool:
        return await self._record("welcome", user)

    async def send_admin_notification(self, user: Recipient) -> bool:
        return await self._record("admin_notification", user)

    async def send_approval(self, user: Recipient) -> bool:
        return await self._record("approval", user)

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.sent]


class FakeObjectStore:
    """In-memory image store."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.objects: dict[str, bytes] = {}

    async def put_image(self, content: bytes, content_type: str, *, prefix: str) -> StoredObject:
        if self.fail:
            msg = "bucket unreachable"
            raise ObjectStoreError(msg)
        key = f"{prefix}/{uuid.uuid4().hex}.png"
        self.objects[key] = content
        return StoredObject(storage_id=key, url=f"https://cdn.example.com/{key}")


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production-use",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        environment="test",
        rate_limit_requests=10_000,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Per-test session for seeding and inspecting the database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    mailer: FakeMailer,
    object_store: FakeObjectStore,
) -> FastAPI:
    """Full application wired to the test database and fake collaborators."""
    application = create_app(settings, mailer=mailer, object_store=object_store)  # type: ignore[arg-type]

    async def _session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_async_session] = _session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def make_user(async_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory that inserts a user; keyword arguments override the defaults."""

    async def _make(**overrides: Any) -> User:
        fields: dict[str, Any] = {
            "first_name": "Grace",
            "last_name": "Hopper",
            "email": f"user-{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": hash_password(TEST_PASSWORD),
            "role": "standard",
            "is_admin": False,
        }
        fields.update(overrides)
        user = User(**fields)
        async_session.add(user)
        await async_session.commit()
        await async_session.refresh(user)
        return user

    return _make


@pytest.fixture
def token_for(settings: Settings) -> Callable[[User], str]:
    """Issue an access token for a stored user."""

    def _token(user: User) -> str:
        return create_access_token(
            subject=user.id,
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )

    return _token


@pytest.fixture
def auth_headers(token_for: Callable[[User], str]) -> Callable[[User], dict[str, str]]:
    """Bearer Authorization header for a stored user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers


def _church_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Grace Chapel",
        "location": "Kinshasa, Gombe",
        "image": "https://img.example.com/church.jpg",
        "logo": "https://img.example.com/logo.png",
        "principal": {
            "pastor": "John Mbala",
            "wife": "Ruth Mbala",
            "image": "https://img.example.com/pastor.jpg",
            "description": "Senior pastor",
        },
        "banner": ["https://img.example.com/b1.jpg", "https://img.example.com/b2.jpg"],
        "securities": {
            "deacons": [
                {"names": "Deacon A", "description": "Treasurer"},
                {"names": "Deacon B", "image": "https://img.example.com/db.jpg"},
            ],
            "trustees": [{"names": "Trustee A"}],
        },
        "oldServices": [
            {"title": "Easter", "preacher": "John", "sermon": "He is risen"},
            {"title": "Pentecost", "preacher": "Ruth"},
        ],
        "liveServices": [{"title": "Sunday Live", "preacher": "John"}],
        "gallery": [
            "https://img.example.com/g3.jpg",
            "https://img.example.com/g1.jpg",
            "https://img.example.com/g2.jpg",
        ],
        "songs": [
            {"title": "Song A", "songUrl": "https://music.example.com/a.mp3"},
            {"title": "Song B", "songUrl": "https://music.example.com/b.mp3"},
            {"title": "Song C", "songUrl": "https://music.example.com/c.mp3"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def church_payload() -> Callable[..., dict[str, Any]]:
    """Factory for a church body satisfying the full creation contract."""
    return _church_payload
