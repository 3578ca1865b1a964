# tests/conftest.py
import os

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "9f3b2c7e1a4d8f6b0c5e2a9d7f1b3c8e5d4a6b2c"
os.environ["CSRF_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_DIR"] = os.path.join(os.path.dirname(__file__), ".logs")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from creditdesk.database import Base, get_db
from creditdesk.main import app
from creditdesk.models.user import UserRole
from creditdesk.services.search_provider import SearchProviderClient, get_search_provider
from creditdesk.services.user_service import UserService
import creditdesk.models  # noqa: F401

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"
USER_PASSWORD = "UserPass123"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'creditdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def provider_state():
    """Mutable knobs for the fake search provider."""
    return {
        "submit": {"success": True, "id": "ext-1"},
        "submit_status": 200,
        "status": {"finalizado": False},
        "download": b"PK\x03\x04fake-xlsx",
        "requests": [],
    }


@pytest.fixture
def provider(provider_state):
    def handler(request: httpx.Request) -> httpx.Response:
        provider_state["requests"].append(request)
        if request.url.path == "/search":
            return httpx.Response(provider_state["submit_status"], json=provider_state["submit"])
        if request.url.path == "/status":
            return httpx.Response(200, json=provider_state["status"])
        if request.url.path == "/download":
            return httpx.Response(200, content=provider_state["download"])
        return httpx.Response(404)

    return SearchProviderClient(
        search_url="https://provider.test/search",
        status_url="https://provider.test/status",
        download_url="https://provider.test/download",
        token="test-token",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
async def client(session_factory, provider):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_provider] = lambda: provider
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(session_factory):
    async with session_factory() as session:
        return await UserService(session).create(
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            first_name="Admin",
            last_name="Root",
            role=UserRole.ADMIN,
        )


@pytest.fixture
def make_user(session_factory):
    """Create a regular user directly through the directory service."""
    async def _make(email: str, credits: int = 0):
        async with session_factory() as session:
            return await UserService(session).create(
                email=email,
                password=USER_PASSWORD,
                first_name="Test",
                last_name="User",
                credits=credits,
            )
    return _make


async def login(client: httpx.AsyncClient, email: str, password: str) -> httpx.Response:
    client.cookies.clear()
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
async def admin_client(client, admin_user):
    await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    return client


@pytest.fixture
def login_as(client):
    """Sign ``client`` in as the given account, replacing any previous session."""
    async def _login(email: str, password: str = USER_PASSWORD) -> httpx.Response:
        return await login(client, email, password)
    return _login
