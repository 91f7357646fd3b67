"""
Shared test fixtures and configuration for pytest.
"""

import os
import pytest
from typing import AsyncGenerator

# Set test environment before importing staly modules
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_LANGUAGE"] = "en"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["REMOTE_SIGN_IN_URL"] = ""

from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool

from staly.config import get_settings
from staly.container import AppContainer, build_container
from staly.db.database import create_engine, create_session_maker, init_db
from staly.main import create_app
from staly.models.schemas import AppleIDCredential, PersonName
from staly.services.auth_service import LocalAuthService
from staly.services.session_controller import SessionController
from staly.services.stays_service import LocalStaysService
from staly.storage.identity_store import IdentityStore
from staly.storage.kv import InMemoryKeyValueStore, SqlKeyValueStore
from staly.storage.stay_store import StayStore


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============ Storage Fixtures ============

@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
async def async_engine():
    """Create async test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_kv_store(async_engine) -> SqlKeyValueStore:
    """Key-value store over the test database."""
    return SqlKeyValueStore(create_session_maker(async_engine))


@pytest.fixture
def identity_store(kv_store) -> IdentityStore:
    return IdentityStore(kv_store)


@pytest.fixture
def stay_store(kv_store) -> StayStore:
    return StayStore(kv_store)


# ============ Service Fixtures ============

@pytest.fixture
def auth_service(identity_store) -> LocalAuthService:
    """Local auth service with no remote backend."""
    return LocalAuthService(identity_store, min_password_length=4)


@pytest.fixture
def stays_service(stay_store) -> LocalStaysService:
    return LocalStaysService(stay_store)


@pytest.fixture
def session_controller(auth_service):
    """Session controller subscribed to the auth service."""
    controller = SessionController(auth_service)
    yield controller
    controller.close()


@pytest.fixture
async def container(kv_store) -> AsyncGenerator[AppContainer, None]:
    """Fully wired container over the in-memory store."""
    app_container = await build_container(get_settings(), kv=kv_store)
    yield app_container
    await app_container.close()


@pytest.fixture
async def test_client(container) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the test container."""
    app = create_app()
    app.state.container = container

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


# ============ User Fixtures ============

@pytest.fixture
def test_user_data():
    """Test user data."""
    return {
        "email": "Ann@Example.com",
        "password": "pass1",
        "display_name": "Ann",
    }


@pytest.fixture
async def signed_in_client(test_client, test_user_data) -> AsyncClient:
    """Test client with a freshly signed-up session."""
    response = await test_client.post(
        "/api/session/sign-up",
        json={
            "email": test_user_data["email"],
            "password": test_user_data["password"],
            "displayName": test_user_data["display_name"],
        },
    )
    assert response.status_code == 201
    return test_client


# ============ Apple Credential Fixtures ============

@pytest.fixture
def apple_credential():
    """Factory for Apple ID credentials."""

    def make(
        subject: str = "sub1",
        email: str | None = None,
        given_name: str | None = None,
        family_name: str | None = None,
        identity_token: bytes | None = b"header.payload.signature",
    ) -> AppleIDCredential:
        full_name = None
        if given_name or family_name:
            full_name = PersonName(given_name=given_name, family_name=family_name)
        return AppleIDCredential(
            user=subject,
            email=email,
            full_name=full_name,
            identity_token=identity_token,
        )

    return make
