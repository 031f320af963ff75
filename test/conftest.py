"""
Pytest configuration and fixtures.
"""
from __future__ import annotations

import re
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.config import Settings
from contactbook.contacts.repository import ContactRepository
from contactbook.main import create_app
from contactbook.shared.database import DatabaseManager

CSRF_TOKEN_RE = re.compile(r'name="csrf_token" value="([^"]+)"')

VALID_CONTACT = {
    "first": "Ada",
    "last": "Lovelace",
    "phone": "123-456-7890",
    "email": "ada@example.com",
}


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        env="development",
        debug=False,
        verbose=False,
        log_level="INFO",
        db_dsn="sqlite+aiosqlite:///:memory:",
        db_auto_create=True,
        session_secret="test-session-secret",
    )


@pytest_asyncio.fixture
async def db_manager(test_settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    """Create a database manager over a fresh in-memory schema."""
    manager = DatabaseManager(test_settings)
    await manager.create_schema()

    yield manager

    await manager.close()


@pytest_asyncio.fixture
async def db_session(db_manager: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with db_manager.session_factory() as session:
        yield session


@pytest.fixture
def contact_repository(db_session: AsyncSession) -> ContactRepository:
    return ContactRepository(session=db_session)


@pytest.fixture
def app(test_settings: Settings, db_manager: DatabaseManager) -> FastAPI:
    """Create the application bound to the test database."""
    return create_app(test_settings, db=db_manager)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for route tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def fetch_csrf_token(client: AsyncClient, url: str = "/contacts/create") -> str:
    """GET a page with a form and return the CSRF token embedded in it."""
    response = await client.get(url)
    assert response.status_code == 200, response.text
    match = CSRF_TOKEN_RE.search(response.text)
    assert match is not None, "page has no CSRF token"
    return match.group(1)


async def seed_contact(db_manager: DatabaseManager, **overrides: str) -> int:
    """Insert a committed contact and return its ID."""
    values = {**VALID_CONTACT, **overrides}
    async with db_manager.session() as session:
        return await ContactRepository(session).insert(**values)
