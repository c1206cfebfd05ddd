"""API test fixtures: an httpx client over the ASGI app sharing the test session."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.api.app import create_app
from workforce_engine.api.dependencies import get_db_session
from workforce_engine.models import UserAccount
from workforce_engine.security import create_access_token


def bearer(user: UserAccount) -> dict[str, str]:
    token = create_access_token({"sub": str(user.user_id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB dependency pointed at the test session."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_db_session] = override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_headers(admin_user: UserAccount) -> dict[str, str]:
    return bearer(admin_user)


@pytest_asyncio.fixture
async def manager_headers(manager_user: UserAccount) -> dict[str, str]:
    return bearer(manager_user)


@pytest_asyncio.fixture
async def employee_headers(employee_user: UserAccount) -> dict[str, str]:
    return bearer(employee_user)


@pytest_asyncio.fixture
async def other_employee_headers(other_employee_user: UserAccount) -> dict[str, str]:
    return bearer(other_employee_user)
