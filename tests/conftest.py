"""Pytest fixtures for workforce engine tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.database import create_tables, get_engine, make_session_factory
from workforce_engine.models import Employee, UserAccount
from workforce_engine.security import hash_password
from workforce_engine.services.access_policy import Principal
from workforce_engine.services.auth_service import principal_for_user

# Fresh in-memory SQLite per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def engine():
    """Create test database engine with all tables."""
    engine = get_engine(TEST_DATABASE_URL)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    factory = make_session_factory(engine)
    async with factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Employees
# ============================================================================


@pytest_asyncio.fixture
async def employee(session: AsyncSession) -> Employee:
    """Active employee with pay 25, OT 37.5, vacation 20."""
    emp = Employee(
        employee_code="EMP001",
        name="Nimal Perera",
        position="Technician",
        date_of_employment=date(2023, 1, 9),
        pay_rate=Decimal("25.00"),
        ot_rate=Decimal("37.50"),
        vacation_pay_rate=Decimal("20.00"),
        status="active",
        email="nimal@example.com",
        date_of_birth=date(1990, 5, 17),
    )
    session.add(emp)
    await session.commit()
    return emp


@pytest_asyncio.fixture
async def other_employee(session: AsyncSession) -> Employee:
    emp = Employee(
        employee_code="EMP002",
        name="Kamala Silva",
        position="Supervisor",
        date_of_employment=date(2022, 6, 1),
        pay_rate=Decimal("30.00"),
        ot_rate=Decimal("45.00"),
        vacation_pay_rate=Decimal("25.00"),
        status="active",
    )
    session.add(emp)
    await session.commit()
    return emp


# ============================================================================
# Accounts and principals
# ============================================================================


async def _account(
    session: AsyncSession,
    username: str,
    role: str,
    linked_employee_id=None,
) -> UserAccount:
    user = UserAccount(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        linked_employee_id=linked_employee_id,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(session: AsyncSession) -> UserAccount:
    return await _account(session, "admin", "admin")


@pytest_asyncio.fixture
async def manager_user(session: AsyncSession) -> UserAccount:
    return await _account(session, "manager", "manager")


@pytest_asyncio.fixture
async def employee_user(session: AsyncSession, employee: Employee) -> UserAccount:
    return await _account(session, "nimal", "employee", employee.employee_id)


@pytest_asyncio.fixture
async def other_employee_user(session: AsyncSession, other_employee: Employee) -> UserAccount:
    return await _account(session, "kamala", "employee", other_employee.employee_id)


@pytest_asyncio.fixture
async def admin(admin_user: UserAccount) -> Principal:
    return principal_for_user(admin_user)


@pytest_asyncio.fixture
async def manager(manager_user: UserAccount) -> Principal:
    return principal_for_user(manager_user)


@pytest_asyncio.fixture
async def employee_principal(employee_user: UserAccount) -> Principal:
    return principal_for_user(employee_user)


@pytest_asyncio.fixture
async def other_employee_principal(other_employee_user: UserAccount) -> Principal:
    return principal_for_user(other_employee_user)
