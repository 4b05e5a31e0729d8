"""Integration fixtures backed by a per-test SQLite database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from hrm_payroll.database import create_all, make_session_factory
from hrm_payroll.models import Employee
from hrm_payroll.services import PayrollRunService, SqlEmployeeDirectory


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh file-backed database for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}", echo=False)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def employees(session_factory) -> dict[str, Employee]:
    """Seed the employee directory.

    alice, dana: GHS (progressive); bob: USD (flat 20%); chidi: GNF;
    erin is terminated and femi has no salary, so neither is eligible.
    """
    people = {
        "alice": Employee(
            employee_id=uuid4(),
            full_name="Alice Mensah",
            email="alice@example.com",
            status="ACTIVE",
            base_salary=Decimal("3000"),
            currency="GHS",
        ),
        "bob": Employee(
            employee_id=uuid4(),
            full_name="Bob Carter",
            email="bob@example.com",
            status="ACTIVE",
            base_salary=Decimal("5000"),
            currency="USD",
        ),
        "chidi": Employee(
            employee_id=uuid4(),
            full_name="Chidi Camara",
            email="chidi@example.com",
            status="ACTIVE",
            base_salary=Decimal("2000000"),
            currency="GNF",
        ),
        "dana": Employee(
            employee_id=uuid4(),
            full_name="Dana Owusu",
            email=None,
            status="ACTIVE",
            base_salary=Decimal("10000"),
            currency="GHS",
        ),
        "erin": Employee(
            employee_id=uuid4(),
            full_name="Erin Boateng",
            email="erin@example.com",
            status="TERMINATED",
            base_salary=Decimal("4000"),
            currency="GHS",
        ),
        "femi": Employee(
            employee_id=uuid4(),
            full_name="Femi Adeyemi",
            email="femi@example.com",
            status="ACTIVE",
            base_salary=None,
            currency="GHS",
        ),
    }
    async with session_factory() as session:
        session.add_all(people.values())
        await session.commit()
    return people


@pytest.fixture
def directory(session_factory) -> SqlEmployeeDirectory:
    return SqlEmployeeDirectory(session_factory)


@pytest_asyncio.fixture
async def service(
    session_factory, directory, employees, notifications, emails, audit, test_settings
) -> AsyncGenerator[PayrollRunService, None]:
    svc = PayrollRunService(
        session_factory=session_factory,
        directory=directory,
        notifications=notifications,
        email=emails,
        audit=audit,
        settings=test_settings,
    )
    yield svc
    await svc.close()
