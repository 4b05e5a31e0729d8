"""Employee directory used to select who is paid in a run."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrm_payroll.models import Employee

ACTIVE_STATUS = "ACTIVE"


@dataclass(frozen=True)
class EmployeeRecord:
    """Directory view of an employee."""

    employee_id: UUID
    full_name: str
    base_salary: Decimal | None
    currency: str | None
    email: str | None


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Read access to employee records."""

    async def find_active_employees_with_salary(
        self, id_filter: Sequence[UUID] | None = None
    ) -> list[EmployeeRecord]:
        """Active employees with a base salary, optionally limited to ``id_filter``."""
        ...

    async def find_employee_by_id(self, employee_id: UUID) -> EmployeeRecord | None:
        ...


class SqlEmployeeDirectory:
    """Employee directory backed by the ``employee`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_active_employees_with_salary(
        self, id_filter: Sequence[UUID] | None = None
    ) -> list[EmployeeRecord]:
        query = select(Employee).where(
            Employee.status == ACTIVE_STATUS,
            Employee.base_salary.is_not(None),
        )
        if id_filter:
            query = query.where(Employee.employee_id.in_(list(id_filter)))
        query = query.order_by(Employee.full_name)

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._to_record(e) for e in result.scalars().all()]

    async def find_employee_by_id(self, employee_id: UUID) -> EmployeeRecord | None:
        async with self.session_factory() as session:
            employee = await session.get(Employee, employee_id)
            return self._to_record(employee) if employee is not None else None

    @staticmethod
    def _to_record(employee: Employee) -> EmployeeRecord:
        return EmployeeRecord(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            base_salary=employee.base_salary,
            currency=employee.currency,
            email=employee.email,
        )
