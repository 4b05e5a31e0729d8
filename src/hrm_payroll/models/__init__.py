"""ORM models."""

from hrm_payroll.models.base import Base, TimestampMixin
from hrm_payroll.models.employee import Employee
from hrm_payroll.models.payroll import AuditEvent, PayrollItem, PayrollRun

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "AuditEvent",
    "PayrollItem",
    "PayrollRun",
]
