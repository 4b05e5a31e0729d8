"""Payroll engine error taxonomy."""

from __future__ import annotations

from typing import Any
from uuid import UUID


class PayrollError(Exception):
    """Base class for payroll engine errors."""


class PayrollValidationError(PayrollError):
    """Input rejected before any persistence."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)


class PayrollNotFoundError(PayrollError):
    """Requested entity does not exist."""


class PayrollConflictError(PayrollError):
    """Business rule violation; no state was changed."""


class RunNotFoundError(PayrollNotFoundError):
    def __init__(self, run_id: UUID):
        self.run_id = run_id
        super().__init__(f"Payroll run {run_id} not found")


class ItemNotFoundError(PayrollNotFoundError):
    def __init__(self, item_id: UUID):
        self.item_id = item_id
        super().__init__(f"Payroll item {item_id} not found")


class DuplicatePeriodError(PayrollConflictError):
    def __init__(self, period: str):
        self.period = period
        super().__init__(
            f"Payroll run for {period} already exists. Delete or void it first."
        )


class NoEligibleEmployeesError(PayrollConflictError):
    def __init__(self) -> None:
        super().__init__("No active employees with salary records found.")


class RunNotEditableError(PayrollConflictError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Can only edit items in a DRAFT run (current: {status})")


class InvalidTransitionError(PayrollConflictError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class RunNotDraftError(InvalidTransitionError):
    def __init__(self, from_status: str):
        super().__init__(from_status, "APPROVED", "Only DRAFT runs can be approved")


class CannotVoidPaidError(InvalidTransitionError):
    def __init__(self) -> None:
        super().__init__("PAID", "CANCELLED", "Cannot void a PAID run")
