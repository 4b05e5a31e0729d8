"""Payroll run state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from hrm_payroll.services.errors import InvalidTransitionError


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Allowed transitions:
    - DRAFT → APPROVED
    - DRAFT → CANCELLED
    - APPROVED → PAID (external settlement)
    - APPROVED → CANCELLED
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollRunStatus.DRAFT: [PayrollRunStatus.APPROVED, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.APPROVED: [PayrollRunStatus.PAID, PayrollRunStatus.CANCELLED],
        PayrollRunStatus.PAID: [],  # Terminal state
        PayrollRunStatus.CANCELLED: [],  # Terminal state
    }

    # Statuses where items may be edited
    ITEMS_MUTABLE = {PayrollRunStatus.DRAFT}

    # Statuses counted in financial summaries
    REPORTABLE = {PayrollRunStatus.APPROVED, PayrollRunStatus.PAID}

    TERMINAL = {PayrollRunStatus.PAID, PayrollRunStatus.CANCELLED}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_modify_items(cls, status: str) -> bool:
        return status in cls.ITEMS_MUTABLE

    @classmethod
    def is_reportable(cls, status: str) -> bool:
        return status in cls.REPORTABLE

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def voidable_statuses(cls) -> list[str]:
        """Statuses from which a run may be cancelled."""
        return [
            status.value
            for status, targets in cls.VALID_TRANSITIONS.items()
            if PayrollRunStatus.CANCELLED in targets
        ]
