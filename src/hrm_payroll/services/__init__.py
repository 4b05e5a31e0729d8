"""Payroll engine services."""

from hrm_payroll.services.aggregation import (
    CurrencySummary,
    RunTotals,
    YearlySummary,
    run_totals,
    yearly_summary_by_currency,
)
from hrm_payroll.services.directory import EmployeeDirectory, EmployeeRecord, SqlEmployeeDirectory
from hrm_payroll.services.errors import (
    CannotVoidPaidError,
    DuplicatePeriodError,
    InvalidTransitionError,
    ItemNotFoundError,
    NoEligibleEmployeesError,
    PayrollConflictError,
    PayrollError,
    PayrollNotFoundError,
    PayrollValidationError,
    RunNotDraftError,
    RunNotEditableError,
    RunNotFoundError,
)
from hrm_payroll.services.payroll_run_service import (
    PayrollRunPage,
    PayrollRunResult,
    PayrollRunService,
)
from hrm_payroll.services.payslip_dispatcher import PayslipDispatcher
from hrm_payroll.services.sinks import (
    AuditSink,
    EmailSink,
    LoggingEmailSink,
    LoggingNotificationSink,
    NotificationSink,
    SqlAuditSink,
)
from hrm_payroll.services.state_machine import PayrollRunStateMachine, PayrollRunStatus

__all__ = [
    # Aggregation
    "CurrencySummary",
    "RunTotals",
    "YearlySummary",
    "run_totals",
    "yearly_summary_by_currency",
    # Collaborators
    "EmployeeDirectory",
    "EmployeeRecord",
    "SqlEmployeeDirectory",
    "AuditSink",
    "EmailSink",
    "NotificationSink",
    "LoggingEmailSink",
    "LoggingNotificationSink",
    "SqlAuditSink",
    "PayslipDispatcher",
    # Errors
    "CannotVoidPaidError",
    "DuplicatePeriodError",
    "InvalidTransitionError",
    "ItemNotFoundError",
    "NoEligibleEmployeesError",
    "PayrollConflictError",
    "PayrollError",
    "PayrollNotFoundError",
    "PayrollValidationError",
    "RunNotDraftError",
    "RunNotEditableError",
    "RunNotFoundError",
    # Run manager
    "PayrollRunPage",
    "PayrollRunResult",
    "PayrollRunService",
    "PayrollRunStateMachine",
    "PayrollRunStatus",
]
