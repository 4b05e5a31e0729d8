"""Payroll engine factory wiring settings, storage and collaborators."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrm_payroll.calculators import PayrollItemCalculator, TaxPolicyResolver
from hrm_payroll.config import Settings, configure_logging, get_settings
from hrm_payroll.database import init_db
from hrm_payroll.services import (
    AuditSink,
    EmailSink,
    EmployeeDirectory,
    LoggingEmailSink,
    LoggingNotificationSink,
    NotificationSink,
    PayrollRunService,
    SqlAuditSink,
    SqlEmployeeDirectory,
)


def build_tax_resolver(settings: Settings) -> TaxPolicyResolver:
    """Tax resolver from the configured policy file, or the built-in table."""
    if settings.tax_policy_path:
        return TaxPolicyResolver.from_file(settings.tax_policy_path, settings.primary_currency)
    return TaxPolicyResolver.default(settings.primary_currency)


def create_payroll_service(
    settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    directory: EmployeeDirectory | None = None,
    notifications: NotificationSink | None = None,
    email: EmailSink | None = None,
    audit: AuditSink | None = None,
) -> PayrollRunService:
    """Create and configure the payroll run service.

    Collaborators not supplied fall back to the SQL-backed directory and
    audit trail and to log-only notification and email sinks.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if session_factory is None:
        _, session_factory = init_db(settings.database_url)

    return PayrollRunService(
        session_factory=session_factory,
        directory=directory or SqlEmployeeDirectory(session_factory),
        notifications=notifications or LoggingNotificationSink(),
        email=email or LoggingEmailSink(),
        audit=audit or SqlAuditSink(session_factory),
        calculator=PayrollItemCalculator(build_tax_resolver(settings)),
        settings=settings,
    )
