"""Notification, email and audit collaborators."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrm_payroll.models import AuditEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Pushes an in-app notification to one user."""

    async def notify(
        self,
        employee_id: UUID,
        title: str,
        message: str,
        severity: str,
        link: str | None = None,
    ) -> None:
        ...


@runtime_checkable
class EmailSink(Protocol):
    """Sends payslip emails. Returns whether the mail was accepted."""

    async def send_payslip_email(
        self,
        to: str,
        name: str,
        period: str,
        net_pay_formatted: str,
        currency: str,
    ) -> bool:
        ...


@runtime_checkable
class AuditSink(Protocol):
    """Records who did what to which entity."""

    async def log_action(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        ...


class LoggingNotificationSink:
    """Notification sink that only writes to the log."""

    async def notify(
        self,
        employee_id: UUID,
        title: str,
        message: str,
        severity: str,
        link: str | None = None,
    ) -> None:
        logger.info("Notify %s [%s] %s: %s", employee_id, severity, title, message)


class LoggingEmailSink:
    """Email sink that only writes to the log."""

    async def send_payslip_email(
        self,
        to: str,
        name: str,
        period: str,
        net_pay_formatted: str,
        currency: str,
    ) -> bool:
        logger.info(
            "Payslip email for %s to %s <%s>: %s %s", period, name, to, currency, net_pay_formatted
        )
        return True


class SqlAuditSink:
    """Audit sink writing ``audit_event`` rows in their own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def log_action(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        async with self.session_factory() as session:
            session.add(
                AuditEvent(
                    actor_id=actor_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    details=details,
                )
            )
            await session.commit()
