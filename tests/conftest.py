"""Pytest fixtures shared by the payroll engine tests."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import pytest

from hrm_payroll.config import Settings


class RecordingNotificationSink:
    """Notification sink that records calls and can fail for chosen employees."""

    def __init__(self, fail_for: set[UUID] | None = None):
        self.fail_for = fail_for or set()
        self.sent: list[dict[str, Any]] = []

    async def notify(self, employee_id, title, message, severity, link=None) -> None:
        if employee_id in self.fail_for:
            raise RuntimeError("push channel unavailable")
        self.sent.append(
            {
                "employee_id": employee_id,
                "title": title,
                "message": message,
                "severity": severity,
                "link": link,
            }
        )


class RecordingEmailSink:
    """Email sink that records calls and can fail for chosen addresses."""

    def __init__(self, fail_for: set[str] | None = None, reject_for: set[str] | None = None):
        self.fail_for = fail_for or set()
        self.reject_for = reject_for or set()
        self.sent: list[dict[str, Any]] = []

    async def send_payslip_email(self, to, name, period, net_pay_formatted, currency) -> bool:
        if to in self.fail_for:
            raise ConnectionError("SMTP connection refused")
        self.sent.append(
            {
                "to": to,
                "name": name,
                "period": period,
                "net_pay": net_pay_formatted,
                "currency": currency,
            }
        )
        return to not in self.reject_for


class RecordingAuditSink:
    """Audit sink that records actions, optionally failing every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.actions: list[tuple[Any, ...]] = []

    async def log_action(self, actor_id, action, entity_type, entity_id, details=None) -> None:
        if self.fail:
            raise RuntimeError("audit store down")
        self.actions.append((actor_id, action, entity_type, entity_id, details))


@pytest.fixture
def test_settings() -> Settings:
    """Settings that do not depend on the environment."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        engine_version="test",
        primary_currency="GHS",
        tax_policy_path=None,
        page_size=20,
        log_level="DEBUG",
        debug=False,
    )


@pytest.fixture
def notifications() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def emails() -> RecordingEmailSink:
    return RecordingEmailSink()


@pytest.fixture
def audit() -> RecordingAuditSink:
    return RecordingAuditSink()
