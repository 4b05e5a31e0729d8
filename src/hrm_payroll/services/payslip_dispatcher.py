"""Fire-and-forget payslip delivery after a run is approved.

Each employee gets an independent task, so one failing email or
notification never affects another employee or the approval itself.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from hrm_payroll.models import PayrollItem, PayrollRun
from hrm_payroll.services.directory import EmployeeDirectory
from hrm_payroll.services.sinks import EmailSink, NotificationSink

logger = logging.getLogger(__name__)

PAYSLIP_TITLE = "Payslip Ready"
PAYSLIP_SEVERITY = "SUCCESS"
PAYSLIP_LINK = "/payroll"


def format_amount(amount: Decimal) -> str:
    """Format with thousands separators and two decimals, e.g. ``1,234.50``."""
    return f"{amount:,.2f}"


@dataclass(frozen=True)
class PayslipNotice:
    """Values captured from an item at approval time."""

    employee_id: UUID
    employee_name: str
    period: str
    net_pay: Decimal
    currency: str

    @classmethod
    def from_item(cls, run: PayrollRun, item: PayrollItem) -> PayslipNotice:
        return cls(
            employee_id=item.employee_id,
            employee_name=item.employee_name,
            period=run.period,
            net_pay=item.net_pay,
            currency=item.currency,
        )


class PayslipDispatcher:
    """Schedules payslip email and notification per employee."""

    def __init__(
        self,
        directory: EmployeeDirectory,
        notifications: NotificationSink,
        email: EmailSink,
    ):
        self.directory = directory
        self.notifications = notifications
        self.email = email
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, run: PayrollRun, items: Iterable[PayrollItem]) -> list[asyncio.Task[None]]:
        """Start one delivery task per item and return immediately."""
        notices = [PayslipNotice.from_item(run, item) for item in items]
        tasks = []
        for notice in notices:
            task = asyncio.create_task(
                self.deliver(notice),
                name=f"payslip:{notice.period}:{notice.employee_id}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        logger.info("Dispatching %d payslip(s) for %s", len(tasks), run.period)
        return tasks

    async def drain(self) -> None:
        """Wait for every outstanding delivery task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def deliver(self, notice: PayslipNotice) -> None:
        """Send the email, then the notification. Failures are logged."""
        net_formatted = format_amount(notice.net_pay)

        try:
            employee = await self.directory.find_employee_by_id(notice.employee_id)
        except Exception:
            logger.exception("Directory lookup failed for employee %s", notice.employee_id)
            employee = None

        if employee is not None and employee.email:
            try:
                sent = await self.email.send_payslip_email(
                    employee.email,
                    employee.full_name or notice.employee_name,
                    notice.period,
                    net_formatted,
                    notice.currency,
                )
                if not sent:
                    logger.warning(
                        "Payslip email for %s to %s was not accepted",
                        notice.period,
                        employee.email,
                    )
            except Exception:
                logger.exception(
                    "Payslip email failed for employee %s (%s)",
                    notice.employee_id,
                    notice.period,
                )
        else:
            logger.warning("No email address for employee %s, skipping payslip email", notice.employee_id)

        try:
            await self.notifications.notify(
                notice.employee_id,
                PAYSLIP_TITLE,
                f"Your {notice.period} payslip is ready. Net pay: {notice.currency} {net_formatted}",
                PAYSLIP_SEVERITY,
                PAYSLIP_LINK,
            )
        except Exception:
            logger.exception(
                "Payslip notification failed for employee %s (%s)",
                notice.employee_id,
                notice.period,
            )
