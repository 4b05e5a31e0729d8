"""Unit tests for payslip delivery after approval."""

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from hrm_payroll.services.directory import EmployeeRecord
from hrm_payroll.services.payslip_dispatcher import PayslipDispatcher, format_amount

from tests.conftest import RecordingEmailSink, RecordingNotificationSink


class FakeDirectory:
    def __init__(self, records, fail_for=()):
        self.records = {r.employee_id: r for r in records}
        self.fail_for = set(fail_for)

    async def find_active_employees_with_salary(self, id_filter=None):
        return list(self.records.values())

    async def find_employee_by_id(self, employee_id):
        if employee_id in self.fail_for:
            raise RuntimeError("directory offline")
        return self.records.get(employee_id)


def record(name, email):
    return EmployeeRecord(
        employee_id=uuid4(),
        full_name=name,
        base_salary=Decimal("1000"),
        currency="GHS",
        email=email,
    )


def item_for(employee, net="1234.5", currency="GHS"):
    return SimpleNamespace(
        employee_id=employee.employee_id,
        employee_name=employee.full_name,
        net_pay=Decimal(net),
        currency=currency,
    )


RUN = SimpleNamespace(period="2025-03")


def test_format_amount():
    assert format_amount(Decimal("1234.5")) == "1,234.50"
    assert format_amount(Decimal("0")) == "0.00"
    assert format_amount(Decimal("1850000")) == "1,850,000.00"


async def test_one_email_and_one_notification_per_employee():
    ama, kofi = record("Ama", "ama@example.com"), record("Kofi", "kofi@example.com")
    notifications, emails = RecordingNotificationSink(), RecordingEmailSink()
    dispatcher = PayslipDispatcher(FakeDirectory([ama, kofi]), notifications, emails)

    tasks = dispatcher.dispatch(RUN, [item_for(ama), item_for(kofi, "500")])
    await dispatcher.drain()

    assert len(tasks) == 2
    assert dispatcher.pending == 0
    assert sorted(e["to"] for e in emails.sent) == ["ama@example.com", "kofi@example.com"]
    assert {n["employee_id"] for n in notifications.sent} == {ama.employee_id, kofi.employee_id}

    ama_mail = next(e for e in emails.sent if e["to"] == "ama@example.com")
    assert ama_mail == {
        "to": "ama@example.com",
        "name": "Ama",
        "period": "2025-03",
        "net_pay": "1,234.50",
        "currency": "GHS",
    }
    ama_note = next(n for n in notifications.sent if n["employee_id"] == ama.employee_id)
    assert ama_note["title"] == "Payslip Ready"
    assert ama_note["message"] == "Your 2025-03 payslip is ready. Net pay: GHS 1,234.50"
    assert ama_note["severity"] == "SUCCESS"
    assert ama_note["link"] == "/payroll"


async def test_failures_are_isolated_per_employee():
    ama, kofi, yaa = (
        record("Ama", "ama@example.com"),
        record("Kofi", "kofi@example.com"),
        record("Yaa", "yaa@example.com"),
    )
    notifications = RecordingNotificationSink(fail_for={ama.employee_id})
    emails = RecordingEmailSink(fail_for={"kofi@example.com"})
    directory = FakeDirectory([ama, kofi, yaa], fail_for={yaa.employee_id})
    dispatcher = PayslipDispatcher(directory, notifications, emails)

    dispatcher.dispatch(RUN, [item_for(ama), item_for(kofi), item_for(yaa)])
    await dispatcher.drain()

    # Ama: email sent, notification failed
    assert [e["to"] for e in emails.sent] == ["ama@example.com"]
    # Kofi: email failed, notification still sent; Yaa: lookup failed, still notified
    assert {n["employee_id"] for n in notifications.sent} == {kofi.employee_id, yaa.employee_id}


async def test_employee_without_email_is_still_notified():
    ama = record("Ama", None)
    notifications, emails = RecordingNotificationSink(), RecordingEmailSink()
    dispatcher = PayslipDispatcher(FakeDirectory([ama]), notifications, emails)

    dispatcher.dispatch(RUN, [item_for(ama)])
    await dispatcher.drain()

    assert emails.sent == []
    assert len(notifications.sent) == 1


async def test_rejected_email_does_not_raise():
    ama = record("Ama", "ama@example.com")
    notifications = RecordingNotificationSink()
    emails = RecordingEmailSink(reject_for={"ama@example.com"})
    dispatcher = PayslipDispatcher(FakeDirectory([ama]), notifications, emails)

    dispatcher.dispatch(RUN, [item_for(ama)])
    await dispatcher.drain()

    assert len(emails.sent) == 1
    assert len(notifications.sent) == 1


async def test_dispatch_returns_before_delivery():
    ama = record("Ama", "ama@example.com")
    notifications, emails = RecordingNotificationSink(), RecordingEmailSink()
    dispatcher = PayslipDispatcher(FakeDirectory([ama]), notifications, emails)

    dispatcher.dispatch(RUN, [item_for(ama)])

    assert dispatcher.pending == 1
    assert notifications.sent == []
    await dispatcher.drain()
    assert len(notifications.sent) == 1
