"""Payroll run, payroll item and audit models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrm_payroll.models.base import Base, TimestampMixin

ZERO = Decimal("0")


# ===== Payroll Run =====


class PayrollRun(Base, TimestampMixin):
    """One payroll batch for a calendar period."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="DRAFT")
    total_gross: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("period", name="payroll_run_period_unique"),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_run_month_check"),
        CheckConstraint(
            "status IN ('DRAFT', 'APPROVED', 'PAID', 'CANCELLED')",
            name="payroll_run_status_check",
        ),
    )

    # Relationships
    items: Mapped[list[PayrollItem]] = relationship(
        back_populates="run",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PayrollItem.employee_name",
    )


# ===== Payroll Item =====


class PayrollItem(Base, TimestampMixin):
    """One employee's computed pay line within a run.

    Base salary, currency and employee name are snapshots taken when the
    run was created. Later employee changes never flow back into an item.
    """

    __tablename__ = "payroll_item"

    payroll_item_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_name: Mapped[str] = mapped_column(String, nullable=False, default="")

    # Snapshot and manual adjustments
    base_salary: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    overtime: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    bonus: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    allowances: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    other_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)

    # Computed values
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    social_security: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payroll_item_run_employee_unique"),
        CheckConstraint("net_pay >= 0", name="payroll_item_net_non_negative"),
    )

    # Relationships
    run: Mapped[PayrollRun] = relationship(back_populates="items")


# ===== Audit =====


class AuditEvent(Base, TimestampMixin):
    """Audit trail entry."""

    __tablename__ = "audit_event"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    actor_id: Mapped[UUID | None] = mapped_column(nullable=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    details: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
