"""Payroll run service - owns the lifecycle of payroll runs.

Operations:
- create_run: snapshot eligible employees into a DRAFT run (one per period)
- update_item: partial adjustment edit with item and run-total recompute
- approve_run: DRAFT → APPROVED, then payslip delivery outside the transaction
- void_run: DRAFT/APPROVED → CANCELLED
- get_runs / get_run_detail / get_my_payslips / get_summary_by_year: reads

Every mutation runs in one transaction. Period uniqueness is enforced by the
database, item edits lock the parent run row, and status changes are
conditional updates whose row count decides the outcome.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from hrm_payroll.calculators.item_calculator import PayrollItemCalculator
from hrm_payroll.calculators.types import ComputedPay, PayAdjustments
from hrm_payroll.config import Settings, get_settings
from hrm_payroll.database import get_session
from hrm_payroll.models import PayrollItem, PayrollRun
from hrm_payroll.schemas import (
    CreatePayrollRunRequest,
    PageRequest,
    PayrollItemUpdate,
)
from hrm_payroll.services.aggregation import YearlySummary, run_totals, yearly_summary_by_currency
from hrm_payroll.services.directory import EmployeeDirectory
from hrm_payroll.services.errors import (
    CannotVoidPaidError,
    DuplicatePeriodError,
    ItemNotFoundError,
    NoEligibleEmployeesError,
    PayrollValidationError,
    RunNotDraftError,
    RunNotEditableError,
    RunNotFoundError,
)
from hrm_payroll.services.payslip_dispatcher import PayslipDispatcher
from hrm_payroll.services.sinks import AuditSink, EmailSink, NotificationSink
from hrm_payroll.services.state_machine import PayrollRunStateMachine, PayrollRunStatus

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ADJUSTMENT_FIELDS = ("overtime", "bonus", "allowances", "other_deductions")


@dataclass
class PayrollRunResult:
    run: PayrollRun
    items: list[PayrollItem]


@dataclass
class PayrollRunPage:
    runs: list[PayrollRun]
    total: int
    page: int
    pages: int


def _validate(model: type[M], **data: Any) -> M:
    try:
        return model(**data)
    except ValidationError as e:
        raise PayrollValidationError(str(e), errors=e.errors()) from e


def _apply(item: PayrollItem, computed: ComputedPay) -> PayrollItem:
    for key, value in computed.as_item_values().items():
        setattr(item, key, value)
    return item


class PayrollRunService:
    """Service for managing the payroll run lifecycle."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        directory: EmployeeDirectory,
        notifications: NotificationSink,
        email: EmailSink,
        audit: AuditSink | None = None,
        calculator: PayrollItemCalculator | None = None,
        settings: Settings | None = None,
    ):
        self.session_factory = session_factory
        self.directory = directory
        self.audit = audit
        self.calculator = calculator or PayrollItemCalculator()
        self.settings = settings or get_settings()
        self.dispatcher = PayslipDispatcher(directory, notifications, email)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_run(
        self,
        month: int,
        year: int,
        employee_ids: Sequence[UUID] | None = None,
        adjustments: Sequence[Any] | None = None,
        actor_id: UUID | None = None,
    ) -> PayrollRunResult:
        """Create a DRAFT run for a period with one item per eligible employee.

        Raises DuplicatePeriodError if the period already has a run and
        NoEligibleEmployeesError if nobody qualifies.
        """
        request = _validate(
            CreatePayrollRunRequest,
            month=month,
            year=year,
            employee_ids=list(employee_ids) if employee_ids is not None else None,
            adjustments=list(adjustments or []),
        )
        period = request.period
        adjustment_map = {a.employee_id: a for a in request.adjustments}

        try:
            async with get_session(self.session_factory) as session:
                existing = await session.scalar(
                    select(PayrollRun.payroll_run_id).where(PayrollRun.period == period)
                )
                if existing is not None:
                    raise DuplicatePeriodError(period)

                employees = await self.directory.find_active_employees_with_salary(
                    request.employee_ids or None
                )
                if not employees:
                    raise NoEligibleEmployeesError()

                run = PayrollRun(
                    period=period,
                    month=request.month,
                    year=request.year,
                    status=PayrollRunStatus.DRAFT.value,
                )
                items = []
                for employee in employees:
                    adj = adjustment_map.get(employee.employee_id)
                    computed = self.calculator.calculate(
                        employee.base_salary,
                        employee.currency or self.calculator.resolver.default_currency,
                        adj.to_adjustments() if adj else PayAdjustments(),
                        notes=adj.notes if adj else None,
                    )
                    item = _apply(
                        PayrollItem(
                            employee_id=employee.employee_id,
                            employee_name=employee.full_name,
                        ),
                        computed,
                    )
                    items.append(item)

                totals = run_totals(items)
                run.total_gross = totals.gross
                run.total_net = totals.net
                run.items = items
                session.add(run)
                await session.flush()
        except IntegrityError as e:
            raise DuplicatePeriodError(period) from e

        logger.info(
            "Created payroll run %s for %s with %d item(s)", run.payroll_run_id, period, len(items)
        )
        await self._record_audit(
            actor_id,
            "PAYROLL_RUN_CREATED",
            run.payroll_run_id,
            {"period": period, "employeeCount": len(items)},
        )
        return PayrollRunResult(run=run, items=items)

    async def update_item(
        self,
        item_id: UUID,
        changes: dict[str, Any] | None = None,
        actor_id: UUID | None = None,
        **fields: Any,
    ) -> PayrollItem:
        """Apply supplied adjustment fields to an item of a DRAFT run.

        Unsupplied fields keep their stored values. The item and the
        run's totals are recomputed from scratch in the same transaction.
        """
        data = _validate(PayrollItemUpdate, **{**(changes or {}), **fields})
        supplied = data.model_dump(exclude_none=True)

        async with get_session(self.session_factory) as session:
            run_id = await session.scalar(
                select(PayrollItem.payroll_run_id).where(PayrollItem.payroll_item_id == item_id)
            )
            if run_id is None:
                raise ItemNotFoundError(item_id)

            # Serializes concurrent edits of items in the same run
            run = await session.scalar(
                select(PayrollRun).where(PayrollRun.payroll_run_id == run_id).with_for_update()
            )
            if not PayrollRunStateMachine.can_modify_items(run.status):
                raise RunNotEditableError(run.status)

            item = await session.scalar(
                select(PayrollItem)
                .where(PayrollItem.payroll_item_id == item_id)
                .execution_options(populate_existing=True)
            )
            current = {key: getattr(item, key) for key in ADJUSTMENT_FIELDS}
            current.update({k: v for k, v in supplied.items() if k in ADJUSTMENT_FIELDS})

            computed = self.calculator.calculate(
                item.base_salary,
                item.currency,
                PayAdjustments.from_values(**current),
                notes=supplied.get("notes", item.notes),
            )
            _apply(item, computed)
            # Write the item first so the re-sum sees every committed sibling
            await session.flush()

            all_items = (
                await session.scalars(
                    select(PayrollItem)
                    .where(PayrollItem.payroll_run_id == run_id)
                    .execution_options(populate_existing=True)
                )
            ).all()
            totals = run_totals(all_items)
            run.total_gross = totals.gross
            run.total_net = totals.net

        logger.info("Updated payroll item %s in run %s", item_id, run_id)
        await self._record_audit(
            actor_id,
            "PAYROLL_ITEM_UPDATED",
            item_id,
            {"runId": str(run_id), "fields": sorted(supplied)},
            entity_type="PayrollItem",
        )
        return item

    async def approve_run(self, run_id: UUID, approver_id: UUID) -> PayrollRun:
        """Approve a DRAFT run and start payslip delivery.

        Delivery is scheduled only after the approval commits and is never
        awaited here.
        """
        async with get_session(self.session_factory) as session:
            run = await session.get(PayrollRun, run_id)
            if run is None:
                raise RunNotFoundError(run_id)
            if not PayrollRunStateMachine.can_transition(run.status, PayrollRunStatus.APPROVED):
                raise RunNotDraftError(run.status)

            # Conditional update: only one concurrent approval can match
            result = await session.execute(
                update(PayrollRun)
                .where(
                    PayrollRun.payroll_run_id == run_id,
                    PayrollRun.status == PayrollRunStatus.DRAFT.value,
                )
                .values(
                    status=PayrollRunStatus.APPROVED.value,
                    approved_by=approver_id,
                    approved_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.refresh(run)
                raise RunNotDraftError(run.status)

            await session.refresh(run)
            items = list(
                (
                    await session.scalars(
                        select(PayrollItem).where(PayrollItem.payroll_run_id == run_id)
                    )
                ).all()
            )

        logger.info("Approved payroll run %s (%s) by %s", run_id, run.period, approver_id)
        await self._record_audit(
            approver_id, "PAYROLL_APPROVED", run_id, {"period": run.period}
        )
        self.dispatcher.dispatch(run, items)
        return run

    async def void_run(self, run_id: UUID, actor_id: UUID | None = None) -> PayrollRun:
        """Cancel a DRAFT or APPROVED run. PAID runs cannot be voided."""
        async with get_session(self.session_factory) as session:
            run = await session.get(PayrollRun, run_id)
            if run is None:
                raise RunNotFoundError(run_id)
            if run.status == PayrollRunStatus.PAID:
                raise CannotVoidPaidError()
            if run.status == PayrollRunStatus.CANCELLED:
                return run

            result = await session.execute(
                update(PayrollRun)
                .where(
                    PayrollRun.payroll_run_id == run_id,
                    PayrollRun.status.in_(PayrollRunStateMachine.voidable_statuses()),
                )
                .values(status=PayrollRunStatus.CANCELLED.value)
                .execution_options(synchronize_session=False)
            )
            await session.refresh(run)
            if result.rowcount == 0:
                if run.status == PayrollRunStatus.PAID:
                    raise CannotVoidPaidError()
                return run

        logger.info("Voided payroll run %s (%s)", run_id, run.period)
        await self._record_audit(actor_id, "PAYROLL_VOIDED", run_id, {"period": run.period})
        return run

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_runs(self, page: int = 1, page_size: int | None = None) -> PayrollRunPage:
        """Runs newest period first, paginated."""
        paging = _validate(PageRequest, page=page, page_size=page_size or self.settings.page_size)

        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(PayrollRun)) or 0
            result = await session.execute(
                select(PayrollRun)
                .order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
                .offset((paging.page - 1) * paging.page_size)
                .limit(paging.page_size)
            )
            runs = list(result.scalars().all())

        return PayrollRunPage(
            runs=runs,
            total=total,
            page=paging.page,
            pages=math.ceil(total / paging.page_size),
        )

    async def get_run_detail(self, run_id: UUID) -> PayrollRun | None:
        """A run with its item snapshots, or None."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(PayrollRun)
                .where(PayrollRun.payroll_run_id == run_id)
                .options(selectinload(PayrollRun.items))
            )
            return result.scalar_one_or_none()

    async def get_my_payslips(self, employee_id: UUID) -> list[PayrollItem]:
        """An employee's items from approved or paid runs, newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(PayrollItem)
                .join(PayrollItem.run)
                .where(
                    PayrollItem.employee_id == employee_id,
                    PayrollRun.status.in_([s.value for s in PayrollRunStateMachine.REPORTABLE]),
                )
                .options(selectinload(PayrollItem.run))
                .order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
            )
            return list(result.scalars().all())

    async def get_summary_by_year(self, year: int) -> YearlySummary:
        """Per-currency totals over APPROVED and PAID runs of a year."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(PayrollItem)
                .join(PayrollItem.run)
                .where(
                    PayrollRun.year == year,
                    PayrollRun.status.in_([s.value for s in PayrollRunStateMachine.REPORTABLE]),
                )
            )
            items = result.scalars().all()
        return yearly_summary_by_currency(year, items)

    async def close(self) -> None:
        """Wait for outstanding payslip deliveries."""
        await self.dispatcher.drain()

    async def _record_audit(
        self,
        actor_id: UUID | None,
        action: str,
        entity_id: UUID,
        details: dict[str, Any] | None = None,
        entity_type: str = "PayrollRun",
    ) -> None:
        """Best-effort audit trail; failures are logged only."""
        if self.audit is None:
            return
        try:
            await self.audit.log_action(actor_id, action, entity_type, str(entity_id), details)
        except Exception:
            logger.exception("Failed to record audit event %s for %s", action, entity_id)
