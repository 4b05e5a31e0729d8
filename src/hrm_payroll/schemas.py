"""Pydantic models validating engine inputs before any persistence."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from hrm_payroll.calculators.types import PayAdjustments


class PayrollAdjustmentInput(BaseModel):
    """Manual adjustments for one employee in a new run."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    employee_id: UUID
    overtime: Decimal = Decimal("0")
    bonus: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")
    notes: str | None = Field(default=None, max_length=500)

    def to_adjustments(self) -> PayAdjustments:
        return PayAdjustments.from_values(
            overtime=self.overtime,
            bonus=self.bonus,
            allowances=self.allowances,
            other_deductions=self.other_deductions,
        )


class CreatePayrollRunRequest(BaseModel):
    """Schema for creating a payroll run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2020, le=2100)
    employee_ids: list[UUID] | None = None
    adjustments: list[PayrollAdjustmentInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_adjustments(self) -> CreatePayrollRunRequest:
        seen: set[UUID] = set()
        for adj in self.adjustments:
            if adj.employee_id in seen:
                raise ValueError(f"Duplicate adjustment for employee {adj.employee_id}")
            seen.add(adj.employee_id)
        return self

    @property
    def period(self) -> str:
        return period_key(self.year, self.month)


class PayrollItemUpdate(BaseModel):
    """Partial update of an item's adjustments. Omitted fields keep their value."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    overtime: Decimal | None = None
    bonus: Decimal | None = None
    allowances: Decimal | None = None
    other_deductions: Decimal | None = None
    notes: str | None = Field(default=None, max_length=500)


class PageRequest(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


def period_key(year: int, month: int) -> str:
    """Period key for a year and month, e.g. ``2025-03``."""
    return f"{year}-{month:02d}"
