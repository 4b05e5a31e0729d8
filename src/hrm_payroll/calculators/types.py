"""Type definitions for the pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric input to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def to_money(value: Any) -> Decimal:
    """Round to two decimal places, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxResult:
    """Monthly income tax and employee social-security contribution."""

    tax: Decimal
    social_security: Decimal

    @property
    def total(self) -> Decimal:
        return self.tax + self.social_security


@dataclass(frozen=True)
class PayAdjustments:
    """Manual per-employee adjustments for one run."""

    overtime: Decimal = ZERO
    bonus: Decimal = ZERO
    allowances: Decimal = ZERO
    other_deductions: Decimal = ZERO

    @classmethod
    def from_values(
        cls,
        overtime: Any = None,
        bonus: Any = None,
        allowances: Any = None,
        other_deductions: Any = None,
    ) -> PayAdjustments:
        return cls(
            overtime=to_money(overtime),
            bonus=to_money(bonus),
            allowances=to_money(allowances),
            other_deductions=to_money(other_deductions),
        )


@dataclass(frozen=True)
class ComputedPay:
    """Fully computed pay line for one employee."""

    base_salary: Decimal
    currency: str
    overtime: Decimal
    bonus: Decimal
    allowances: Decimal
    other_deductions: Decimal
    gross_pay: Decimal
    tax: Decimal
    social_security: Decimal
    net_pay: Decimal
    notes: str | None = None

    def as_item_values(self) -> dict[str, Any]:
        """Column values for a payroll item row."""
        return {
            "base_salary": self.base_salary,
            "currency": self.currency,
            "overtime": self.overtime,
            "bonus": self.bonus,
            "allowances": self.allowances,
            "other_deductions": self.other_deductions,
            "gross_pay": self.gross_pay,
            "tax": self.tax,
            "social_security": self.social_security,
            "net_pay": self.net_pay,
            "notes": self.notes,
        }
