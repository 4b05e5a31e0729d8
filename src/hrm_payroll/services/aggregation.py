"""Run totals and multi-currency summaries.

Totals are always re-derived from the full item collection, never patched
incrementally, so they stay correct regardless of update ordering.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from hrm_payroll.calculators.types import ZERO, to_money


class _ItemAmounts(Protocol):
    currency: str
    gross_pay: Decimal
    net_pay: Decimal
    tax: Decimal
    social_security: Decimal


@dataclass(frozen=True)
class RunTotals:
    gross: Decimal
    net: Decimal


@dataclass
class CurrencySummary:
    """Accumulated figures for one currency."""

    gross: Decimal = ZERO
    net: Decimal = ZERO
    tax: Decimal = ZERO
    social_security: Decimal = ZERO
    count: int = 0

    def add(self, item: _ItemAmounts) -> None:
        self.gross += item.gross_pay
        self.net += item.net_pay
        self.tax += item.tax
        self.social_security += item.social_security
        self.count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "gross": self.gross,
            "net": self.net,
            "tax": self.tax,
            "socialSecurity": self.social_security,
            "count": self.count,
        }


def run_totals(items: Iterable[Any]) -> RunTotals:
    """Sum gross and net pay across an item collection."""
    gross = ZERO
    net = ZERO
    for item in items:
        gross += item.gross_pay
        net += item.net_pay
    return RunTotals(gross=to_money(gross), net=to_money(net))


@dataclass
class YearlySummary:
    year: int
    by_currency: dict[str, CurrencySummary] = field(default_factory=dict)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {code: summary.to_dict() for code, summary in sorted(self.by_currency.items())}


def yearly_summary_by_currency(year: int, items: Iterable[_ItemAmounts]) -> YearlySummary:
    """Group qualifying items by currency.

    Callers pass only items from APPROVED or PAID runs of ``year``.
    """
    summary = YearlySummary(year=year)
    for item in items:
        bucket = summary.by_currency.setdefault(item.currency, CurrencySummary())
        bucket.add(item)
    return summary
