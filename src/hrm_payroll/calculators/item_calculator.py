"""Gross-to-net computation for a single payroll item."""

from __future__ import annotations

from typing import Any

from hrm_payroll.calculators.tax_policy import TaxPolicyResolver
from hrm_payroll.calculators.types import ZERO, ComputedPay, PayAdjustments, to_money


class PayrollItemCalculator:
    """Combines base salary, adjustments and the tax policy into a pay line.

    Overtime, bonus and allowances are taxable and feed the tax policy
    through gross pay. Other deductions are taken after tax. Net pay is
    floored at zero.

    The calculator is pure: same inputs, same output, no I/O.
    """

    def __init__(self, resolver: TaxPolicyResolver | None = None):
        self.resolver = resolver or TaxPolicyResolver.default()

    def calculate(
        self,
        base_salary: Any,
        currency: str | None,
        adjustments: PayAdjustments | None = None,
        notes: str | None = None,
    ) -> ComputedPay:
        adj = adjustments or PayAdjustments()
        base = to_money(base_salary)
        overtime = to_money(adj.overtime)
        bonus = to_money(adj.bonus)
        allowances = to_money(adj.allowances)
        other_deductions = to_money(adj.other_deductions)

        gross = base + overtime + bonus + allowances
        taxes = self.resolver.compute(gross, currency)
        net = max(ZERO, gross - taxes.tax - taxes.social_security - other_deductions)

        return ComputedPay(
            base_salary=base,
            currency=(currency or self.resolver.default_currency).upper(),
            overtime=overtime,
            bonus=bonus,
            allowances=allowances,
            other_deductions=other_deductions,
            gross_pay=gross,
            tax=taxes.tax,
            social_security=taxes.social_security,
            net_pay=to_money(net),
            notes=notes,
        )
