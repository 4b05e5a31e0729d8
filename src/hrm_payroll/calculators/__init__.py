"""Payroll calculation: tax policies and the item calculator."""

from hrm_payroll.calculators.item_calculator import PayrollItemCalculator
from hrm_payroll.calculators.tax_policy import (
    DEFAULT_POLICY_TABLE,
    FlatTaxPolicy,
    ProgressiveTaxPolicy,
    TaxBracket,
    TaxPolicy,
    TaxPolicyConfigError,
    TaxPolicyResolver,
)
from hrm_payroll.calculators.types import ComputedPay, PayAdjustments, TaxResult, to_money

__all__ = [
    "PayrollItemCalculator",
    "DEFAULT_POLICY_TABLE",
    "FlatTaxPolicy",
    "ProgressiveTaxPolicy",
    "TaxBracket",
    "TaxPolicy",
    "TaxPolicyConfigError",
    "TaxPolicyResolver",
    "ComputedPay",
    "PayAdjustments",
    "TaxResult",
    "to_money",
]
