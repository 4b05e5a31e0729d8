"""Jurisdiction tax policies keyed by currency code.

Each currency maps to a policy object that turns a monthly gross amount into
monthly income tax plus the employee social-security contribution. The
mapping is data, loaded from a JSON-shaped table:

{
    "default": "GHS",
    "policies": {
        "GHS": {
            "type": "progressive",
            "periods_per_year": 12,
            "social_security_rate": 0.055,
            "brackets": [
                {"upper": 4380, "rate": 0},
                {"upper": 5700, "rate": 0.05},
                ...
                {"upper": null, "rate": 0.30}
            ]
        },
        "USD": {"type": "flat", "tax_rate": 0.20, "social_security_rate": 0}
    }
}

Bracket upper bounds are cumulative annual amounts; the last bracket is
unbounded. Unknown currency codes fall back to the default policy.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from hrm_payroll.calculators.types import ZERO, TaxResult, to_decimal, to_money


class TaxPolicyConfigError(ValueError):
    """Raised when a tax policy table is malformed."""


@dataclass(frozen=True)
class TaxBracket:
    """Tax bracket for progressive taxation."""

    upper_bound: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.175 for 17.5%


@runtime_checkable
class TaxPolicy(Protocol):
    """Computes monthly tax and social security from monthly gross pay."""

    def compute(self, monthly_gross: Decimal) -> TaxResult:
        ...


@dataclass(frozen=True)
class ProgressiveTaxPolicy:
    """Progressive brackets over annualized pay, flat social security."""

    brackets: tuple[TaxBracket, ...]
    social_security_rate: Decimal
    periods_per_year: int = 12

    def __post_init__(self) -> None:
        if not self.brackets:
            raise TaxPolicyConfigError("Progressive policy needs at least one bracket")
        if self.periods_per_year <= 0:
            raise TaxPolicyConfigError("periods_per_year must be positive")
        previous = ZERO
        for index, bracket in enumerate(self.brackets):
            last = index == len(self.brackets) - 1
            if bracket.rate < 0:
                raise TaxPolicyConfigError("Bracket rates must be non-negative")
            if bracket.upper_bound is None:
                if not last:
                    raise TaxPolicyConfigError("Only the last bracket may be unbounded")
                continue
            if last:
                raise TaxPolicyConfigError("The last bracket must be unbounded")
            if bracket.upper_bound <= previous:
                raise TaxPolicyConfigError("Bracket upper bounds must be strictly increasing")
            previous = bracket.upper_bound

    def annual_tax(self, annual_income: Decimal) -> Decimal:
        """Sum bracket contributions over an annual amount (unrounded)."""
        remaining = annual_income
        lower = ZERO
        tax = ZERO
        for bracket in self.brackets:
            if remaining <= 0:
                break
            if bracket.upper_bound is None:
                taxable = remaining
            else:
                taxable = min(remaining, bracket.upper_bound - lower)
                lower = bracket.upper_bound
            tax += taxable * bracket.rate
            remaining -= taxable
        return tax

    def compute(self, monthly_gross: Decimal) -> TaxResult:
        if monthly_gross <= 0:
            return TaxResult(tax=to_money(ZERO), social_security=to_money(ZERO))
        annual = monthly_gross * self.periods_per_year
        monthly_tax = self.annual_tax(annual) / self.periods_per_year
        return TaxResult(
            tax=to_money(monthly_tax),
            social_security=to_money(monthly_gross * self.social_security_rate),
        )


@dataclass(frozen=True)
class FlatTaxPolicy:
    """Flat percentage tax and social security on monthly gross."""

    tax_rate: Decimal
    social_security_rate: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.tax_rate < 0 or self.social_security_rate < 0:
            raise TaxPolicyConfigError("Flat rates must be non-negative")

    def compute(self, monthly_gross: Decimal) -> TaxResult:
        if monthly_gross <= 0:
            return TaxResult(tax=to_money(ZERO), social_security=to_money(ZERO))
        return TaxResult(
            tax=to_money(monthly_gross * self.tax_rate),
            social_security=to_money(monthly_gross * self.social_security_rate),
        )


# Ghana PAYE (annual cumulative bounds) with SSNIT employee share, Guinea
# flat rates with CNSS employee share, and a flat rate for international
# currencies.
DEFAULT_POLICY_TABLE: dict[str, Any] = {
    "default": "GHS",
    "policies": {
        "GHS": {
            "type": "progressive",
            "periods_per_year": 12,
            "social_security_rate": "0.055",
            "brackets": [
                {"upper": "4380", "rate": "0"},
                {"upper": "5700", "rate": "0.05"},
                {"upper": "7260", "rate": "0.10"},
                {"upper": "45260", "rate": "0.175"},
                {"upper": "237260", "rate": "0.25"},
                {"upper": None, "rate": "0.30"},
            ],
        },
        "GNF": {"type": "flat", "tax_rate": "0.05", "social_security_rate": "0.025"},
        "USD": {"type": "flat", "tax_rate": "0.20", "social_security_rate": "0"},
        "EUR": {"type": "flat", "tax_rate": "0.20", "social_security_rate": "0"},
        "GBP": {"type": "flat", "tax_rate": "0.20", "social_security_rate": "0"},
    },
}


def parse_policy(code: str, payload: Mapping[str, Any]) -> TaxPolicy:
    """Build a policy object from one table entry."""
    policy_type = payload.get("type")
    try:
        if policy_type == "progressive":
            brackets = tuple(
                TaxBracket(
                    upper_bound=to_decimal(b["upper"]) if b.get("upper") is not None else None,
                    rate=to_decimal(b["rate"]),
                )
                for b in payload["brackets"]
            )
            return ProgressiveTaxPolicy(
                brackets=brackets,
                social_security_rate=to_decimal(payload.get("social_security_rate", 0)),
                periods_per_year=int(payload.get("periods_per_year", 12)),
            )
        if policy_type == "flat":
            return FlatTaxPolicy(
                tax_rate=to_decimal(payload["tax_rate"]),
                social_security_rate=to_decimal(payload.get("social_security_rate", 0)),
            )
    except (KeyError, TypeError, ArithmeticError) as e:
        raise TaxPolicyConfigError(f"Invalid tax policy for '{code}': {e!r}") from e
    raise TaxPolicyConfigError(f"Unknown tax policy type '{policy_type}' for '{code}'")


class TaxPolicyResolver:
    """Maps a currency code to its tax policy, with an explicit default."""

    def __init__(self, policies: Mapping[str, TaxPolicy], default_currency: str):
        normalized = {code.upper(): policy for code, policy in policies.items()}
        default_currency = default_currency.upper()
        if default_currency not in normalized:
            raise TaxPolicyConfigError(
                f"Default currency '{default_currency}' has no tax policy"
            )
        self._policies = normalized
        self.default_currency = default_currency

    @classmethod
    def from_config(
        cls, table: Mapping[str, Any], default_currency: str | None = None
    ) -> TaxPolicyResolver:
        """Build a resolver from a JSON-shaped policy table."""
        entries = table.get("policies")
        if not isinstance(entries, Mapping) or not entries:
            raise TaxPolicyConfigError("Tax policy table needs a non-empty 'policies' mapping")
        policies = {code: parse_policy(code, entry) for code, entry in entries.items()}
        default = default_currency or table.get("default")
        if not default:
            raise TaxPolicyConfigError("Tax policy table needs a 'default' currency")
        return cls(policies, default)

    @classmethod
    def from_file(
        cls, path: str | Path, default_currency: str | None = None
    ) -> TaxPolicyResolver:
        """Load a policy table from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            table = json.load(f)
        return cls.from_config(table, default_currency)

    @classmethod
    def default(cls, default_currency: str | None = None) -> TaxPolicyResolver:
        return cls.from_config(DEFAULT_POLICY_TABLE, default_currency)

    @property
    def currencies(self) -> list[str]:
        return sorted(self._policies)

    def is_supported(self, currency: str | None) -> bool:
        return bool(currency) and currency.upper() in self._policies

    def resolve(self, currency: str | None) -> TaxPolicy:
        """Policy for a currency code, falling back to the default."""
        if currency:
            policy = self._policies.get(currency.upper())
            if policy is not None:
                return policy
        return self._policies[self.default_currency]

    def compute(self, monthly_gross: Any, currency: str | None) -> TaxResult:
        """Monthly tax and social security for an amount in a currency."""
        return self.resolve(currency).compute(to_decimal(monthly_gross))
