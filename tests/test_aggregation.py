"""Unit tests for run totals and yearly summaries."""

from decimal import Decimal
from types import SimpleNamespace

from hrm_payroll.services.aggregation import run_totals, yearly_summary_by_currency


def make_item(currency, gross, net, tax="0", social_security="0"):
    return SimpleNamespace(
        currency=currency,
        gross_pay=Decimal(gross),
        net_pay=Decimal(net),
        tax=Decimal(tax),
        social_security=Decimal(social_security),
    )


class TestRunTotals:
    def test_sums_gross_and_net(self):
        items = [make_item("GHS", "3500.00", "2782.37"), make_item("USD", "5000.00", "4000.00")]

        totals = run_totals(items)

        assert totals.gross == Decimal("8500.00")
        assert totals.net == Decimal("6782.37")

    def test_empty_collection(self):
        totals = run_totals([])

        assert totals.gross == Decimal("0.00")
        assert totals.net == Decimal("0.00")

    def test_recomputing_is_idempotent(self):
        items = [make_item("GHS", "0.10", "0.10") for _ in range(10)]

        assert run_totals(items) == run_totals(items)
        assert run_totals(items).gross == Decimal("1.00")


class TestYearlySummary:
    def test_groups_by_currency(self):
        items = [
            make_item("GHS", "3500.00", "2782.37", "525.13", "192.50"),
            make_item("GHS", "10000.00", "7320.25", "2129.75", "550.00"),
            make_item("USD", "5000.00", "4000.00", "1000.00"),
        ]

        summary = yearly_summary_by_currency(2025, items)

        assert summary.year == 2025
        assert set(summary.by_currency) == {"GHS", "USD"}
        ghs = summary.by_currency["GHS"]
        assert ghs.gross == Decimal("13500.00")
        assert ghs.net == Decimal("10102.62")
        assert ghs.tax == Decimal("2654.88")
        assert ghs.social_security == Decimal("742.50")
        assert ghs.count == 2
        assert summary.by_currency["USD"].count == 1

    def test_to_dict(self):
        summary = yearly_summary_by_currency(2025, [make_item("USD", "100", "80", "20")])

        assert summary.to_dict() == {
            "USD": {
                "gross": Decimal("100"),
                "net": Decimal("80"),
                "tax": Decimal("20"),
                "socialSecurity": Decimal("0"),
                "count": 1,
            }
        }

    def test_no_items(self):
        assert yearly_summary_by_currency(2025, []).by_currency == {}
