"""Tests for the VAT and corporate tax calculators."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from ledgerly.domain import tax
from ledgerly.domain.entities import (
    Transaction,
    TransactionCategory,
    TransactionFolder,
    TransactionStatus,
    VATType,
)
from ledgerly.domain.errors import UnknownCountryError, ValidationError
from ledgerly.domain.reference_data import TAX_RATES


def supply(amount, vat_rate, kind, day):
    amount = Decimal(amount)
    vat_rate = Decimal(vat_rate)
    return tax.TaxableSupply(
        amount=amount,
        vat_rate=vat_rate,
        vat_amount=amount * vat_rate / 100,
        type=kind,
        date=day,
    )


class TestCalculateVAT:
    """Tests for calculate_vat and calculate_vat_from_gross."""

    def test_gb_standard(self):
        result = tax.calculate_vat(1000, "GB", VATType.STANDARD)

        assert result.vat_rate == Decimal("20")
        assert result.vat_amount == Decimal("200")
        assert result.gross_amount == Decimal("1200")
        assert result.net_amount == Decimal("1000")
        assert result.country == "United Kingdom"
        assert result.vat_type == VATType.STANDARD

    def test_country_code_is_case_insensitive(self):
        assert tax.calculate_vat(100, "gb").vat_amount == Decimal("20")

    def test_reduced_and_zero_rates(self):
        assert tax.calculate_vat(100, "GB", "reduced").vat_rate == TAX_RATES["GB"].vat_reduced
        zero = tax.calculate_vat(100, "GB", VATType.ZERO)
        assert zero.vat_amount == 0
        assert zero.gross_amount == Decimal("100")

    def test_unknown_country_raises(self):
        with pytest.raises(UnknownCountryError, match="XX"):
            tax.calculate_vat(100, "XX")

    def test_unknown_vat_type_raises(self):
        with pytest.raises(ValidationError):
            tax.calculate_vat(100, "GB", "luxury")

    def test_from_gross_gb(self):
        result = tax.calculate_vat_from_gross(1200, "GB")

        assert result.net_amount == Decimal("1000")
        assert result.vat_amount == Decimal("200")

    @pytest.mark.parametrize("country", sorted(TAX_RATES))
    @pytest.mark.parametrize("vat_type", list(VATType))
    def test_round_trip_all_countries(self, country, vat_type):
        for amount in (Decimal("0.01"), Decimal("99.99"), Decimal("1234567.89")):
            gross = tax.calculate_vat(amount, country, vat_type).gross_amount
            net = tax.calculate_vat_from_gross(gross, country, vat_type).net_amount
            assert abs(net - amount) <= amount * Decimal("1e-6")


class TestCorporateTax:
    """Tests for calculate_corporate_tax."""

    def test_gb_profit(self):
        result = tax.calculate_corporate_tax(100000, 20000, "GB")
        rate = TAX_RATES["GB"].corporate_rate

        assert result.taxable_profit == Decimal("80000")
        assert result.tax_amount == Decimal("80000") * rate / 100
        assert result.net_profit == Decimal("100000") - result.tax_amount
        assert result.effective_rate == result.tax_amount / Decimal("100000") * 100

    @pytest.mark.parametrize(
        "gross, deductions",
        [(1000, 5000), (0, 0), (-500, 0), (-500, 1000)],
    )
    def test_never_negative(self, gross, deductions):
        result = tax.calculate_corporate_tax(gross, deductions, "US")

        assert result.taxable_profit >= 0
        assert result.tax_amount >= 0

    def test_effective_rate_zero_without_profit(self):
        assert tax.calculate_corporate_tax(0, 0, "DE").effective_rate == 0
        assert tax.calculate_corporate_tax(-100, 0, "DE").effective_rate == 0

    def test_unknown_country(self):
        with pytest.raises(UnknownCountryError):
            tax.calculate_corporate_tax(100, 0, "ZZ")


class TestLatePenalty:
    """Tests for calculate_late_penalty."""

    def test_penalty_scenario(self):
        result = tax.calculate_late_penalty(1000, date(2024, 1, 31), date(2024, 3, 15), 5)

        assert result.days_late == 44
        assert result.months_late == 2
        assert result.penalty_amount == Decimal("100")
        assert result.total_amount == Decimal("1100")

    def test_default_monthly_rate_is_five_percent(self):
        result = tax.calculate_late_penalty(1000, date(2024, 1, 1), date(2024, 1, 2))
        assert result.penalty_amount == Decimal("50")

    @pytest.mark.parametrize("paid", [date(2024, 1, 31), date(2024, 1, 1)])
    def test_on_time_or_early_has_no_penalty(self, paid):
        result = tax.calculate_late_penalty(1000, date(2024, 1, 31), paid)

        assert result.days_late == 0
        assert result.months_late == 0
        assert result.penalty_amount == 0
        assert result.total_amount == Decimal("1000")

    def test_exactly_thirty_days_is_one_month(self):
        result = tax.calculate_late_penalty(1000, date(2024, 1, 1), date(2024, 1, 31))
        assert result.months_late == 1


class TestTaxReturns:
    """Tests for VAT returns and combined tax returns."""

    def test_vat_return_nets_input_against_output(self):
        result = tax.calculate_vat_return(
            [supply("1000", "20", "sale", date(2024, 1, 5))],
            [supply("400", "20", "purchase", date(2024, 1, 6))],
        )

        assert result.output_vat == Decimal("200")
        assert result.input_vat == Decimal("80")
        assert result.net_vat_due == Decimal("120")

    def test_vat_return_refund_position_floors_at_zero(self):
        result = tax.calculate_vat_return([], [supply("400", "20", "purchase", date(2024, 1, 6))])
        assert result.net_vat_due == 0

    def test_generate_tax_return_filters_period(self):
        supplies = [
            supply("1000", "20", "sale", date(2024, 1, 1)),
            supply("500", "20", "sale", date(2024, 3, 31)),
            supply("9999", "20", "sale", date(2024, 4, 1)),
            supply("300", "20", "purchase", date(2024, 2, 15)),
        ]

        result = tax.generate_tax_return(
            supplies, 50000, 10000, "GB", date(2024, 1, 1), date(2024, 3, 31)
        )

        assert result.vat_return.total_sales == Decimal("1500")
        assert result.vat_return.net_vat_due == Decimal("240")
        assert result.quarter == 1
        assert result.year == 2024
        assert result.due_date == date(2024, 4, 30)
        assert result.total_tax_liability == Decimal("240") + result.corporate_tax.tax_amount

    def test_due_date_is_last_day_of_following_month(self):
        result = tax.generate_tax_return([], 0, 0, "US", date(2023, 10, 1), date(2024, 1, 31))
        assert result.due_date == date(2024, 2, 29)

    def test_period_must_not_end_before_start(self):
        with pytest.raises(ValidationError):
            tax.generate_tax_return([], 0, 0, "US", date(2024, 3, 1), date(2024, 1, 1))


class TestTransactionSupplies:
    """Tests for turning posted transactions into taxable supplies."""

    def _txn(self, category, vat_rate):
        now = datetime.now(UTC)
        return Transaction(
            id="txn_1",
            date=date(2024, 2, 1),
            description="x",
            reference="",
            amount=Decimal("500"),
            currency="GBP",
            category=category,
            folder=TransactionFolder.BANK,
            debit_account="1100",
            credit_account="4000",
            status=TransactionStatus.APPROVED,
            created_at=now,
            updated_at=now,
            vat_rate=vat_rate,
        )

    def test_sale_with_vat(self):
        result = tax.transaction_vat_breakdown(self._txn(TransactionCategory.SALES, Decimal("20")))

        assert result.type == "sale"
        assert result.vat_amount == Decimal("100")
        assert result.date == date(2024, 2, 1)

    def test_non_taxable_transactions_skipped(self):
        txns = [
            self._txn(TransactionCategory.SALES, None),
            self._txn(TransactionCategory.RENT, Decimal("20")),
            self._txn(TransactionCategory.PURCHASE, Decimal("5")),
        ]
        result = tax.taxable_supplies(txns)

        assert [s.type for s in result] == ["purchase"]


class TestValidation:
    """Tests for validate_tax_inputs and reference lookups."""

    def test_valid_inputs(self):
        assert tax.validate_tax_inputs(100, "GB") == []

    def test_negative_amount_and_bad_country(self):
        errors = tax.validate_tax_inputs(-1, "GBR")

        assert "Amount cannot be negative" in errors
        assert any("2 characters" in e for e in errors)

    def test_get_tax_rates(self):
        assert tax.get_tax_rates("de").country == "Germany"
        assert tax.get_tax_rates("XX") is None

    def test_compliance_dates(self):
        dates = tax.get_tax_compliance_dates(2024)

        assert dates.vat_return_dates[-1] == date(2025, 1, 31)
        assert dates.corporate_tax_due == date(2025, 3, 31)
