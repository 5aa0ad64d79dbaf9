"""Tests for PartyService and SettingsService."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerly.domain.errors import UnknownCurrencyError, ValidationError
from ledgerly.domain.parties import PartyService
from ledgerly.domain.settings import SettingsService, parse_year_start
from ledgerly.storage.base import SETTINGS_KEY


class TestCustomers:
    """Tests for customer operations."""

    def test_create_customer(self, parties):
        customer = parties.create_customer(name="  Initech  ", currency="eur", credit_limit="5000")

        assert customer.id.startswith("cust_")
        assert customer.name == "Initech"
        assert customer.currency == "EUR"
        assert customer.credit_limit == Decimal("5000")
        assert customer.balance == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"name": ""}, {"name": "X", "currency": "XYZ"}, {"name": "X", "credit_limit": -1}],
    )
    def test_invalid_customer(self, parties, kwargs):
        with pytest.raises(ValidationError):
            parties.create_customer(**kwargs)
        assert parties.list_customers() == []

    def test_list_sorted_by_name(self, parties):
        for name in ("zeta", "Alpha", "mid"):
            parties.create_customer(name=name)

        assert [c.name for c in parties.list_customers()] == ["Alpha", "mid", "zeta"]

    def test_update_and_delete(self, parties, sample_customer):
        updated = parties.update_customer(sample_customer.id, email="ap@acme.test")
        assert updated.email == "ap@acme.test"

        with pytest.raises(ValidationError):
            parties.update_customer(sample_customer.id, id="other")

        assert parties.delete_customer(sample_customer.id) is True
        assert parties.delete_customer(sample_customer.id) is False
        assert parties.update_customer(sample_customer.id, email="x") is None

    def test_persisted(self, memory_store, sample_customer):
        reopened = PartyService(memory_store)

        assert reopened.get_customer(sample_customer.id) == sample_customer


class TestVendors:
    """Tests for vendor operations."""

    def test_create_and_list(self, parties):
        vendor = parties.create_vendor(name="Paper Co", currency="GBP")

        assert vendor.id.startswith("vend_")
        assert parties.list_vendors() == [vendor]
        assert parties.get_vendor(vendor.id).currency == "GBP"

    def test_vendors_have_no_credit_limit(self, parties):
        vendor = parties.create_vendor(name="Paper Co")

        with pytest.raises(ValidationError):
            parties.update_vendor(vendor.id, credit_limit=100)

    def test_delete(self, parties):
        vendor = parties.create_vendor(name="Paper Co")

        assert parties.delete_vendor(vendor.id) is True
        assert parties.list_vendors() == []


class TestYearStart:
    """Tests for parsing the financial year start."""

    @pytest.mark.parametrize("value, expected", [("01-01", (1, 1)), ("04-06", (4, 6)), ("12-31", (12, 31))])
    def test_valid(self, value, expected):
        assert parse_year_start(value) == expected

    @pytest.mark.parametrize("value", ["02-29", "13-01", "00-10", "April", "", None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_year_start(value)


class TestSettings:
    """Tests for company settings and currencies."""

    def test_defaults(self, settings_service):
        settings = settings_service.get_settings()

        assert settings.currency == "USD"
        assert settings.financial_year_start == "01-01"
        assert settings.default_vat_rate == Decimal("20")
        assert settings.default_corporate_tax_rate == Decimal("25")

    def test_update_normalizes_and_saves(self, settings_service, memory_store):
        settings = settings_service.update_settings(
            name="Ledgerly Ltd", currency="gbp", financial_year_start="4-6", default_vat_rate="17.5"
        )

        assert settings.currency == "GBP"
        assert settings.financial_year_start == "04-06"
        assert settings.default_vat_rate == Decimal("17.5")
        assert memory_store.load(SETTINGS_KEY)["name"] == "Ledgerly Ltd"
        assert SettingsService(memory_store).get_settings() == settings

    @pytest.mark.parametrize(
        "changes",
        [
            {"financial_year_start": "02-29"},
            {"default_vat_rate": "120"},
            {"default_corporate_tax_rate": "-1"},
            {"currency": "XYZ"},
            {"colour": "blue"},
        ],
    )
    def test_invalid_update_changes_nothing(self, settings_service, changes):
        before = settings_service.get_settings()

        with pytest.raises(ValidationError):
            settings_service.update_settings(**changes)

        assert settings_service.get_settings() == before

    @pytest.mark.parametrize(
        "year_start, today, start, name",
        [
            ("01-01", date(2024, 6, 15), date(2024, 1, 1), "Year 2024"),
            ("04-06", date(2024, 4, 6), date(2024, 4, 6), "FY 2024/2025"),
            ("04-06", date(2024, 4, 5), date(2023, 4, 6), "FY 2023/2024"),
        ],
    )
    def test_current_period(self, settings_service, year_start, today, start, name):
        settings_service.update_settings(financial_year_start=year_start)

        period = settings_service.current_period(today)

        assert period.start_date == start
        assert period.end_date == today
        assert period.name == name
        assert not period.is_closed

    def test_default_currencies(self, settings_service):
        codes = [c.code for c in settings_service.list_currencies()]

        assert codes[:3] == ["USD", "EUR", "GBP"]
        assert "SEK" not in codes
        assert settings_service.get_currency("gbp").symbol == "£"

    def test_enable_currency(self, settings_service, memory_store):
        settings_service.enable_currency("sek")

        assert settings_service.get_currency("SEK").name == "Swedish Krona"
        assert SettingsService(memory_store).get_currency("SEK") is not None

    def test_enable_unknown_currency(self, settings_service):
        with pytest.raises(UnknownCurrencyError):
            settings_service.enable_currency("XYZ")

    def test_corrupt_settings_fall_back_to_defaults(self, memory_store):
        memory_store.save(SETTINGS_KEY, {"name": "Broken", "defaultVatRate": "lots"})

        assert SettingsService(memory_store).get_settings().name == "Your Company Name"
