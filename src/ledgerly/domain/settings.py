"""Company settings and currency table service."""

import dataclasses
import logging
import threading
from datetime import date, datetime
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from ledgerly.domain.chart import DEFAULT_COMPANY_SETTINGS
from ledgerly.domain.entities import CompanySettings, Currency, FinancialPeriod
from ledgerly.domain.errors import ValidationError
from ledgerly.domain.money import HUNDRED, ZERO, to_decimal
from ledgerly.domain.reference_data import (
    DEFAULT_CURRENCY_CODES,
    DEFAULT_REFERENCE,
    ReferenceData,
)
from ledgerly.storage import mappers
from ledgerly.storage.base import CURRENCIES_KEY, SETTINGS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = frozenset(f.name for f in dataclasses.fields(CompanySettings))


def parse_year_start(value: str) -> tuple[int, int]:
    """Parse an ``MM-DD`` financial year start into (month, day).

    February 29 is rejected because it does not exist every year.

    Raises:
        ValidationError: If the value is not a valid MM-DD date
    """
    try:
        parsed = datetime.strptime(value, "%m-%d").replace(year=2001)
    except (TypeError, ValueError):
        raise ValidationError(f"Financial year start must be MM-DD, got '{value}'")
    return parsed.month, parsed.day


class SettingsService:
    """Service for the company settings singleton and the currency table."""

    def __init__(self, store: KeyValueStore, reference: Optional[ReferenceData] = None):
        """Initialize settings service.

        Args:
            store: Key-value store holding the settings and currencies documents
            reference: Reference data the currency table is seeded from
        """
        self.store = store
        self.reference = reference if reference is not None else DEFAULT_REFERENCE
        self._lock = threading.RLock()
        self._settings = self._load_settings()
        self._currencies = self._load_currencies()

    def _load_settings(self) -> CompanySettings:
        record = self.store.load_or_default(SETTINGS_KEY)
        if record is None:
            return DEFAULT_COMPANY_SETTINGS
        try:
            return mappers.settings_to_domain(record)
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored settings are unreadable; using defaults", exc_info=True)
            return DEFAULT_COMPANY_SETTINGS

    def _load_currencies(self) -> dict[str, Currency]:
        try:
            records = self.store.load_or_default(CURRENCIES_KEY, [])
            currencies = {c.code: c for c in map(mappers.currency_to_domain, records)}
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored currencies are unreadable; using defaults", exc_info=True)
            currencies = {}

        if not currencies:
            currencies = {
                code: self.reference.currencies[code]
                for code in DEFAULT_CURRENCY_CODES
                if code in self.reference.currencies
            }
            self.store.save_best_effort(
                CURRENCIES_KEY, [mappers.currency_to_record(c) for c in currencies.values()]
            )
        return currencies

    def get_settings(self) -> CompanySettings:
        """Return the current company settings."""
        with self._lock:
            return self._settings

    def update_settings(self, **changes: Any) -> CompanySettings:
        """Merge changes into the company settings and save them.

        Raises:
            ValidationError: If a field is unknown, the year start is not
                MM-DD, a rate is outside 0-100 or the currency is unknown
        """
        unknown = set(changes) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        fields = dict(changes)
        if "financial_year_start" in fields:
            month, day = parse_year_start(fields["financial_year_start"])
            fields["financial_year_start"] = f"{month:02d}-{day:02d}"
        if "currency" in fields:
            fields["currency"] = self.reference.currency(fields["currency"]).code
        for rate_field in ("default_vat_rate", "default_corporate_tax_rate"):
            if rate_field in fields:
                rate = to_decimal(fields[rate_field], rate_field.replace("_", " "))
                if not (ZERO <= rate <= HUNDRED):
                    raise ValidationError(f"{rate_field.replace('_', ' ').capitalize()} must be between 0 and 100")
                fields[rate_field] = rate

        with self._lock:
            self._settings = dataclasses.replace(self._settings, **fields)
            self.store.save_best_effort(SETTINGS_KEY, mappers.settings_to_record(self._settings))
        logger.info("Updated company settings (%s)", ", ".join(sorted(changes)))
        return self._settings

    def current_period(self, today: Optional[date] = None) -> FinancialPeriod:
        """Return the financial year containing ``today``, ending at ``today``."""
        today = today or date.today()
        month, day = parse_year_start(self.get_settings().financial_year_start)
        start = date(today.year, month, day)
        if start > today:
            start -= relativedelta(years=1)
        if (month, day) == (1, 1):
            name = f"Year {start.year}"
        else:
            name = f"FY {start.year}/{start.year + 1}"
        return FinancialPeriod(start_date=start, end_date=today, name=name)

    def list_currencies(self) -> list[Currency]:
        """List the currencies enabled for this company."""
        with self._lock:
            return list(self._currencies.values())

    def get_currency(self, code: str) -> Optional[Currency]:
        """Get an enabled currency by code, or None."""
        with self._lock:
            return self._currencies.get(code.upper())

    def enable_currency(self, code: str) -> Currency:
        """Add a currency from the reference table to the company's list.

        Raises:
            UnknownCurrencyError: If the code is not in the reference table
        """
        currency = self.reference.currency(code)
        with self._lock:
            self._currencies[currency.code] = currency
            self.store.save_best_effort(
                CURRENCIES_KEY, [mappers.currency_to_record(c) for c in self._currencies.values()]
            )
        return currency
