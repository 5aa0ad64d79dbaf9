"""Static currency and tax-rate reference tables.

Rates here are data, not live feeds. ``ReferenceData`` wraps a pair of
tables so callers can inject alternates (e.g. in tests); the module-level
``DEFAULT_REFERENCE`` holds the shipped tables.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ledgerly.domain.entities import Currency
from ledgerly.domain.errors import (
    UnknownCountryError,
    UnknownCurrencyError,
    unknown_country,
    unknown_currency,
)


@dataclass(frozen=True)
class TaxRate:
    """Published tax rates for one country (percentages)."""

    country: str
    vat_standard: Decimal
    vat_reduced: Decimal
    vat_zero: Decimal
    corporate_rate: Decimal
    currency: str


def _rate(country, standard, reduced, corporate, currency) -> TaxRate:
    return TaxRate(
        country=country,
        vat_standard=Decimal(standard),
        vat_reduced=Decimal(reduced),
        vat_zero=Decimal("0"),
        corporate_rate=Decimal(corporate),
        currency=currency,
    )


TAX_RATES: dict[str, TaxRate] = {
    "US": _rate("United States", "0", "0", "21", "USD"),
    "GB": _rate("United Kingdom", "20", "5", "25", "GBP"),
    "DE": _rate("Germany", "19", "7", "30", "EUR"),
    "FR": _rate("France", "20", "10", "28", "EUR"),
    "IT": _rate("Italy", "22", "10", "24", "EUR"),
    "ES": _rate("Spain", "21", "10", "25", "EUR"),
    "NL": _rate("Netherlands", "21", "9", "25.8", "EUR"),
    "BE": _rate("Belgium", "21", "12", "25", "EUR"),
    "AT": _rate("Austria", "20", "10", "25", "EUR"),
    "CH": _rate("Switzerland", "7.7", "3.7", "21", "CHF"),
    "CA": _rate("Canada", "13", "5", "26.5", "CAD"),
    "AU": _rate("Australia", "10", "0", "30", "AUD"),
    "JP": _rate("Japan", "10", "8", "23.2", "JPY"),
    "CN": _rate("China", "13", "9", "25", "CNY"),
    "IN": _rate("India", "18", "12", "30", "INR"),
    "BR": _rate("Brazil", "17", "7", "34", "BRL"),
    "SG": _rate("Singapore", "7", "0", "17", "SGD"),
    "HK": _rate("Hong Kong", "0", "0", "16.5", "HKD"),
    "NZ": _rate("New Zealand", "15", "0", "28", "NZD"),
    "SE": _rate("Sweden", "25", "12", "20.6", "SEK"),
    "NO": _rate("Norway", "25", "15", "22", "NOK"),
    "DK": _rate("Denmark", "25", "0", "22", "DKK"),
    "FI": _rate("Finland", "24", "14", "20", "EUR"),
    "IE": _rate("Ireland", "23", "13.5", "12.5", "EUR"),
    "PT": _rate("Portugal", "23", "13", "21", "EUR"),
    "PL": _rate("Poland", "23", "8", "19", "PLN"),
    "CZ": _rate("Czech Republic", "21", "15", "19", "CZK"),
    "HU": _rate("Hungary", "27", "18", "9", "HUF"),
    "GR": _rate("Greece", "24", "13", "22", "EUR"),
    "RO": _rate("Romania", "19", "9", "16", "RON"),
    "BG": _rate("Bulgaria", "20", "9", "10", "BGN"),
}

# (name, symbol, rate relative to USD)
_CURRENCY_ROWS: dict[str, tuple[str, str, str]] = {
    "USD": ("US Dollar", "$", "1.0"),
    "EUR": ("Euro", "€", "0.85"),
    "GBP": ("British Pound", "£", "0.73"),
    "JPY": ("Japanese Yen", "¥", "110.0"),
    "CAD": ("Canadian Dollar", "C$", "1.25"),
    "AUD": ("Australian Dollar", "A$", "1.35"),
    "CHF": ("Swiss Franc", "CHF", "0.92"),
    "CNY": ("Chinese Yuan", "¥", "6.45"),
    "INR": ("Indian Rupee", "₹", "74.5"),
    "BRL": ("Brazilian Real", "R$", "5.2"),
    "KRW": ("South Korean Won", "₩", "1180.0"),
    "SGD": ("Singapore Dollar", "S$", "1.35"),
    "HKD": ("Hong Kong Dollar", "HK$", "7.8"),
    "NZD": ("New Zealand Dollar", "NZ$", "1.42"),
    "SEK": ("Swedish Krona", "kr", "8.6"),
    "NOK": ("Norwegian Krone", "kr", "8.8"),
    "DKK": ("Danish Krone", "kr", "6.4"),
    "PLN": ("Polish Złoty", "zł", "3.9"),
    "CZK": ("Czech Koruna", "Kč", "22.0"),
    "HUF": ("Hungarian Forint", "Ft", "295.0"),
}

CURRENCIES: dict[str, Currency] = {
    code: Currency(code=code, name=name, symbol=symbol, rate=Decimal(rate))
    for code, (name, symbol, rate) in _CURRENCY_ROWS.items()
}

# Currencies seeded into a fresh ledger
DEFAULT_CURRENCY_CODES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "INR", "BRL")

MAJOR_CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY")


class ReferenceData:
    """Read-only lookup over tax-rate and currency tables."""

    def __init__(
        self,
        tax_rates: Optional[dict[str, TaxRate]] = None,
        currencies: Optional[dict[str, Currency]] = None,
    ):
        """Initialize reference data.

        Args:
            tax_rates: Tax table keyed by 2-letter country code (defaults to TAX_RATES)
            currencies: Currency table keyed by 3-letter code (defaults to CURRENCIES)
        """
        self.tax_rates = dict(TAX_RATES if tax_rates is None else tax_rates)
        self.currencies = dict(CURRENCIES if currencies is None else currencies)

    def find_tax_rate(self, country_code: str) -> Optional[TaxRate]:
        """Return the tax rate record for a country, or None."""
        if not country_code:
            return None
        return self.tax_rates.get(country_code.upper())

    def tax_rate(self, country_code: str) -> TaxRate:
        """Return the tax rate record for a country.

        Raises:
            UnknownCountryError: If the country is not in the table
        """
        rate = self.find_tax_rate(country_code)
        if rate is None:
            raise UnknownCountryError(unknown_country(country_code))
        return rate

    def find_currency(self, code: str) -> Optional[Currency]:
        """Return the currency record for a code, or None."""
        if not code:
            return None
        return self.currencies.get(code.upper())

    def currency(self, code: str) -> Currency:
        """Return the currency record for a code.

        Raises:
            UnknownCurrencyError: If the currency is not in the table
        """
        currency = self.find_currency(code)
        if currency is None:
            raise UnknownCurrencyError(unknown_currency(code))
        return currency

    def is_currency_supported(self, code: str) -> bool:
        return self.find_currency(code) is not None

    def supported_countries(self) -> list[dict[str, str]]:
        """List supported countries as code/name/currency dicts."""
        return [
            {"code": code, "name": rate.country, "currency": rate.currency}
            for code, rate in self.tax_rates.items()
        ]

    def supported_currencies(self) -> list[Currency]:
        return list(self.currencies.values())

    def major_currencies(self) -> list[Currency]:
        return [self.currencies[code] for code in MAJOR_CURRENCIES if code in self.currencies]

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """Convert an amount between currencies through USD.

        Raises:
            UnknownCurrencyError: If either currency is not in the table
        """
        if from_currency.upper() == to_currency.upper():
            return amount
        from_rate = self.currency(from_currency).rate
        to_rate = self.currency(to_currency).rate
        return amount / from_rate * to_rate

    def exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Return units of ``to_currency`` per one unit of ``from_currency``."""
        return self.currency(to_currency).rate / self.currency(from_currency).rate


DEFAULT_REFERENCE = ReferenceData()


def convert_with_fees(
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    fee_percentage: Decimal = Decimal("0.5"),
    reference: Optional[ReferenceData] = None,
) -> dict[str, Decimal]:
    """Convert an amount and add a percentage conversion fee.

    Returns:
        Dict with original_amount, converted_amount, fee, total_amount and
        exchange_rate
    """
    reference = reference or DEFAULT_REFERENCE
    converted = reference.convert(amount, from_currency, to_currency)
    fee = converted * fee_percentage / 100
    return {
        "original_amount": amount,
        "converted_amount": converted,
        "fee": fee,
        "total_amount": converted + fee,
        "exchange_rate": reference.exchange_rate(from_currency, to_currency),
    }


def format_currency(
    amount: Decimal,
    currency: str,
    show_symbol: bool = True,
    show_code: bool = False,
    decimal_places: int = 2,
    reference: Optional[ReferenceData] = None,
) -> str:
    """Format an amount with grouping and a currency symbol or code."""
    formatted = f"{amount:,.{decimal_places}f}"
    if show_symbol:
        found = (reference or DEFAULT_REFERENCE).find_currency(currency)
        symbol = found.symbol if found is not None else currency
        if formatted.startswith("-"):
            return f"-{symbol}{formatted[1:]}"
        return f"{symbol}{formatted}"
    if show_code:
        return f"{formatted} {currency}"
    return formatted


def format_exchange_rate(
    from_currency: str, to_currency: str, reference: Optional[ReferenceData] = None
) -> str:
    """Format an exchange rate as ``1 FROM = x.xxxx TO``."""
    rate = (reference or DEFAULT_REFERENCE).exchange_rate(from_currency, to_currency)
    return f"1 {from_currency} = {rate:.4f} {to_currency}"
