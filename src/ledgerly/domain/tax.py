"""VAT and corporate tax calculations.

Every function here is pure: it reads the static tax table through a
``ReferenceData`` instance and returns a result record. Amounts are
Decimals; rates are percentages (20 means 20%).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ledgerly.domain.entities import Transaction, TransactionCategory, VATType
from ledgerly.domain.errors import ValidationError
from ledgerly.domain.money import HUNDRED, ZERO, percentage_of, to_decimal
from ledgerly.domain.reference_data import DEFAULT_REFERENCE, ReferenceData, TaxRate

DEFAULT_PENALTY_RATE = Decimal("5")
DAYS_PER_PENALTY_MONTH = 30


@dataclass(frozen=True)
class VATCalculation:
    net_amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    gross_amount: Decimal
    country: str
    vat_type: VATType


@dataclass(frozen=True)
class CorporateTaxCalculation:
    gross_profit: Decimal
    allowable_deductions: Decimal
    taxable_profit: Decimal
    corporate_rate: Decimal
    tax_amount: Decimal
    net_profit: Decimal
    country: str
    effective_rate: Decimal


@dataclass(frozen=True)
class LatePenalty:
    days_late: int
    months_late: int
    penalty_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class TaxableSupply:
    """A sale or purchase line fed into a VAT return."""

    amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    type: str  # "sale" or "purchase"
    date: date


@dataclass(frozen=True)
class VATReturn:
    total_sales: Decimal
    total_purchases: Decimal
    output_vat: Decimal
    input_vat: Decimal
    net_vat_due: Decimal


@dataclass(frozen=True)
class TaxReturn:
    start_date: date
    end_date: date
    quarter: int
    year: int
    vat_return: VATReturn
    corporate_tax: CorporateTaxCalculation
    total_tax_liability: Decimal
    due_date: date
    country: str


@dataclass(frozen=True)
class ComplianceDates:
    vat_return_dates: tuple[date, ...]
    corporate_tax_due: date
    annual_return_due: date


def _reference(reference: Optional[ReferenceData]) -> ReferenceData:
    return reference if reference is not None else DEFAULT_REFERENCE


def _vat_rate_for(tax_rate: TaxRate, vat_type: VATType | str) -> tuple[Decimal, VATType]:
    try:
        vat_type = VATType(vat_type)
    except ValueError:
        raise ValidationError(f"Unknown VAT type: {vat_type}")
    if vat_type == VATType.REDUCED:
        return tax_rate.vat_reduced, vat_type
    if vat_type == VATType.ZERO:
        return tax_rate.vat_zero, vat_type
    return tax_rate.vat_standard, vat_type


def get_tax_rates(
    country_code: str, reference: Optional[ReferenceData] = None
) -> Optional[TaxRate]:
    """Look up the tax rate record for a country. Returns None if unknown."""
    return _reference(reference).find_tax_rate(country_code)


def calculate_vat(
    net_amount,
    country_code: str,
    vat_type: VATType | str = VATType.STANDARD,
    reference: Optional[ReferenceData] = None,
) -> VATCalculation:
    """Calculate VAT on a net amount.

    Args:
        net_amount: Amount before VAT
        country_code: 2-letter country code (case-insensitive)
        vat_type: standard, reduced or zero
        reference: Optional reference data (defaults to the shipped tables)

    Returns:
        VATCalculation with vat and gross amounts

    Raises:
        UnknownCountryError: If the country is not in the tax table
    """
    net = to_decimal(net_amount, "net amount")
    tax_rate = _reference(reference).tax_rate(country_code)
    rate, vat_type = _vat_rate_for(tax_rate, vat_type)

    vat_amount = percentage_of(net, rate)
    return VATCalculation(
        net_amount=net,
        vat_rate=rate,
        vat_amount=vat_amount,
        gross_amount=net + vat_amount,
        country=tax_rate.country,
        vat_type=vat_type,
    )


def calculate_vat_from_gross(
    gross_amount,
    country_code: str,
    vat_type: VATType | str = VATType.STANDARD,
    reference: Optional[ReferenceData] = None,
) -> VATCalculation:
    """Extract VAT from a gross amount (reverse calculation).

    Raises:
        UnknownCountryError: If the country is not in the tax table
    """
    gross = to_decimal(gross_amount, "gross amount")
    tax_rate = _reference(reference).tax_rate(country_code)
    rate, vat_type = _vat_rate_for(tax_rate, vat_type)

    net = gross / (1 + rate / HUNDRED)
    return VATCalculation(
        net_amount=net,
        vat_rate=rate,
        vat_amount=gross - net,
        gross_amount=gross,
        country=tax_rate.country,
        vat_type=vat_type,
    )


def calculate_corporate_tax(
    gross_profit,
    allowable_deductions,
    country_code: str,
    reference: Optional[ReferenceData] = None,
) -> CorporateTaxCalculation:
    """Calculate corporate tax on profit after deductions.

    Taxable profit is floored at zero, and the effective rate is zero when
    there is no gross profit.

    Raises:
        UnknownCountryError: If the country is not in the tax table
    """
    gross = to_decimal(gross_profit, "gross profit")
    deductions = to_decimal(allowable_deductions, "allowable deductions")
    tax_rate = _reference(reference).tax_rate(country_code)

    taxable_profit = max(ZERO, gross - deductions)
    tax_amount = percentage_of(taxable_profit, tax_rate.corporate_rate)
    effective_rate = tax_amount / gross * HUNDRED if gross > 0 else ZERO

    return CorporateTaxCalculation(
        gross_profit=gross,
        allowable_deductions=deductions,
        taxable_profit=taxable_profit,
        corporate_rate=tax_rate.corporate_rate,
        tax_amount=tax_amount,
        net_profit=gross - tax_amount,
        country=tax_rate.country,
        effective_rate=effective_rate,
    )


def calculate_late_penalty(
    tax_amount,
    due_date: date,
    payment_date: date,
    monthly_rate=DEFAULT_PENALTY_RATE,
) -> LatePenalty:
    """Calculate the penalty for paying tax late.

    The penalty accrues per started 30-day month. Paying on or before the due
    date yields zero days late and no penalty.
    """
    amount = to_decimal(tax_amount, "tax amount")
    rate = to_decimal(monthly_rate, "penalty rate")

    days_late = max(0, (payment_date - due_date).days)
    months_late = -(-days_late // DAYS_PER_PENALTY_MONTH)
    penalty = amount * rate * months_late / HUNDRED

    return LatePenalty(
        days_late=days_late,
        months_late=months_late,
        penalty_amount=penalty,
        total_amount=amount + penalty,
    )


def calculate_vat_return(
    sales: Iterable[TaxableSupply], purchases: Iterable[TaxableSupply]
) -> VATReturn:
    """Summarize output and input VAT. Net VAT due is floored at zero."""
    sales = list(sales)
    purchases = list(purchases)
    output_vat = sum((s.vat_amount for s in sales), ZERO)
    input_vat = sum((p.vat_amount for p in purchases), ZERO)
    return VATReturn(
        total_sales=sum((s.amount for s in sales), ZERO),
        total_purchases=sum((p.amount for p in purchases), ZERO),
        output_vat=output_vat,
        input_vat=input_vat,
        net_vat_due=max(ZERO, output_vat - input_vat),
    )


def generate_tax_return(
    supplies: Iterable[TaxableSupply],
    gross_profit,
    allowable_deductions,
    country_code: str,
    start_date: date,
    end_date: date,
    reference: Optional[ReferenceData] = None,
) -> TaxReturn:
    """Build a combined VAT and corporate tax return for a period.

    Only supplies dated within the period (inclusive) are counted. The return
    is due on the last day of the month following the period end.
    """
    if end_date < start_date:
        raise ValidationError("Tax return period ends before it starts")

    tax_rate = _reference(reference).tax_rate(country_code)
    in_period = [s for s in supplies if start_date <= s.date <= end_date]
    vat_return = calculate_vat_return(
        [s for s in in_period if s.type == "sale"],
        [s for s in in_period if s.type == "purchase"],
    )
    corporate_tax = calculate_corporate_tax(
        gross_profit, allowable_deductions, country_code, reference=reference
    )

    return TaxReturn(
        start_date=start_date,
        end_date=end_date,
        quarter=(end_date.month - 1) // 3 + 1,
        year=end_date.year,
        vat_return=vat_return,
        corporate_tax=corporate_tax,
        total_tax_liability=vat_return.net_vat_due + corporate_tax.tax_amount,
        due_date=end_date + relativedelta(months=1, day=31),
        country=tax_rate.country,
    )


def validate_tax_inputs(
    amount, country_code: str, reference: Optional[ReferenceData] = None
) -> list[str]:
    """Validate calculator inputs.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    try:
        value = to_decimal(amount)
    except ValidationError as e:
        errors.append(str(e))
    else:
        if value < 0:
            errors.append("Amount cannot be negative")

    if not country_code or len(country_code) != 2:
        errors.append("Invalid country code (must be 2 characters)")
    if _reference(reference).find_tax_rate(country_code) is None:
        errors.append(f"Tax rates not available for country: {country_code}")
    return errors


def get_tax_compliance_dates(year: int) -> ComplianceDates:
    """Return generic quarterly VAT and annual filing deadlines for a year."""
    return ComplianceDates(
        vat_return_dates=(
            date(year, 4, 30),
            date(year, 7, 31),
            date(year, 10, 31),
            date(year + 1, 1, 31),
        ),
        corporate_tax_due=date(year + 1, 3, 31),
        annual_return_due=date(year + 1, 12, 31),
    )


def transaction_vat_breakdown(transaction: Transaction) -> Optional[TaxableSupply]:
    """Turn a posted sales or purchase transaction into a taxable supply.

    Returns:
        TaxableSupply, or None if the transaction carries no VAT rate or is
        neither a sale nor a purchase
    """
    if transaction.vat_rate is None:
        return None
    if transaction.category == TransactionCategory.SALES:
        supply_type = "sale"
    elif transaction.category == TransactionCategory.PURCHASE:
        supply_type = "purchase"
    else:
        return None
    return TaxableSupply(
        amount=transaction.amount,
        vat_rate=transaction.vat_rate,
        vat_amount=percentage_of(transaction.amount, transaction.vat_rate),
        type=supply_type,
        date=transaction.date,
    )


def taxable_supplies(transactions: Iterable[Transaction]) -> list[TaxableSupply]:
    """Collect taxable supplies from a sequence of transactions."""
    supplies = []
    for txn in transactions:
        supply = transaction_vat_breakdown(txn)
        if supply is not None:
            supplies.append(supply)
    return supplies
