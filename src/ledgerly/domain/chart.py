"""Default chart of accounts and company settings."""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from ledgerly.domain.entities import (
    Account,
    AccountType,
    CompanySettings,
    StatementBucket,
)
from ledgerly.domain.errors import ValidationError

# (code, name, type, category, bucket)
DEFAULT_CHART: list[tuple[str, str, AccountType, str, StatementBucket]] = [
    ("1000", "Cash", AccountType.ASSET, "Current Assets", StatementBucket.CASH),
    ("1100", "Accounts Receivable", AccountType.ASSET, "Current Assets", StatementBucket.ACCOUNTS_RECEIVABLE),
    ("1200", "Inventory", AccountType.ASSET, "Current Assets", StatementBucket.INVENTORY),
    ("1500", "Equipment", AccountType.ASSET, "Fixed Assets", StatementBucket.PROPERTY_PLANT_EQUIPMENT),
    ("2000", "Accounts Payable", AccountType.LIABILITY, "Current Liabilities", StatementBucket.ACCOUNTS_PAYABLE),
    ("2100", "VAT Payable", AccountType.LIABILITY, "Current Liabilities", StatementBucket.ACCRUED_EXPENSE),
    ("2500", "Long-term Debt", AccountType.LIABILITY, "Long-term Liabilities", StatementBucket.LONG_TERM_DEBT),
    ("3000", "Share Capital", AccountType.EQUITY, "Equity", StatementBucket.SHARE_CAPITAL),
    ("3100", "Retained Earnings", AccountType.EQUITY, "Equity", StatementBucket.RETAINED_EARNINGS),
    ("4000", "Sales Revenue", AccountType.REVENUE, "Revenue", StatementBucket.SALES_REVENUE),
    ("4100", "Service Revenue", AccountType.REVENUE, "Revenue", StatementBucket.OTHER_REVENUE),
    ("5000", "Cost of Goods Sold", AccountType.EXPENSE, "Cost of Sales", StatementBucket.COST_OF_GOODS_SOLD),
    ("6000", "Salaries Expense", AccountType.EXPENSE, "Operating Expenses", StatementBucket.SALARIES),
    ("6100", "Rent Expense", AccountType.EXPENSE, "Operating Expenses", StatementBucket.RENT),
    ("6200", "Utilities Expense", AccountType.EXPENSE, "Operating Expenses", StatementBucket.UTILITIES),
    ("6300", "Office Supplies", AccountType.EXPENSE, "Operating Expenses", StatementBucket.OTHER_EXPENSE),
]

DEFAULT_COMPANY_SETTINGS = CompanySettings(
    name="Your Company Name",
    address="123 Business Street, City, Country",
    country="United States",
    currency="USD",
    tax_id="TAX123456789",
    financial_year_start="01-01",
    default_vat_rate=Decimal("20"),
    default_corporate_tax_rate=Decimal("25"),
)

# Buckets each account type may be tagged with
BUCKETS_BY_TYPE: dict[AccountType, frozenset[StatementBucket]] = {
    AccountType.ASSET: frozenset(
        {
            StatementBucket.CASH,
            StatementBucket.ACCOUNTS_RECEIVABLE,
            StatementBucket.INVENTORY,
            StatementBucket.OTHER_CURRENT_ASSET,
            StatementBucket.PROPERTY_PLANT_EQUIPMENT,
            StatementBucket.INTANGIBLE_ASSET,
            StatementBucket.OTHER_FIXED_ASSET,
        }
    ),
    AccountType.LIABILITY: frozenset(
        {
            StatementBucket.ACCOUNTS_PAYABLE,
            StatementBucket.SHORT_TERM_DEBT,
            StatementBucket.ACCRUED_EXPENSE,
            StatementBucket.OTHER_CURRENT_LIABILITY,
            StatementBucket.LONG_TERM_DEBT,
            StatementBucket.OTHER_LONG_TERM_LIABILITY,
        }
    ),
    AccountType.EQUITY: frozenset(
        {
            StatementBucket.SHARE_CAPITAL,
            StatementBucket.RETAINED_EARNINGS,
            StatementBucket.OTHER_EQUITY,
        }
    ),
    AccountType.REVENUE: frozenset(
        {StatementBucket.SALES_REVENUE, StatementBucket.OTHER_REVENUE}
    ),
    AccountType.EXPENSE: frozenset(
        {
            StatementBucket.COST_OF_GOODS_SOLD,
            StatementBucket.SALARIES,
            StatementBucket.RENT,
            StatementBucket.UTILITIES,
            StatementBucket.OTHER_EXPENSE,
        }
    ),
}


def classify_account(
    name: str, account_type: AccountType, category: str = ""
) -> StatementBucket:
    """Infer a statement bucket from an account's name and category.

    Used only for accounts created without an explicit bucket. Matching is
    keyword based and checks the first matching rule in order.
    """
    name = name.lower()
    category = category.lower()

    if account_type == AccountType.ASSET:
        if "cash" in name or "bank" in name:
            return StatementBucket.CASH
        if "receivable" in name:
            return StatementBucket.ACCOUNTS_RECEIVABLE
        if "inventory" in name or "stock" in name:
            return StatementBucket.INVENTORY
        if "intangible" in name or "goodwill" in name or "patent" in name:
            return StatementBucket.INTANGIBLE_ASSET
        if "current" in category:
            return StatementBucket.OTHER_CURRENT_ASSET
        return StatementBucket.PROPERTY_PLANT_EQUIPMENT

    if account_type == AccountType.LIABILITY:
        if "long" in name or "long" in category:
            return StatementBucket.LONG_TERM_DEBT
        if "payable" in name and "vat" not in name:
            return StatementBucket.ACCOUNTS_PAYABLE
        if "vat" in name or "accrued" in name or "tax" in name:
            return StatementBucket.ACCRUED_EXPENSE
        if "loan" in name or "debt" in name or "overdraft" in name:
            return StatementBucket.SHORT_TERM_DEBT
        return StatementBucket.OTHER_CURRENT_LIABILITY

    if account_type == AccountType.EQUITY:
        if "capital" in name:
            return StatementBucket.SHARE_CAPITAL
        if "retained" in name:
            return StatementBucket.RETAINED_EARNINGS
        return StatementBucket.OTHER_EQUITY

    if account_type == AccountType.REVENUE:
        if "sales" in name:
            return StatementBucket.SALES_REVENUE
        return StatementBucket.OTHER_REVENUE

    if "cost" in name:
        return StatementBucket.COST_OF_GOODS_SOLD
    if "salar" in name or "wage" in name:
        return StatementBucket.SALARIES
    if "rent" in name:
        return StatementBucket.RENT
    if "utilit" in name:
        return StatementBucket.UTILITIES
    return StatementBucket.OTHER_EXPENSE


def build_account(
    code: str,
    name: str,
    account_type: AccountType,
    category: str,
    bucket: Optional[StatementBucket] = None,
    currency: str = "USD",
    balance: Decimal = Decimal("0"),
    created_at: Optional[datetime] = None,
) -> Account:
    """Build an account, inferring its bucket when none is given.

    Raises:
        ValidationError: If the bucket does not belong to the account type
    """
    if bucket is None:
        bucket = classify_account(name, account_type, category)
    if bucket not in BUCKETS_BY_TYPE[account_type]:
        raise ValidationError(
            f"Statement bucket '{bucket.value}' is not valid for {account_type.value} accounts"
        )
    return Account(
        id=code,
        code=code,
        name=name,
        type=account_type,
        category=category,
        balance=balance,
        currency=currency,
        is_active=True,
        created_at=created_at or datetime.now(UTC),
        statement_bucket=bucket,
    )


def default_accounts() -> list[Account]:
    """Build a fresh default chart of accounts with zero balances."""
    now = datetime.now(UTC)
    return [
        build_account(code, name, account_type, category, bucket, created_at=now)
        for code, name, account_type, category, bucket in DEFAULT_CHART
    ]
