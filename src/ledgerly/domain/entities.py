"""Domain model entities for ledgerly.

These are pure data classes representing business concepts, independent of
how they are persisted. Storage records are produced by
``ledgerly.storage.mappers`` so the ledger logic stays stable when the
storage layout changes.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Top-level account classification."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class StatementBucket(str, Enum):
    """Financial statement line an account contributes to."""

    # Balance sheet: current assets
    CASH = "cash"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    OTHER_CURRENT_ASSET = "other_current_asset"
    # Balance sheet: fixed assets
    PROPERTY_PLANT_EQUIPMENT = "property_plant_equipment"
    INTANGIBLE_ASSET = "intangible_asset"
    OTHER_FIXED_ASSET = "other_fixed_asset"
    # Balance sheet: current liabilities
    ACCOUNTS_PAYABLE = "accounts_payable"
    SHORT_TERM_DEBT = "short_term_debt"
    ACCRUED_EXPENSE = "accrued_expense"
    OTHER_CURRENT_LIABILITY = "other_current_liability"
    # Balance sheet: long-term liabilities
    LONG_TERM_DEBT = "long_term_debt"
    OTHER_LONG_TERM_LIABILITY = "other_long_term_liability"
    # Balance sheet: equity
    SHARE_CAPITAL = "share_capital"
    RETAINED_EARNINGS = "retained_earnings"
    OTHER_EQUITY = "other_equity"
    # Profit and loss: revenue
    SALES_REVENUE = "sales_revenue"
    OTHER_REVENUE = "other_revenue"
    # Profit and loss: expenses
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    SALARIES = "salaries"
    RENT = "rent"
    UTILITIES = "utilities"
    OTHER_EXPENSE = "other_expense"


class TransactionCategory(str, Enum):
    """Business classification of a transaction."""

    SALES = "sales"
    PURCHASE = "purchase"
    UTILITY = "utility"
    RENT = "rent"
    SALARY = "salary"
    DIVIDEND = "dividend"
    OTHER = "other"


class TransactionFolder(str, Enum):
    """Coarse bucket for organizing transactions."""

    BANK = "bank"
    EXPENSES = "expenses"
    SUSPENSE = "suspense"


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"
    RECONCILED = "reconciled"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class VATType(str, Enum):
    """Which of a country's published VAT rates applies."""

    STANDARD = "standard"
    REDUCED = "reduced"
    ZERO = "zero"


@dataclass(frozen=True)
class Currency:
    """Currency reference data. ``rate`` is relative to USD."""

    code: str
    name: str
    symbol: str
    rate: Decimal


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: str
    code: str
    name: str
    type: AccountType
    category: str
    balance: Decimal
    currency: str
    is_active: bool
    created_at: datetime
    statement_bucket: StatementBucket


@dataclass(frozen=True)
class Transaction:
    """Posted transaction domain entity."""

    id: str
    date: date
    description: str
    reference: str
    amount: Decimal
    currency: str
    category: TransactionCategory
    folder: TransactionFolder
    debit_account: str
    credit_account: str
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime
    vat_rate: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    attachments: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransactionDraft:
    """Input for posting a new transaction."""

    description: str
    amount: Decimal
    currency: str
    category: TransactionCategory
    folder: TransactionFolder
    date: date
    debit_account: str
    credit_account: str
    reference: str = ""
    vat_rate: Optional[Decimal] = None
    attachments: tuple[str, ...] = ()
    status: TransactionStatus = TransactionStatus.PENDING


@dataclass(frozen=True)
class TransactionFilters:
    """Filters for listing transactions. ``None`` means no filter."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    category: Optional[TransactionCategory] = None
    folder: Optional[TransactionFolder] = None
    currency: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    status: Optional[TransactionStatus] = None


@dataclass(frozen=True)
class InvoiceItem:
    """Invoice line item. ``amount`` is always quantity * unit price."""

    id: str
    description: str
    quantity: int
    unit_price: Decimal
    vat_rate: Decimal = Decimal("0")

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class InvoiceItemDraft:
    """Input for an invoice line item before it is assigned an ID.

    An item without its own VAT rate takes the invoice rate.
    """

    description: str
    quantity: int
    unit_price: Decimal
    vat_rate: Optional[Decimal] = None


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity.

    Totals are derived from ``items`` and ``vat_rate`` on every access, so
    they can never go stale when items change.
    """

    id: str
    number: str
    customer_id: str
    customer_name: str
    customer_address: str
    date: date
    due_date: date
    currency: str
    items: tuple[InvoiceItem, ...]
    vat_rate: Decimal
    status: InvoiceStatus
    notes: str
    created_at: datetime
    updated_at: datetime

    @property
    def subtotal(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0"))

    @property
    def vat_amount(self) -> Decimal:
        return self.subtotal * self.vat_rate / 100

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.vat_amount

    def is_overdue(self, today: date) -> bool:
        """Return True if the invoice is unpaid and past its due date."""
        if self.status == InvoiceStatus.OVERDUE:
            return True
        return self.status == InvoiceStatus.SENT and self.due_date < today


@dataclass(frozen=True)
class InvoiceFilters:
    """Filters for listing invoices. Amount bounds apply to the total."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    customer_id: Optional[str] = None
    currency: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class Customer:
    """Customer reference record."""

    id: str
    name: str
    email: str
    phone: str
    address: str
    country: str
    currency: str
    created_at: datetime
    tax_id: Optional[str] = None
    credit_limit: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class Vendor:
    """Vendor reference record."""

    id: str
    name: str
    email: str
    phone: str
    address: str
    country: str
    currency: str
    created_at: datetime
    tax_id: Optional[str] = None
    balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class CompanySettings:
    """Company-wide settings, replaced wholesale on save."""

    name: str
    address: str
    country: str
    currency: str
    tax_id: str
    financial_year_start: str
    default_vat_rate: Decimal
    default_corporate_tax_rate: Decimal
    logo: Optional[str] = None


@dataclass(frozen=True)
class FinancialPeriod:
    """Reporting period."""

    start_date: date
    end_date: date
    name: str
    is_closed: bool = False


@dataclass(frozen=True)
class CurrentAssets:
    cash: Decimal
    accounts_receivable: Decimal
    inventory: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.cash + self.accounts_receivable + self.inventory + self.other


@dataclass(frozen=True)
class FixedAssets:
    property_plant_equipment: Decimal
    intangible_assets: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.property_plant_equipment + self.intangible_assets + self.other


@dataclass(frozen=True)
class CurrentLiabilities:
    accounts_payable: Decimal
    short_term_debt: Decimal
    accrued_expenses: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.accounts_payable
            + self.short_term_debt
            + self.accrued_expenses
            + self.other
        )


@dataclass(frozen=True)
class LongTermLiabilities:
    long_term_debt: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.long_term_debt + self.other


@dataclass(frozen=True)
class Equity:
    share_capital: Decimal
    retained_earnings: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.share_capital + self.retained_earnings + self.other


@dataclass(frozen=True)
class BalanceSheet:
    """Balance sheet snapshot derived from current account balances."""

    period: FinancialPeriod
    currency: str
    current_assets: CurrentAssets
    fixed_assets: FixedAssets
    current_liabilities: CurrentLiabilities
    long_term_liabilities: LongTermLiabilities
    equity: Equity

    @property
    def total_assets(self) -> Decimal:
        return self.current_assets.total + self.fixed_assets.total

    @property
    def total_liabilities(self) -> Decimal:
        return self.current_liabilities.total + self.long_term_liabilities.total

    @property
    def imbalance(self) -> Decimal:
        """Assets minus liabilities and equity. Zero when the sheet balances."""
        return self.total_assets - (self.total_liabilities + self.equity.total)

    @property
    def is_balanced(self) -> bool:
        return abs(self.imbalance) < Decimal("0.005")


@dataclass(frozen=True)
class Revenue:
    sales: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.sales + self.other


@dataclass(frozen=True)
class Expenses:
    cost_of_goods_sold: Decimal
    salaries: Decimal
    rent: Decimal
    utilities: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.cost_of_goods_sold
            + self.salaries
            + self.rent
            + self.utilities
            + self.other
        )


@dataclass(frozen=True)
class ProfitAndLoss:
    """Profit and loss statement derived from current account balances."""

    period: FinancialPeriod
    currency: str
    revenue: Revenue
    expenses: Expenses
    corporate_rate: Decimal

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue.total - self.expenses.cost_of_goods_sold

    @property
    def profit_before_tax(self) -> Decimal:
        return self.revenue.total - self.expenses.total

    @property
    def tax_expense(self) -> Decimal:
        return max(Decimal("0"), self.profit_before_tax * self.corporate_rate / 100)

    @property
    def net_profit(self) -> Decimal:
        return self.profit_before_tax - self.tax_expense


@dataclass(frozen=True)
class DashboardKPIs:
    """Headline figures for a reporting period."""

    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    cash_balance: Decimal
    accounts_receivable: Decimal
    accounts_payable: Decimal
    current_ratio: Decimal
    currency: str
    period: str
    transaction_count: int = 0
