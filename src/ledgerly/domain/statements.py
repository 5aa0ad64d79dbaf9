"""Financial statements derived from current account balances.

Nothing here is persisted. Each call reads the ledger's balances, groups
accounts by their statement bucket and sums each line. Credit-normal
accounts (liabilities, equity, revenue) carry negative balances under the
posting rule, so their lines are reported as absolute values.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from ledgerly.domain.entities import (
    Account,
    AccountType,
    BalanceSheet,
    CurrentAssets,
    CurrentLiabilities,
    DashboardKPIs,
    Equity,
    Expenses,
    FixedAssets,
    LongTermLiabilities,
    ProfitAndLoss,
    Revenue,
    StatementBucket as B,
    TransactionFilters,
    TransactionStatus,
)
from ledgerly.domain.ledger import LedgerService
from ledgerly.domain.money import ZERO
from ledgerly.domain.settings import SettingsService

logger = logging.getLogger(__name__)

CREDIT_NORMAL_TYPES = frozenset({AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE})


def bucket_totals(accounts: list[Account]) -> dict[B, Decimal]:
    """Sum account balances per statement bucket.

    Credit-normal accounts contribute the absolute value of their balance.
    """
    totals: dict[B, Decimal] = defaultdict(lambda: ZERO)
    for account in accounts:
        balance = account.balance
        if account.type in CREDIT_NORMAL_TYPES:
            balance = abs(balance)
        totals[account.statement_bucket] += balance
    return totals


class StatementService:
    """Service deriving the balance sheet, P&L and dashboard figures."""

    def __init__(self, ledger: LedgerService, settings: SettingsService):
        """Initialize statement service.

        Args:
            ledger: Ledger whose account balances are reported
            settings: Company settings (reporting currency, tax rate, year start)
        """
        self.ledger = ledger
        self.settings = settings

    def derive_balance_sheet(self, today: Optional[date] = None) -> BalanceSheet:
        """Derive the balance sheet from current balances.

        An unbalanced sheet is logged and returned; check ``is_balanced``.
        """
        totals = bucket_totals(self.ledger.get_accounts())
        sheet = BalanceSheet(
            period=self.settings.current_period(today),
            currency=self.settings.get_settings().currency,
            current_assets=CurrentAssets(
                cash=totals[B.CASH],
                accounts_receivable=totals[B.ACCOUNTS_RECEIVABLE],
                inventory=totals[B.INVENTORY],
                other=totals[B.OTHER_CURRENT_ASSET],
            ),
            fixed_assets=FixedAssets(
                property_plant_equipment=totals[B.PROPERTY_PLANT_EQUIPMENT],
                intangible_assets=totals[B.INTANGIBLE_ASSET],
                other=totals[B.OTHER_FIXED_ASSET],
            ),
            current_liabilities=CurrentLiabilities(
                accounts_payable=totals[B.ACCOUNTS_PAYABLE],
                short_term_debt=totals[B.SHORT_TERM_DEBT],
                accrued_expenses=totals[B.ACCRUED_EXPENSE],
                other=totals[B.OTHER_CURRENT_LIABILITY],
            ),
            long_term_liabilities=LongTermLiabilities(
                long_term_debt=totals[B.LONG_TERM_DEBT],
                other=totals[B.OTHER_LONG_TERM_LIABILITY],
            ),
            equity=Equity(
                share_capital=totals[B.SHARE_CAPITAL],
                retained_earnings=totals[B.RETAINED_EARNINGS],
                other=totals[B.OTHER_EQUITY],
            ),
        )
        if not sheet.is_balanced:
            logger.warning(
                "Balance sheet does not balance: assets %s, liabilities %s, equity %s",
                sheet.total_assets,
                sheet.total_liabilities,
                sheet.equity.total,
            )
        return sheet

    def derive_profit_loss(self, today: Optional[date] = None) -> ProfitAndLoss:
        """Derive the profit and loss statement from current balances.

        Tax expense is a flat estimate at the company's default corporate
        rate, not a full corporate tax computation.
        """
        totals = bucket_totals(self.ledger.get_accounts())
        company = self.settings.get_settings()
        return ProfitAndLoss(
            period=self.settings.current_period(today),
            currency=company.currency,
            revenue=Revenue(
                sales=totals[B.SALES_REVENUE],
                other=totals[B.OTHER_REVENUE],
            ),
            expenses=Expenses(
                cost_of_goods_sold=totals[B.COST_OF_GOODS_SOLD],
                salaries=totals[B.SALARIES],
                rent=totals[B.RENT],
                utilities=totals[B.UTILITIES],
                other=totals[B.OTHER_EXPENSE],
            ),
            corporate_rate=company.default_corporate_tax_rate,
        )

    def dashboard_kpis(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> DashboardKPIs:
        """Headline figures for a period (defaults to the current month).

        Balance figures are current balances; the period only labels the
        result and scopes the count of non-pending transactions. Payables
        include accrued liabilities such as VAT payable.

        Args:
            start: First day of the period
            end: Last day of the period

        Returns:
            DashboardKPIs
        """
        today = date.today()
        start = start or today.replace(day=1)
        end = end or today + relativedelta(day=31)

        sheet = self.derive_balance_sheet(today)
        pnl = self.derive_profit_loss(today)

        receivable = sheet.current_assets.accounts_receivable
        liabilities = sheet.current_liabilities
        payable = liabilities.accounts_payable + liabilities.accrued_expenses
        liquid = sheet.current_assets.cash + receivable
        current_ratio = liquid / payable if payable > 0 else ZERO

        in_period = [
            t
            for t in self.ledger.list_transactions(TransactionFilters(date_from=start, date_to=end))
            if t.status != TransactionStatus.PENDING
        ]

        return DashboardKPIs(
            total_revenue=pnl.revenue.total,
            total_expenses=pnl.expenses.total,
            net_profit=pnl.revenue.total - pnl.expenses.total,
            cash_balance=sheet.current_assets.cash,
            accounts_receivable=receivable,
            accounts_payable=payable,
            current_ratio=current_ratio,
            currency=pnl.currency,
            period=f"{start.isoformat()} - {end.isoformat()}",
            transaction_count=len(in_period),
        )

