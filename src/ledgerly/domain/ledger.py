"""Ledger domain service: chart of accounts and double-entry postings."""

import dataclasses
import logging
import threading
import uuid
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from ledgerly.domain.chart import build_account, default_accounts
from ledgerly.domain.entities import (
    Account,
    AccountType,
    StatementBucket,
    Transaction,
    TransactionCategory,
    TransactionDraft,
    TransactionFilters,
    TransactionFolder,
    TransactionStatus,
)
from ledgerly.domain.errors import (
    ValidationError,
    account_not_found,
    currency_mismatch,
    transaction_currency_mismatch,
)
from ledgerly.domain.lifecycle import check_transaction_transition
from ledgerly.domain.money import HUNDRED, ZERO, optional_decimal, percentage_of, to_date, to_decimal
from ledgerly.domain.reference_data import DEFAULT_REFERENCE, ReferenceData
from ledgerly.storage import mappers
from ledgerly.storage.base import ACCOUNTS_KEY, TRANSACTIONS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "description",
        "reference",
        "amount",
        "currency",
        "category",
        "folder",
        "date",
        "debit_account",
        "credit_account",
        "vat_rate",
        "attachments",
        "status",
    }
)


class LedgerService:
    """Service owning accounts and transactions.

    Every posted transaction adds its amount to the debit account's balance
    and subtracts it from the credit account's balance. Updates reverse the
    old effect before applying the new one; deletes reverse and remove.
    State is loaded from the store once on construction and saved after
    every mutation.
    """

    def __init__(self, store: KeyValueStore, reference: Optional[ReferenceData] = None):
        """Initialize ledger service.

        Args:
            store: Key-value store holding the accounts and transactions documents
            reference: Reference data used to validate currencies
        """
        self.store = store
        self.reference = reference if reference is not None else DEFAULT_REFERENCE
        self._lock = threading.RLock()
        self._accounts: dict[str, Account] = {}
        self._transactions: list[Transaction] = []
        self._load()

    # Persistence
    def _load(self) -> None:
        try:
            account_records = self.store.load_or_default(ACCOUNTS_KEY, [])
            accounts = [mappers.account_to_domain(r) for r in account_records]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored accounts are unreadable; using default chart", exc_info=True)
            accounts = []

        try:
            txn_records = self.store.load_or_default(TRANSACTIONS_KEY, [])
            self._transactions = [mappers.transaction_to_domain(r) for r in txn_records]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored transactions are unreadable; starting empty", exc_info=True)
            self._transactions = []
            if accounts:
                logger.error(
                    "Account balances still include the effects of the unreadable "
                    "transactions; they cannot be reversed until the transactions "
                    "document is repaired"
                )

        if not accounts:
            accounts = default_accounts()
            self._accounts = {a.id: a for a in accounts}
            self._save_accounts()
        else:
            self._accounts = {a.id: a for a in accounts}

    def _save_accounts(self) -> None:
        self.store.save_best_effort(
            ACCOUNTS_KEY, [mappers.account_to_record(a) for a in self._accounts.values()]
        )

    def _save_transactions(self) -> None:
        self.store.save_best_effort(
            TRANSACTIONS_KEY,
            [mappers.transaction_to_record(t) for t in self._transactions],
        )

    # Account operations
    def get_accounts(self) -> list[Account]:
        """List all accounts, including inactive ones, in chart order."""
        with self._lock:
            return list(self._accounts.values())

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        with self._lock:
            return self._accounts.get(account_id)

    def find_account(self, code_or_name: str) -> Optional[Account]:
        """Find an account by ID, code, or case-insensitive name."""
        with self._lock:
            if code_or_name in self._accounts:
                return self._accounts[code_or_name]
            wanted = code_or_name.strip().lower()
            for account in self._accounts.values():
                if account.code == code_or_name or account.name.lower() == wanted:
                    return account
        return None

    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        category: str = "",
        statement_bucket: Optional[StatementBucket] = None,
        currency: str = "USD",
    ) -> Account:
        """Add an account to the chart with a zero balance.

        Args:
            code: Account code, also used as the account ID
            name: Account name
            account_type: asset, liability, equity, revenue or expense
            category: Free-text category
            statement_bucket: Statement line; inferred from the name if omitted
            currency: Account currency

        Raises:
            ValidationError: If the code or name is taken, or the currency or
                bucket is invalid
        """
        if not code or not code.strip():
            raise ValidationError("Account code is required")
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        self.reference.currency(currency)
        account_type = self._coerce(AccountType, account_type, "account type")
        code = code.strip()

        with self._lock:
            if code in self._accounts:
                raise ValidationError(f"Account with code '{code}' already exists")
            for existing in self._accounts.values():
                if existing.name.lower() == name.strip().lower():
                    raise ValidationError(f"Account with name '{name}' already exists")

            account = build_account(
                code=code,
                name=name.strip(),
                account_type=account_type,
                category=category,
                bucket=statement_bucket,
                currency=currency.upper(),
            )
            self._accounts[account.id] = account
            self._save_accounts()
        logger.info("Created account %s (%s)", account.code, account.name)
        return account

    def set_account_active(self, account_id: str, is_active: bool) -> Optional[Account]:
        """Activate or deactivate an account. Returns None if not found."""
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            account = dataclasses.replace(account, is_active=is_active)
            self._accounts[account_id] = account
            self._save_accounts()
        return account

    def trial_balance(self) -> Decimal:
        """Sum of all account balances. Zero while every posting is balanced."""
        with self._lock:
            return sum((a.balance for a in self._accounts.values()), ZERO)

    def balance_by_type(self, account_type: AccountType) -> Decimal:
        """Sum balances of all accounts of one type."""
        with self._lock:
            return sum(
                (a.balance for a in self._accounts.values() if a.type == account_type),
                ZERO,
            )

    # Transaction operations
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        with self._lock:
            index = self._index_of(transaction_id)
            return None if index is None else self._transactions[index]

    def post_transaction(self, data: TransactionDraft) -> Transaction:
        """Post a new transaction and apply its balance effect.

        Args:
            data: Transaction input

        Returns:
            The posted transaction with its ID, tax amount and timestamps

        Raises:
            ValidationError: If any field is invalid, either account is
                unknown, the two accounts are the same, or the accounts and the
                transaction do not share one currency. Balances are left
                untouched.
        """
        now = datetime.now(UTC)
        amount = to_decimal(data.amount)
        vat_rate = optional_decimal(data.vat_rate, "VAT rate")
        candidate = Transaction(
            id=f"txn_{uuid.uuid4().hex[:16]}",
            date=to_date(data.date),
            description=(data.description or "").strip(),
            reference=data.reference or "",
            amount=amount,
            currency=(data.currency or "").upper(),
            category=self._coerce(TransactionCategory, data.category, "category"),
            folder=self._coerce(TransactionFolder, data.folder, "folder"),
            debit_account=data.debit_account,
            credit_account=data.credit_account,
            vat_rate=vat_rate,
            tax_amount=self._tax_amount(amount, vat_rate),
            attachments=tuple(data.attachments or ()),
            status=self._coerce(TransactionStatus, data.status, "status"),
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._validate(candidate)
            self._transactions.append(candidate)
            self._apply(candidate, 1)
            self._save_transactions()
            self._save_accounts()

        logger.info(
            "Posted %s: %s %s from %s to %s",
            candidate.id,
            candidate.amount,
            candidate.currency,
            candidate.credit_account,
            candidate.debit_account,
        )
        return candidate

    def update_transaction(self, transaction_id: str, **changes: Any) -> Optional[Transaction]:
        """Update transaction fields.

        The old balance effect is always reversed and the merged transaction
        reapplied, even when only descriptive fields change.

        Args:
            transaction_id: Transaction ID to update
            **changes: Field values to replace (see UPDATABLE_FIELDS)

        Returns:
            The updated transaction, or None if not found

        Raises:
            ValidationError: If a field is unknown or the merged transaction is
                invalid. Nothing is changed in that case.
            InvalidTransitionError: If the status change is not permitted
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._lock:
            index = self._index_of(transaction_id)
            if index is None:
                return None
            old = self._transactions[index]

            fields = dict(changes)
            if "amount" in fields:
                fields["amount"] = to_decimal(fields["amount"])
            if "date" in fields:
                fields["date"] = to_date(fields["date"])
            if "vat_rate" in fields:
                fields["vat_rate"] = optional_decimal(fields["vat_rate"], "VAT rate")
            if "currency" in fields:
                fields["currency"] = (fields["currency"] or "").upper()
            if "description" in fields:
                fields["description"] = (fields["description"] or "").strip()
            if "category" in fields:
                fields["category"] = self._coerce(TransactionCategory, fields["category"], "category")
            if "folder" in fields:
                fields["folder"] = self._coerce(TransactionFolder, fields["folder"], "folder")
            if "status" in fields:
                fields["status"] = self._coerce(TransactionStatus, fields["status"], "status")
                check_transaction_transition(old.status, fields["status"])
            if "attachments" in fields:
                fields["attachments"] = tuple(fields["attachments"] or ())

            updated = dataclasses.replace(old, **fields, updated_at=datetime.now(UTC))
            updated = dataclasses.replace(
                updated, tax_amount=self._tax_amount(updated.amount, updated.vat_rate)
            )
            self._validate(updated)

            self._apply(old, -1)
            self._apply(updated, 1)
            self._transactions[index] = updated
            self._save_transactions()
            self._save_accounts()

        logger.info("Updated %s (%s)", transaction_id, ", ".join(sorted(changes)) or "no fields")
        return updated

    def set_transaction_status(
        self, transaction_id: str, status: TransactionStatus
    ) -> Optional[Transaction]:
        """Move a transaction to a new status. Returns None if not found."""
        return self.update_transaction(transaction_id, status=status)

    def delete_transaction(self, transaction_id: str) -> bool:
        """Reverse a transaction's balance effect and remove it.

        Returns:
            True if deleted, False if no such transaction
        """
        with self._lock:
            index = self._index_of(transaction_id)
            if index is None:
                return False
            txn = self._transactions.pop(index)
            self._apply(txn, -1)
            self._save_transactions()
            self._save_accounts()
        logger.info("Deleted %s and reversed %s %s", transaction_id, txn.amount, txn.currency)
        return True

    def list_transactions(self, filters: Optional[TransactionFilters] = None) -> list[Transaction]:
        """List transactions with filters, newest first.

        Transactions sharing a date keep their posting order.

        Args:
            filters: Optional filters; every bound is inclusive

        Returns:
            List of transaction entities
        """
        with self._lock:
            result = list(self._transactions)

        if filters is not None:
            if filters.date_from is not None:
                result = [t for t in result if t.date >= filters.date_from]
            if filters.date_to is not None:
                result = [t for t in result if t.date <= filters.date_to]
            if filters.category is not None:
                result = [t for t in result if t.category == filters.category]
            if filters.folder is not None:
                result = [t for t in result if t.folder == filters.folder]
            if filters.currency is not None:
                currency = filters.currency.upper()
                result = [t for t in result if t.currency == currency]
            if filters.min_amount is not None:
                result = [t for t in result if t.amount >= filters.min_amount]
            if filters.max_amount is not None:
                result = [t for t in result if t.amount <= filters.max_amount]
            if filters.status is not None:
                result = [t for t in result if t.status == filters.status]

        return sorted(result, key=lambda t: t.date, reverse=True)

    # Internals
    def _index_of(self, transaction_id: str) -> Optional[int]:
        for index, txn in enumerate(self._transactions):
            if txn.id == transaction_id:
                return index
        return None

    @staticmethod
    def _coerce(enum_type, value, field_name: str):
        try:
            return enum_type(value)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            raise ValidationError(f"Invalid {field_name} '{value}' (expected one of: {allowed})")

    @staticmethod
    def _tax_amount(amount: Decimal, vat_rate: Optional[Decimal]) -> Optional[Decimal]:
        if vat_rate is None:
            return None
        return percentage_of(amount, vat_rate)

    def _validate(self, txn: Transaction) -> None:
        """Check a transaction before its balance effect is applied."""
        if not txn.description:
            raise ValidationError("Description is required")
        if txn.amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if txn.vat_rate is not None and not (ZERO <= txn.vat_rate <= HUNDRED):
            raise ValidationError("VAT rate must be between 0 and 100")
        self.reference.currency(txn.currency)

        if txn.debit_account == txn.credit_account:
            raise ValidationError("Debit and credit accounts must be different")
        debit = self._accounts.get(txn.debit_account)
        if debit is None:
            raise ValidationError(account_not_found(txn.debit_account))
        credit = self._accounts.get(txn.credit_account)
        if credit is None:
            raise ValidationError(account_not_found(txn.credit_account))
        if debit.currency != credit.currency:
            raise ValidationError(currency_mismatch(debit.currency, credit.currency))
        if txn.currency != debit.currency:
            raise ValidationError(transaction_currency_mismatch(txn.currency, debit.currency))

    def _apply(self, txn: Transaction, sign: int) -> None:
        """Apply (sign=1) or reverse (sign=-1) a transaction's balance effect."""
        delta = txn.amount * sign
        debit = self._accounts.get(txn.debit_account)
        if debit is not None:
            self._accounts[debit.id] = dataclasses.replace(debit, balance=debit.balance + delta)
        credit = self._accounts.get(txn.credit_account)
        if credit is not None:
            self._accounts[credit.id] = dataclasses.replace(credit, balance=credit.balance - delta)
