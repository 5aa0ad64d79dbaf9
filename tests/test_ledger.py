"""Tests for LedgerService: accounts, posting, reversal and filtering."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerly.domain.entities import (
    AccountType,
    StatementBucket,
    TransactionCategory,
    TransactionFilters,
    TransactionFolder,
    TransactionStatus,
)
from ledgerly.domain.errors import InvalidTransitionError, ValidationError
from ledgerly.domain.ledger import LedgerService
from ledgerly.storage.base import ACCOUNTS_KEY, TRANSACTIONS_KEY
from ledgerly.storage.memory import InMemoryStore


def balances(ledger):
    return {a.id: a.balance for a in ledger.get_accounts()}


class TestChartOfAccounts:
    """Tests for the default chart and account operations."""

    def test_default_chart_created_on_empty_store(self, memory_store):
        ledger = LedgerService(memory_store)
        codes = [a.code for a in ledger.get_accounts()]

        assert codes[:4] == ["1000", "1100", "1200", "1500"]
        assert len(codes) == 16
        assert all(a.balance == 0 for a in ledger.get_accounts())
        assert all(a.currency == "USD" for a in ledger.get_accounts())
        # Seeded chart is persisted
        assert len(memory_store.load(ACCOUNTS_KEY)) == 16

    def test_default_chart_buckets(self, ledger):
        assert ledger.get_account("1000").statement_bucket == StatementBucket.CASH
        assert ledger.get_account("2100").statement_bucket == StatementBucket.ACCRUED_EXPENSE
        assert ledger.get_account("2500").statement_bucket == StatementBucket.LONG_TERM_DEBT
        assert ledger.get_account("5000").statement_bucket == StatementBucket.COST_OF_GOODS_SOLD

    def test_find_account_by_code_and_name(self, ledger):
        assert ledger.find_account("1100").name == "Accounts Receivable"
        assert ledger.find_account("accounts receivable").code == "1100"
        assert ledger.find_account("Nope") is None

    def test_create_account_infers_bucket(self, ledger):
        account = ledger.create_account("1010", "Petty Cash", AccountType.ASSET)

        assert account.id == "1010"
        assert account.statement_bucket == StatementBucket.CASH
        assert ledger.get_account("1010") == account

    def test_create_account_explicit_bucket_wins_over_name(self, ledger):
        # The name alone would be read as a payable
        account = ledger.create_account(
            "1050",
            "Cash Advances Payable",
            AccountType.ASSET,
            statement_bucket=StatementBucket.OTHER_CURRENT_ASSET,
        )
        assert account.statement_bucket == StatementBucket.OTHER_CURRENT_ASSET

    def test_create_account_rejects_bucket_of_other_type(self, ledger):
        with pytest.raises(ValidationError):
            ledger.create_account(
                "1060", "Odd", AccountType.ASSET, statement_bucket=StatementBucket.RENT
            )

    def test_create_account_duplicate_code(self, ledger):
        with pytest.raises(ValidationError, match="already exists"):
            ledger.create_account("1000", "Another Cash", AccountType.ASSET)

    def test_create_account_unknown_currency(self, ledger):
        with pytest.raises(ValidationError):
            ledger.create_account("1070", "Zorkmid Cash", AccountType.ASSET, currency="ZZZ")

    def test_deactivated_accounts_are_still_listed(self, ledger):
        ledger.set_account_active("1200", False)

        accounts = {a.id: a for a in ledger.get_accounts()}
        assert accounts["1200"].is_active is False
        assert ledger.set_account_active("9999", False) is None


class TestPostTransaction:
    """Tests for posting transactions."""

    def test_post_moves_amount_between_accounts(self, ledger, make_draft):
        before = balances(ledger)
        txn = ledger.post_transaction(make_draft(amount=Decimal("250.50")))
        after = balances(ledger)

        assert after["1000"] - before["1000"] == Decimal("250.50")
        assert after["3000"] - before["3000"] == Decimal("-250.50")
        assert txn.id.startswith("txn_")
        assert txn.status == TransactionStatus.PENDING
        assert txn.created_at == txn.updated_at

    def test_trial_balance_stays_zero(self, ledger, make_draft):
        ledger.post_transaction(make_draft(amount=Decimal("10000")))
        ledger.post_transaction(
            make_draft(description="Stock", amount=Decimal("800"), debit_account="1200", credit_account="2000")
        )
        assert ledger.trial_balance() == 0

    def test_balance_by_type(self, ledger, make_draft):
        ledger.post_transaction(make_draft(amount=Decimal("500")))
        assert ledger.balance_by_type(AccountType.ASSET) == Decimal("500")
        assert ledger.balance_by_type(AccountType.EQUITY) == Decimal("-500")

    def test_vat_rate_sets_tax_amount(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft(amount=Decimal("1000"), vat_rate=Decimal("20")))
        assert txn.tax_amount == Decimal("200")

    def test_no_vat_rate_means_no_tax_amount(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        assert txn.vat_rate is None
        assert txn.tax_amount is None

    def test_same_debit_and_credit_rejected_without_side_effects(self, ledger, make_draft):
        before = balances(ledger)

        with pytest.raises(ValidationError, match="must be different"):
            ledger.post_transaction(make_draft(debit_account="1000", credit_account="1000"))

        assert balances(ledger) == before
        assert ledger.list_transactions() == []

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"description": "  "}, "Description"),
            ({"amount": Decimal("0")}, "greater than zero"),
            ({"amount": Decimal("-5")}, "greater than zero"),
            ({"currency": "ZZZ"}, "not supported"),
            ({"debit_account": "9999"}, "9999 not found"),
            ({"credit_account": "9999"}, "9999 not found"),
            ({"vat_rate": Decimal("120")}, "VAT rate"),
            ({"category": "gambling"}, "Invalid category"),
        ],
    )
    def test_invalid_drafts_rejected(self, ledger, make_draft, overrides, message):
        before = balances(ledger)

        with pytest.raises(ValidationError, match=message):
            ledger.post_transaction(make_draft(**overrides))

        assert balances(ledger) == before
        assert ledger.list_transactions() == []

    def test_cross_currency_accounts_rejected(self, ledger, make_draft):
        ledger.create_account("1001", "Euro Cash", AccountType.ASSET, currency="EUR")
        before = balances(ledger)

        with pytest.raises(ValidationError, match="Cross-currency"):
            ledger.post_transaction(make_draft(debit_account="1001", credit_account="3000"))

        assert balances(ledger) == before

    def test_transaction_currency_must_match_accounts(self, ledger, make_draft):
        before = balances(ledger)

        with pytest.raises(ValidationError, match="Transaction currency JPY does not match account currency USD"):
            ledger.post_transaction(make_draft(amount=Decimal("10000"), currency="JPY"))

        assert balances(ledger) == before
        assert ledger.list_transactions() == []

    def test_iso_string_date_is_parsed(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft(date="2024-01-15"))

        assert txn.date == date(2024, 1, 15)

    def test_datetime_date_keeps_calendar_day(self, ledger, make_draft):
        ledger.post_transaction(make_draft(date=datetime(2024, 1, 15, 9, 30)))

        result = ledger.list_transactions(TransactionFilters(date_from=date(2024, 1, 1)))

        assert [t.date for t in result] == [date(2024, 1, 15)]

    @pytest.mark.parametrize("bad_date", [None, "15/01/2024", "yesterday-ish", 20240115])
    def test_bad_date_rejected_without_side_effects(self, ledger, make_draft, bad_date):
        before = balances(ledger)

        with pytest.raises(ValidationError, match="[Dd]ate"):
            ledger.post_transaction(make_draft(date=bad_date))

        assert balances(ledger) == before
        assert ledger.list_transactions() == []

    def test_post_logs_at_info(self, ledger, make_draft, caplog):
        with caplog.at_level(logging.INFO, logger="ledgerly"):
            txn = ledger.post_transaction(make_draft())
        assert any(txn.id in r.getMessage() for r in caplog.records)


class TestUpdateTransaction:
    """Tests for reverse-then-reapply updates."""

    def test_update_amount(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft(amount=Decimal("100")))

        updated = ledger.update_transaction(txn.id, amount=Decimal("40"))

        assert updated.amount == Decimal("40")
        assert ledger.get_account("1000").balance == Decimal("40")
        assert ledger.get_account("3000").balance == Decimal("-40")
        assert updated.created_at == txn.created_at
        assert updated.updated_at >= txn.updated_at

    def test_update_equals_delete_then_post(self, make_draft):
        changes = dict(amount=Decimal("75"), debit_account="1100", credit_account="4000")

        updated_ledger = LedgerService(InMemoryStore())
        txn = updated_ledger.post_transaction(make_draft())
        updated_ledger.update_transaction(txn.id, **changes)

        reposted_ledger = LedgerService(InMemoryStore())
        txn = reposted_ledger.post_transaction(make_draft())
        reposted_ledger.delete_transaction(txn.id)
        reposted_ledger.post_transaction(make_draft(**changes))

        assert balances(updated_ledger) == balances(reposted_ledger)

    def test_descriptive_update_leaves_balances(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        before = balances(ledger)

        ledger.update_transaction(txn.id, description="Capital injection", reference="REF-1")

        assert balances(ledger) == before
        assert ledger.get_transaction(txn.id).description == "Capital injection"

    def test_invalid_update_changes_nothing(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        before = balances(ledger)

        with pytest.raises(ValidationError):
            ledger.update_transaction(txn.id, credit_account="1000")

        assert balances(ledger) == before
        assert ledger.get_transaction(txn.id) == txn

    def test_update_date_is_coerced(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())

        assert ledger.update_transaction(txn.id, date="2024-03-01").date == date(2024, 3, 1)
        assert ledger.update_transaction(txn.id, date=datetime(2024, 4, 2, 18)).date == date(2024, 4, 2)

    def test_update_bad_date_changes_nothing(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        before = balances(ledger)

        with pytest.raises(ValidationError, match="Invalid date"):
            ledger.update_transaction(txn.id, date="not a date")

        assert balances(ledger) == before
        assert ledger.get_transaction(txn.id) == txn

    def test_update_currency_must_match_accounts(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())

        with pytest.raises(ValidationError, match="Cross-currency"):
            ledger.update_transaction(txn.id, currency="EUR")

        assert ledger.get_transaction(txn.id) == txn

    def test_unknown_field_rejected(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        with pytest.raises(ValidationError, match="Cannot update fields"):
            ledger.update_transaction(txn.id, id="other")

    def test_update_missing_returns_none(self, ledger):
        assert ledger.update_transaction("txn_missing", amount=Decimal("1")) is None

    def test_update_recomputes_tax_amount(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft(amount=Decimal("100"), vat_rate=Decimal("20")))

        updated = ledger.update_transaction(txn.id, amount=Decimal("50"))
        assert updated.tax_amount == Decimal("10")

        cleared = ledger.update_transaction(txn.id, vat_rate=None)
        assert cleared.tax_amount is None


class TestTransactionStatus:
    """Tests for the transaction status lifecycle."""

    def test_approve_then_reconcile(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())

        assert ledger.set_transaction_status(txn.id, TransactionStatus.APPROVED).status == TransactionStatus.APPROVED
        assert ledger.set_transaction_status(txn.id, "reconciled").status == TransactionStatus.RECONCILED

    def test_reconciled_cannot_go_back_to_pending(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft(status=TransactionStatus.RECONCILED))

        with pytest.raises(InvalidTransitionError):
            ledger.set_transaction_status(txn.id, TransactionStatus.PENDING)

    def test_same_status_is_allowed(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        assert ledger.set_transaction_status(txn.id, TransactionStatus.PENDING).status == TransactionStatus.PENDING

    def test_status_change_keeps_balances(self, ledger, make_draft):
        txn = ledger.post_transaction(make_draft())
        before = balances(ledger)
        ledger.set_transaction_status(txn.id, TransactionStatus.APPROVED)
        assert balances(ledger) == before


class TestDeleteTransaction:
    """Tests for deleting transactions."""

    def test_delete_restores_balances(self, ledger, make_draft):
        before = balances(ledger)
        txn = ledger.post_transaction(make_draft(amount=Decimal("0.10")))
        ledger.post_transaction(make_draft(amount=Decimal("0.20"), debit_account="1100"))

        assert ledger.delete_transaction(txn.id) is True

        after = balances(ledger)
        assert after["1000"] == before["1000"]
        assert ledger.get_transaction(txn.id) is None

    def test_delete_missing_returns_false(self, ledger):
        assert ledger.delete_transaction("txn_missing") is False


class TestListTransactions:
    """Tests for filtering and ordering."""

    @pytest.fixture
    def posted(self, ledger, make_draft):
        return [
            ledger.post_transaction(
                make_draft(description="January sale", date=date(2024, 1, 10), amount=Decimal("100"),
                           category=TransactionCategory.SALES, debit_account="1100", credit_account="4000")
            ),
            ledger.post_transaction(
                make_draft(description="Rent", date=date(2024, 2, 1), amount=Decimal("900"),
                           category=TransactionCategory.RENT, folder=TransactionFolder.EXPENSES,
                           debit_account="6100", credit_account="1000")
            ),
            ledger.post_transaction(
                make_draft(description="February sale", date=date(2024, 2, 1), amount=Decimal("250"),
                           category=TransactionCategory.SALES, debit_account="1100", credit_account="4000")
            ),
        ]

    def test_newest_first_ties_in_posting_order(self, ledger, posted):
        result = ledger.list_transactions()
        assert [t.description for t in result] == ["Rent", "February sale", "January sale"]

    def test_date_range_is_inclusive(self, ledger, posted):
        result = ledger.list_transactions(
            TransactionFilters(date_from=date(2024, 1, 10), date_to=date(2024, 1, 10))
        )
        assert [t.description for t in result] == ["January sale"]

    def test_amount_bounds_are_inclusive(self, ledger, posted):
        result = ledger.list_transactions(
            TransactionFilters(min_amount=Decimal("100"), max_amount=Decimal("250"))
        )
        assert {t.description for t in result} == {"January sale", "February sale"}

    def test_category_and_folder(self, ledger, posted):
        sales = ledger.list_transactions(TransactionFilters(category=TransactionCategory.SALES))
        expenses = ledger.list_transactions(TransactionFilters(folder=TransactionFolder.EXPENSES))

        assert len(sales) == 2
        assert [t.description for t in expenses] == ["Rent"]

    def test_status_filter(self, ledger, posted):
        ledger.set_transaction_status(posted[0].id, TransactionStatus.APPROVED)
        result = ledger.list_transactions(TransactionFilters(status=TransactionStatus.APPROVED))
        assert [t.id for t in result] == [posted[0].id]


class TestPersistence:
    """Tests for loading and saving through the store."""

    def test_state_survives_reload(self, memory_store, make_draft):
        ledger = LedgerService(memory_store)
        txn = ledger.post_transaction(make_draft(amount=Decimal("123.45"), attachments=("receipt.pdf",)))

        reloaded = LedgerService(memory_store)

        assert reloaded.get_transaction(txn.id) == txn
        assert reloaded.get_account("1000").balance == Decimal("123.45")

    def test_corrupt_transactions_fall_back_to_empty(self, caplog):
        store = InMemoryStore({TRANSACTIONS_KEY: [{"id": "broken"}]})

        with caplog.at_level(logging.WARNING, logger="ledgerly"):
            ledger = LedgerService(store)

        assert ledger.list_transactions() == []
        assert "unreadable" in caplog.text

    def test_corrupt_transactions_with_stored_balances_logged_as_error(self, make_draft, caplog):
        ledger = LedgerService(InMemoryStore())
        ledger.post_transaction(make_draft())
        store = InMemoryStore(
            {
                ACCOUNTS_KEY: ledger.store.load(ACCOUNTS_KEY),
                TRANSACTIONS_KEY: [{"id": "broken"}],
            }
        )

        with caplog.at_level(logging.ERROR, logger="ledgerly"):
            reloaded = LedgerService(store)

        assert reloaded.get_account("1000").balance == Decimal("100.00")
        assert any(
            r.levelno == logging.ERROR and "cannot be reversed" in r.getMessage() for r in caplog.records
        )

    def test_failed_save_keeps_in_memory_state(self, make_draft, caplog):
        class FailingStore(InMemoryStore):
            def save(self, key, value):
                from ledgerly.domain.errors import StorageError

                raise StorageError("disk full")

        ledger = LedgerService(FailingStore())
        with caplog.at_level(logging.ERROR, logger="ledgerly"):
            txn = ledger.post_transaction(make_draft())

        assert ledger.get_transaction(txn.id) == txn
        assert "in-memory state kept" in caplog.text
