"""Tests for the key-value stores, store factory and record mappers."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from ledgerly.domain import entities as domain
from ledgerly.domain.errors import StorageError
from ledgerly.storage import mappers
from ledgerly.storage.base import ALL_KEYS, SETTINGS_KEY, KeyValueStore
from ledgerly.storage.factories import DB_PATH_ENV, create_sqlite_store
from ledgerly.storage.memory import InMemoryStore


class FailingStore(KeyValueStore):
    """Store whose backend is always unavailable."""

    def load(self, key):
        raise StorageError("backend down")

    def save(self, key, value):
        raise StorageError("backend down")


@pytest.fixture(params=["memory", "sqlite"])
def store(request, memory_store, sqlite_store):
    return memory_store if request.param == "memory" else sqlite_store


class TestKeyValueStore:
    """Behaviour shared by every store implementation."""

    def test_missing_key_is_none(self, store):
        assert store.load("transactions") is None

    def test_round_trip_replaces_value(self, store):
        store.save("accounts", [{"id": "1000", "balance": "12.50"}])
        store.save("accounts", [{"id": "1100"}])

        assert store.load("accounts") == [{"id": "1100"}]

    def test_keys(self, store):
        store.save("vendors", [])
        store.save("customers", [])

        assert store.keys() == ["customers", "vendors"]

    def test_non_serializable_value(self, store):
        with pytest.raises(StorageError):
            store.save("settings", {"rate": Decimal("1")})

    def test_load_or_default(self, store):
        assert store.load_or_default("invoices", []) == []
        store.save("invoices", [{"id": "inv_1"}])
        assert store.load_or_default("invoices", []) == [{"id": "inv_1"}]

    def test_all_keys_are_distinct(self):
        assert len(set(ALL_KEYS)) == len(ALL_KEYS) == 7


class TestBestEffort:
    """Tests for the logging wrappers around load and save."""

    def test_load_failure_returns_default(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ledgerly"):
            assert FailingStore().load_or_default("accounts", []) == []
        assert "Could not load 'accounts'" in caplog.text

    def test_save_failure_returns_false(self, caplog):
        with caplog.at_level(logging.ERROR, logger="ledgerly"):
            assert FailingStore().save_best_effort("accounts", []) is False
        assert "Could not save 'accounts'" in caplog.text

    def test_save_success_returns_true(self, memory_store):
        assert memory_store.save_best_effort(SETTINGS_KEY, {"name": "x"}) is True


class TestSQLiteStore:
    """Tests specific to the SQLite backend."""

    def test_data_survives_reopen(self, temp_db_path):
        first = create_sqlite_store(temp_db_path)
        first.save("customers", [{"id": "cust_1"}])
        first.close()

        second = create_sqlite_store(temp_db_path)
        try:
            assert second.load("customers") == [{"id": "cust_1"}]
        finally:
            second.close()

    def test_corrupt_document_raises(self, sqlite_store):
        from ledgerly.storage.models import Document

        session = sqlite_store._get_session()
        session.add(Document(key="accounts", value="{not json"))
        session.commit()

        with pytest.raises(StorageError, match="corrupt"):
            sqlite_store.load("accounts")

    def test_in_memory_database(self):
        store = create_sqlite_store(":memory:")
        store.save("settings", {"name": "x"})
        assert store.load("settings") == {"name": "x"}
        store.close()

    def test_path_from_environment(self, tmp_path, monkeypatch):
        db_path = tmp_path / "nested" / "books.db"
        monkeypatch.setenv(DB_PATH_ENV, str(db_path))

        store = create_sqlite_store()
        store.save("vendors", [])
        store.close()

        assert db_path.exists()


class TestInMemoryStore:
    """Tests specific to the in-memory store."""

    def test_initial_documents(self):
        store = InMemoryStore({"settings": {"name": "Seeded"}})
        assert store.load("settings") == {"name": "Seeded"}

    def test_loaded_values_are_copies(self, memory_store):
        memory_store.save("customers", [{"id": "a"}])
        memory_store.load("customers").append({"id": "b"})

        assert memory_store.load("customers") == [{"id": "a"}]


class TestMappers:
    """Tests for record mappers."""

    def _txn(self, **overrides):
        now = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)
        fields = dict(
            id="txn_1",
            date=date(2024, 1, 15),
            description="Invoice payment",
            reference="INV-2024-0001",
            amount=Decimal("1234.56"),
            currency="USD",
            category=domain.TransactionCategory.SALES,
            folder=domain.TransactionFolder.BANK,
            debit_account="1000",
            credit_account="1100",
            status=domain.TransactionStatus.APPROVED,
            created_at=now,
            updated_at=now,
            vat_rate=Decimal("20"),
            tax_amount=Decimal("246.912"),
            attachments=("receipt.pdf",),
        )
        fields.update(overrides)
        return domain.Transaction(**fields)

    def test_transaction_record_layout(self):
        record = mappers.transaction_to_record(self._txn())

        assert record["amount"] == "1234.56"
        assert record["date"] == "2024-01-15"
        assert record["debitAccount"] == "1000"
        assert record["category"] == "sales"
        assert record["attachments"] == ["receipt.pdf"]

    def test_transaction_round_trip_keeps_decimals_exact(self):
        txn = self._txn(vat_rate=None, tax_amount=None)

        assert mappers.transaction_to_domain(mappers.transaction_to_record(txn)) == txn

    def test_transaction_date_accepts_timestamps(self):
        record = mappers.transaction_to_record(self._txn())
        record["date"] = "2024-01-15T00:00:00.000Z"
        record["createdAt"] = "2024-01-15T09:30:00Z"

        txn = mappers.transaction_to_domain(record)
        assert txn.date == date(2024, 1, 15)
        assert txn.created_at == datetime(2024, 1, 15, 9, 30, tzinfo=UTC)

    def test_account_without_bucket_is_classified(self):
        record = {
            "id": "1010",
            "name": "Petty Cash",
            "type": "asset",
            "category": "Current Assets",
            "balance": "50",
            "createdAt": "2024-01-01T00:00:00+00:00",
        }

        account = mappers.account_to_domain(record)

        assert account.statement_bucket == domain.StatementBucket.CASH
        assert account.code == "1010"
        assert account.is_active is True

    def test_invoice_totals_recomputed_on_load(self):
        record = {
            "id": "inv_1",
            "number": "INV-2024-0001",
            "customerId": "cust_1",
            "date": "2024-01-01",
            "dueDate": "2024-01-31",
            "currency": "GBP",
            "items": [{"id": "item_1", "description": "Work", "quantity": 3, "unitPrice": "10", "amount": "999"}],
            "vatRate": "20",
            "totalAmount": "999",
            "createdAt": "2024-01-01T00:00:00+00:00",
            "updatedAt": "2024-01-01T00:00:00+00:00",
        }

        invoice = mappers.invoice_to_domain(record)

        assert invoice.subtotal == Decimal("30")
        assert invoice.total_amount == Decimal("36")
        assert invoice.status == domain.InvoiceStatus.DRAFT

    def test_bad_decimal_is_value_error(self):
        with pytest.raises(ValueError):
            mappers.currency_to_domain({"code": "USD", "name": "US Dollar", "symbol": "$", "rate": "one"})
