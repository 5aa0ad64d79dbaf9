"""Shared pytest fixtures for ledgerly tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgerly.books import Books
from ledgerly.domain.entities import (
    TransactionCategory,
    TransactionDraft,
    TransactionFolder,
)
from ledgerly.storage.factories import create_sqlite_store
from ledgerly.storage.memory import InMemoryStore


@pytest.fixture
def memory_store():
    """Create an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def sqlite_store(temp_db_path):
    """Create a SQLite-backed store on a temporary file."""
    store = create_sqlite_store(database_path=temp_db_path)
    yield store
    store.close()


@pytest.fixture
def books(memory_store):
    """Open fresh books over an in-memory store."""
    return Books.open(memory_store)


@pytest.fixture
def ledger(books):
    """LedgerService seeded with the default chart of accounts."""
    return books.ledger


@pytest.fixture
def parties(books):
    return books.parties


@pytest.fixture
def settings_service(books):
    return books.settings


@pytest.fixture
def invoice_service(books):
    return books.invoices


@pytest.fixture
def statement_service(books):
    return books.statements


@pytest.fixture
def make_draft():
    """Build a TransactionDraft with sensible defaults."""

    def _make(**overrides):
        fields = dict(
            description="Owner investment",
            amount=Decimal("100.00"),
            currency="USD",
            category=TransactionCategory.OTHER,
            folder=TransactionFolder.BANK,
            date=date(2024, 1, 15),
            debit_account="1000",
            credit_account="3000",
        )
        fields.update(overrides)
        return TransactionDraft(**fields)

    return _make


@pytest.fixture
def sample_customer(parties):
    """Create a sample customer."""
    return parties.create_customer(
        name="Acme Ltd",
        email="billing@acme.test",
        address="1 High Street, London",
        country="United Kingdom",
        currency="GBP",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
