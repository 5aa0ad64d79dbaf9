"""Composition root wiring the services over one store."""

from dataclasses import dataclass
from typing import Optional

from ledgerly.domain.invoice import InvoiceService
from ledgerly.domain.ledger import LedgerService
from ledgerly.domain.parties import PartyService
from ledgerly.domain.reference_data import DEFAULT_REFERENCE, ReferenceData
from ledgerly.domain.settings import SettingsService
from ledgerly.domain.statements import StatementService
from ledgerly.storage.base import KeyValueStore


@dataclass
class Books:
    """One company's books: every service sharing a single store.

    Construct once with ``Books.open(store)`` and pass it to whatever needs
    it. Separate instances over separate stores are fully isolated.
    """

    store: KeyValueStore
    reference: ReferenceData
    ledger: LedgerService
    parties: PartyService
    settings: SettingsService
    invoices: InvoiceService
    statements: StatementService

    @classmethod
    def open(cls, store: KeyValueStore, reference: Optional[ReferenceData] = None) -> "Books":
        """Load all services from a store, seeding defaults where it is empty."""
        reference = reference if reference is not None else DEFAULT_REFERENCE
        ledger = LedgerService(store, reference)
        parties = PartyService(store, reference)
        settings = SettingsService(store, reference)
        return cls(
            store=store,
            reference=reference,
            ledger=ledger,
            parties=parties,
            settings=settings,
            invoices=InvoiceService(store, parties, reference),
            statements=StatementService(ledger, settings),
        )

    def close(self) -> None:
        """Release the store's resources."""
        self.store.close()
