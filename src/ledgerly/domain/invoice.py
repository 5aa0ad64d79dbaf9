"""Invoice domain service."""

import dataclasses
import logging
import threading
import uuid
from datetime import date, datetime, UTC
from typing import Any, Iterable, Optional

from ledgerly.domain.entities import (
    Invoice,
    InvoiceFilters,
    InvoiceItem,
    InvoiceItemDraft,
    InvoiceStatus,
)
from ledgerly.domain.errors import ValidationError, customer_not_found
from ledgerly.domain.lifecycle import check_invoice_transition
from ledgerly.domain.money import HUNDRED, ZERO, to_decimal
from ledgerly.domain.parties import PartyService
from ledgerly.domain.reference_data import DEFAULT_REFERENCE, ReferenceData
from ledgerly.storage import mappers
from ledgerly.storage.base import INVOICES_KEY, KeyValueStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"customer_id", "date", "due_date", "currency", "items", "vat_rate", "status", "notes"}
)


def format_invoice_number(year: int, sequence: int) -> str:
    """Format an invoice number as ``INV-{year}-{sequence:04d}``."""
    return f"INV-{year}-{sequence:04d}"


class InvoiceService:
    """Service for creating and managing invoices.

    Invoices never touch ledger balances. Totals are derived from the items
    on the entity itself, so replacing items is all an update needs.
    """

    def __init__(
        self,
        store: KeyValueStore,
        parties: PartyService,
        reference: Optional[ReferenceData] = None,
    ):
        """Initialize invoice service.

        Args:
            store: Key-value store holding the invoices document
            parties: Party service used to resolve customers
            reference: Reference data used to validate currencies
        """
        self.store = store
        self.parties = parties
        self.reference = reference if reference is not None else DEFAULT_REFERENCE
        self._lock = threading.RLock()
        self._invoices: list[Invoice] = self._load()

    def _load(self) -> list[Invoice]:
        try:
            records = self.store.load_or_default(INVOICES_KEY, [])
            return [mappers.invoice_to_domain(r) for r in records]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored invoices are unreadable; starting empty", exc_info=True)
            return []

    def _save(self) -> None:
        self.store.save_best_effort(
            INVOICES_KEY, [mappers.invoice_to_record(i) for i in self._invoices]
        )

    def _build_items(self, items: Iterable, invoice_vat_rate) -> tuple[InvoiceItem, ...]:
        """Validate item drafts and assign item IDs."""
        built = []
        for index, draft in enumerate(items, start=1):
            if isinstance(draft, dict):
                draft = InvoiceItemDraft(**draft)
            if not draft.description or not draft.description.strip():
                raise ValidationError(f"Item {index}: description is required")
            if isinstance(draft.quantity, bool) or not isinstance(draft.quantity, int):
                raise ValidationError(f"Item {index}: quantity must be a whole number")
            if draft.quantity <= 0:
                raise ValidationError(f"Item {index}: quantity must be positive")
            unit_price = to_decimal(draft.unit_price, "unit price")
            if unit_price < 0:
                raise ValidationError(f"Item {index}: unit price cannot be negative")
            vat_rate = invoice_vat_rate if draft.vat_rate is None else self._check_vat_rate(draft.vat_rate)
            built.append(
                InvoiceItem(
                    id=f"item_{index}",
                    description=draft.description.strip(),
                    quantity=draft.quantity,
                    unit_price=unit_price,
                    vat_rate=vat_rate,
                )
            )
        if not built:
            raise ValidationError("An invoice needs at least one item")
        return tuple(built)

    @staticmethod
    def _check_vat_rate(vat_rate) -> Any:
        rate = to_decimal(vat_rate, "VAT rate")
        if not (ZERO <= rate <= HUNDRED):
            raise ValidationError("VAT rate must be between 0 and 100")
        return rate

    @staticmethod
    def _check_dates(invoice_date: date, due_date: date) -> None:
        if invoice_date is None or due_date is None:
            raise ValidationError("Invoice date and due date are required")
        if due_date < invoice_date:
            raise ValidationError("Due date cannot be before the invoice date")

    def _next_number(self) -> str:
        year = date.today().year
        taken = {invoice.number for invoice in self._invoices}
        sequence = len(self._invoices) + 1
        while format_invoice_number(year, sequence) in taken:
            sequence += 1
        return format_invoice_number(year, sequence)

    def create_invoice(
        self,
        customer_id: str,
        date: date,
        due_date: date,
        currency: str,
        items: Iterable,
        vat_rate,
        notes: str = "",
    ) -> Invoice:
        """Create a draft invoice for a customer.

        Args:
            customer_id: Customer ID; name and address are copied onto the invoice
            date: Invoice date
            due_date: Payment due date
            currency: Invoice currency
            items: InvoiceItemDraft objects (or dicts with the same keys)
            vat_rate: Invoice VAT rate in percent
            notes: Optional notes

        Returns:
            The created invoice

        Raises:
            ValidationError: If the customer is unknown or any input is invalid
        """
        customer = self.parties.get_customer(customer_id)
        if customer is None:
            raise ValidationError(customer_not_found(customer_id))
        self._check_dates(date, due_date)
        currency = self.reference.currency(currency).code
        rate = self._check_vat_rate(vat_rate)
        built_items = self._build_items(items, rate)

        now = datetime.now(UTC)
        with self._lock:
            invoice = Invoice(
                id=f"inv_{uuid.uuid4().hex[:16]}",
                number=self._next_number(),
                customer_id=customer.id,
                customer_name=customer.name,
                customer_address=customer.address,
                date=date,
                due_date=due_date,
                currency=currency,
                items=built_items,
                vat_rate=rate,
                status=InvoiceStatus.DRAFT,
                notes=notes or "",
                created_at=now,
                updated_at=now,
            )
            self._invoices.append(invoice)
            self._save()

        logger.info(
            "Created invoice %s for %s: %s %s",
            invoice.number,
            invoice.customer_name,
            invoice.total_amount,
            invoice.currency,
        )
        return invoice

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID or number, or None."""
        with self._lock:
            for invoice in self._invoices:
                if invoice.id == invoice_id or invoice.number == invoice_id:
                    return invoice
        return None

    def update_invoice(self, invoice_id: str, **changes: Any) -> Optional[Invoice]:
        """Update invoice fields.

        Changing the customer refreshes the name and address snapshot. A new
        invoice VAT rate also moves items that carried the old invoice rate.
        Status changes must follow the invoice lifecycle.

        Returns:
            The updated invoice, or None if not found

        Raises:
            ValidationError: If a field is unknown or a value is invalid
            InvalidTransitionError: If the status change is not permitted
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._lock:
            index = self._index_of(invoice_id)
            if index is None:
                return None
            old = self._invoices[index]

            fields = dict(changes)
            if "customer_id" in fields:
                customer = self.parties.get_customer(fields["customer_id"])
                if customer is None:
                    raise ValidationError(customer_not_found(fields["customer_id"]))
                fields["customer_name"] = customer.name
                fields["customer_address"] = customer.address
            if "currency" in fields:
                fields["currency"] = self.reference.currency(fields["currency"]).code
            if "vat_rate" in fields:
                fields["vat_rate"] = self._check_vat_rate(fields["vat_rate"])
            if "items" in fields:
                fields["items"] = self._build_items(
                    fields["items"], fields.get("vat_rate", old.vat_rate)
                )
            elif "vat_rate" in fields:
                fields["items"] = tuple(
                    dataclasses.replace(item, vat_rate=fields["vat_rate"])
                    if item.vat_rate == old.vat_rate
                    else item
                    for item in old.items
                )
            if "status" in fields:
                try:
                    fields["status"] = InvoiceStatus(fields["status"])
                except ValueError:
                    raise ValidationError(f"Invalid invoice status '{fields['status']}'")
                check_invoice_transition(old.status, fields["status"])
            if "notes" in fields:
                fields["notes"] = fields["notes"] or ""

            updated = dataclasses.replace(old, **fields, updated_at=datetime.now(UTC))
            self._check_dates(updated.date, updated.due_date)
            self._invoices[index] = updated
            self._save()

        if "status" in changes and updated.status != old.status:
            logger.info("Invoice %s: %s -> %s", updated.number, old.status.value, updated.status.value)
        return updated

    def set_status(self, invoice_id: str, status: InvoiceStatus) -> Optional[Invoice]:
        """Move an invoice to a new status. Returns None if not found."""
        return self.update_invoice(invoice_id, status=status)

    def delete_invoice(self, invoice_id: str) -> bool:
        """Delete an invoice.

        Returns:
            True if deleted, False if no such invoice
        """
        with self._lock:
            index = self._index_of(invoice_id)
            if index is None:
                return False
            invoice = self._invoices.pop(index)
            self._save()
        logger.info("Deleted invoice %s", invoice.number)
        return True

    def list_invoices(self, filters: Optional[InvoiceFilters] = None) -> list[Invoice]:
        """List invoices with filters, newest first.

        Args:
            filters: Optional filters; amount bounds compare against the total

        Returns:
            List of invoice entities
        """
        with self._lock:
            result = list(self._invoices)

        if filters is not None:
            if filters.date_from is not None:
                result = [i for i in result if i.date >= filters.date_from]
            if filters.date_to is not None:
                result = [i for i in result if i.date <= filters.date_to]
            if filters.status is not None:
                result = [i for i in result if i.status == filters.status]
            if filters.customer_id is not None:
                result = [i for i in result if i.customer_id == filters.customer_id]
            if filters.currency is not None:
                currency = filters.currency.upper()
                result = [i for i in result if i.currency == currency]
            if filters.min_amount is not None:
                result = [i for i in result if i.total_amount >= filters.min_amount]
            if filters.max_amount is not None:
                result = [i for i in result if i.total_amount <= filters.max_amount]

        return sorted(result, key=lambda i: i.date, reverse=True)

    def mark_overdue(self, today: Optional[date] = None) -> list[Invoice]:
        """Move sent invoices past their due date to overdue.

        Returns:
            The invoices that changed status
        """
        today = today or date.today()
        changed = []
        with self._lock:
            for index, invoice in enumerate(self._invoices):
                if invoice.status == InvoiceStatus.SENT and invoice.is_overdue(today):
                    updated = dataclasses.replace(
                        invoice, status=InvoiceStatus.OVERDUE, updated_at=datetime.now(UTC)
                    )
                    self._invoices[index] = updated
                    changed.append(updated)
            if changed:
                self._save()
        for invoice in changed:
            logger.info("Invoice %s is overdue (due %s)", invoice.number, invoice.due_date)
        return changed

    def _index_of(self, invoice_id: str) -> Optional[int]:
        for index, invoice in enumerate(self._invoices):
            if invoice.id == invoice_id or invoice.number == invoice_id:
                return index
        return None
