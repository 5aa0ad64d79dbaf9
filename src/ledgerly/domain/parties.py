"""Customer and vendor directory service."""

import dataclasses
import logging
import threading
import uuid
from datetime import datetime, UTC
from typing import Any, Optional

from ledgerly.domain.entities import Customer, Vendor
from ledgerly.domain.errors import ValidationError
from ledgerly.domain.money import to_decimal
from ledgerly.domain.reference_data import DEFAULT_REFERENCE, ReferenceData
from ledgerly.storage import mappers
from ledgerly.storage.base import CUSTOMERS_KEY, VENDORS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = frozenset(
    {"name", "email", "phone", "address", "country", "tax_id", "currency", "credit_limit", "balance"}
)
VENDOR_FIELDS = CUSTOMER_FIELDS - {"credit_limit"}


class PartyService:
    """Service for managing invoice and transaction counterparties."""

    def __init__(self, store: KeyValueStore, reference: Optional[ReferenceData] = None):
        """Initialize party service.

        Args:
            store: Key-value store holding the customers and vendors documents
            reference: Reference data used to validate currencies
        """
        self.store = store
        self.reference = reference if reference is not None else DEFAULT_REFERENCE
        self._lock = threading.RLock()
        self._customers: dict[str, Customer] = self._load(CUSTOMERS_KEY, mappers.customer_to_domain)
        self._vendors: dict[str, Vendor] = self._load(VENDORS_KEY, mappers.vendor_to_domain)

    def _load(self, key: str, to_domain) -> dict:
        try:
            records = self.store.load_or_default(key, [])
            return {entity.id: entity for entity in map(to_domain, records)}
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored %s are unreadable; starting empty", key, exc_info=True)
            return {}

    def _save_customers(self) -> None:
        self.store.save_best_effort(
            CUSTOMERS_KEY, [mappers.customer_to_record(c) for c in self._customers.values()]
        )

    def _save_vendors(self) -> None:
        self.store.save_best_effort(
            VENDORS_KEY, [mappers.vendor_to_record(v) for v in self._vendors.values()]
        )

    def _clean(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize party fields."""
        if "name" in fields:
            if not fields["name"] or not fields["name"].strip():
                raise ValidationError("Name is required")
            fields["name"] = fields["name"].strip()
        if "currency" in fields:
            fields["currency"] = self.reference.currency(fields["currency"]).code
        for money_field in ("credit_limit", "balance"):
            if money_field in fields:
                fields[money_field] = to_decimal(fields[money_field], money_field.replace("_", " "))
        if fields.get("credit_limit") is not None and fields["credit_limit"] < 0:
            raise ValidationError("Credit limit cannot be negative")
        return fields

    # Customer operations
    def create_customer(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        address: str = "",
        country: str = "",
        currency: str = "USD",
        tax_id: Optional[str] = None,
        credit_limit=0,
    ) -> Customer:
        """Create a customer.

        Raises:
            ValidationError: If the name is empty, the currency is unknown or
                the credit limit is negative
        """
        fields = self._clean(
            {"name": name, "currency": currency, "credit_limit": credit_limit}
        )
        customer = Customer(
            id=f"cust_{uuid.uuid4().hex[:12]}",
            email=email,
            phone=phone,
            address=address,
            country=country,
            tax_id=tax_id,
            created_at=datetime.now(UTC),
            **fields,
        )
        with self._lock:
            self._customers[customer.id] = customer
            self._save_customers()
        logger.info("Created customer %s (%s)", customer.id, customer.name)
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID, or None."""
        with self._lock:
            return self._customers.get(customer_id)

    def list_customers(self) -> list[Customer]:
        """List customers sorted by name."""
        with self._lock:
            return sorted(self._customers.values(), key=lambda c: c.name.lower())

    def update_customer(self, customer_id: str, **changes: Any) -> Optional[Customer]:
        """Update customer fields. Returns None if not found."""
        unknown = set(changes) - CUSTOMER_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        fields = self._clean(dict(changes))
        with self._lock:
            customer = self._customers.get(customer_id)
            if customer is None:
                return None
            customer = dataclasses.replace(customer, **fields)
            self._customers[customer_id] = customer
            self._save_customers()
        return customer

    def delete_customer(self, customer_id: str) -> bool:
        """Delete a customer. Existing invoices keep their snapshot."""
        with self._lock:
            if self._customers.pop(customer_id, None) is None:
                return False
            self._save_customers()
        return True

    # Vendor operations
    def create_vendor(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        address: str = "",
        country: str = "",
        currency: str = "USD",
        tax_id: Optional[str] = None,
    ) -> Vendor:
        """Create a vendor.

        Raises:
            ValidationError: If the name is empty or the currency is unknown
        """
        fields = self._clean({"name": name, "currency": currency})
        vendor = Vendor(
            id=f"vend_{uuid.uuid4().hex[:12]}",
            email=email,
            phone=phone,
            address=address,
            country=country,
            tax_id=tax_id,
            created_at=datetime.now(UTC),
            **fields,
        )
        with self._lock:
            self._vendors[vendor.id] = vendor
            self._save_vendors()
        logger.info("Created vendor %s (%s)", vendor.id, vendor.name)
        return vendor

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        """Get vendor by ID, or None."""
        with self._lock:
            return self._vendors.get(vendor_id)

    def list_vendors(self) -> list[Vendor]:
        """List vendors sorted by name."""
        with self._lock:
            return sorted(self._vendors.values(), key=lambda v: v.name.lower())

    def update_vendor(self, vendor_id: str, **changes: Any) -> Optional[Vendor]:
        """Update vendor fields. Returns None if not found."""
        unknown = set(changes) - VENDOR_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        fields = self._clean(dict(changes))
        with self._lock:
            vendor = self._vendors.get(vendor_id)
            if vendor is None:
                return None
            vendor = dataclasses.replace(vendor, **fields)
            self._vendors[vendor_id] = vendor
            self._save_vendors()
        return vendor

    def delete_vendor(self, vendor_id: str) -> bool:
        """Delete a vendor."""
        with self._lock:
            if self._vendors.pop(vendor_id, None) is None:
                return False
            self._save_vendors()
        return True
