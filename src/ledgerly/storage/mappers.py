"""Mapper functions to convert between domain entities and JSON records.

This layer isolates the conversion logic, so the stored document layout can
change without touching the services. Dates are ISO-8601 strings, decimals
are strings (to keep them exact), and enums are stored by value.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ledgerly.domain import entities as domain
from ledgerly.domain.chart import classify_account


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value: {value!r}")


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


def _optional_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _date(value: str) -> date:
    return date.fromisoformat(value[:10])


def _datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def account_to_record(account: domain.Account) -> dict[str, Any]:
    """Convert Account entity to a JSON record."""
    return {
        "id": account.id,
        "code": account.code,
        "name": account.name,
        "type": account.type.value,
        "category": account.category,
        "balance": str(account.balance),
        "currency": account.currency,
        "isActive": account.is_active,
        "createdAt": account.created_at.isoformat(),
        "statementBucket": account.statement_bucket.value,
    }


def account_to_domain(record: dict[str, Any]) -> domain.Account:
    """Convert a JSON record to an Account entity.

    Records written before accounts carried a statement bucket get one
    inferred from their name and category.
    """
    account_type = domain.AccountType(record["type"])
    bucket = record.get("statementBucket")
    if bucket is None:
        statement_bucket = classify_account(
            record["name"], account_type, record.get("category", "")
        )
    else:
        statement_bucket = domain.StatementBucket(bucket)
    return domain.Account(
        id=record["id"],
        code=record.get("code", record["id"]),
        name=record["name"],
        type=account_type,
        category=record.get("category", ""),
        balance=_decimal(record.get("balance", "0")),
        currency=record.get("currency", "USD"),
        is_active=record.get("isActive", True),
        created_at=_datetime(record["createdAt"]),
        statement_bucket=statement_bucket,
    )


def transaction_to_record(txn: domain.Transaction) -> dict[str, Any]:
    """Convert Transaction entity to a JSON record."""
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "reference": txn.reference,
        "amount": str(txn.amount),
        "currency": txn.currency,
        "category": txn.category.value,
        "folder": txn.folder.value,
        "debitAccount": txn.debit_account,
        "creditAccount": txn.credit_account,
        "vatRate": _optional_str(txn.vat_rate),
        "taxAmount": _optional_str(txn.tax_amount),
        "attachments": list(txn.attachments),
        "status": txn.status.value,
        "createdAt": txn.created_at.isoformat(),
        "updatedAt": txn.updated_at.isoformat(),
    }


def transaction_to_domain(record: dict[str, Any]) -> domain.Transaction:
    """Convert a JSON record to a Transaction entity."""
    return domain.Transaction(
        id=record["id"],
        date=_date(record["date"]),
        description=record["description"],
        reference=record.get("reference", ""),
        amount=_decimal(record["amount"]),
        currency=record["currency"],
        category=domain.TransactionCategory(record["category"]),
        folder=domain.TransactionFolder(record["folder"]),
        debit_account=record["debitAccount"],
        credit_account=record["creditAccount"],
        vat_rate=_optional_decimal(record.get("vatRate")),
        tax_amount=_optional_decimal(record.get("taxAmount")),
        attachments=tuple(record.get("attachments", ())),
        status=domain.TransactionStatus(record.get("status", "pending")),
        created_at=_datetime(record["createdAt"]),
        updated_at=_datetime(record["updatedAt"]),
    )


def invoice_item_to_record(item: domain.InvoiceItem) -> dict[str, Any]:
    """Convert InvoiceItem entity to a JSON record."""
    return {
        "id": item.id,
        "description": item.description,
        "quantity": item.quantity,
        "unitPrice": str(item.unit_price),
        "amount": str(item.amount),
        "vatRate": str(item.vat_rate),
    }


def invoice_item_to_domain(record: dict[str, Any]) -> domain.InvoiceItem:
    """Convert a JSON record to an InvoiceItem. Stored amounts are ignored."""
    return domain.InvoiceItem(
        id=record["id"],
        description=record["description"],
        quantity=int(record["quantity"]),
        unit_price=_decimal(record["unitPrice"]),
        vat_rate=_decimal(record.get("vatRate", "0")),
    )


def invoice_to_record(invoice: domain.Invoice) -> dict[str, Any]:
    """Convert Invoice entity to a JSON record.

    Derived totals are written for consumers reading the raw document; they
    are recomputed from the items on load.
    """
    return {
        "id": invoice.id,
        "number": invoice.number,
        "customerId": invoice.customer_id,
        "customerName": invoice.customer_name,
        "customerAddress": invoice.customer_address,
        "date": invoice.date.isoformat(),
        "dueDate": invoice.due_date.isoformat(),
        "currency": invoice.currency,
        "items": [invoice_item_to_record(item) for item in invoice.items],
        "subtotal": str(invoice.subtotal),
        "vatAmount": str(invoice.vat_amount),
        "vatRate": str(invoice.vat_rate),
        "totalAmount": str(invoice.total_amount),
        "status": invoice.status.value,
        "notes": invoice.notes,
        "createdAt": invoice.created_at.isoformat(),
        "updatedAt": invoice.updated_at.isoformat(),
    }


def invoice_to_domain(record: dict[str, Any]) -> domain.Invoice:
    """Convert a JSON record to an Invoice entity."""
    return domain.Invoice(
        id=record["id"],
        number=record["number"],
        customer_id=record["customerId"],
        customer_name=record.get("customerName", ""),
        customer_address=record.get("customerAddress", ""),
        date=_date(record["date"]),
        due_date=_date(record["dueDate"]),
        currency=record["currency"],
        items=tuple(invoice_item_to_domain(item) for item in record.get("items", [])),
        vat_rate=_decimal(record.get("vatRate", "0")),
        status=domain.InvoiceStatus(record.get("status", "draft")),
        notes=record.get("notes", ""),
        created_at=_datetime(record["createdAt"]),
        updated_at=_datetime(record["updatedAt"]),
    )


def customer_to_record(customer: domain.Customer) -> dict[str, Any]:
    """Convert Customer entity to a JSON record."""
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "country": customer.country,
        "taxId": customer.tax_id,
        "currency": customer.currency,
        "creditLimit": str(customer.credit_limit),
        "balance": str(customer.balance),
        "createdAt": customer.created_at.isoformat(),
    }


def customer_to_domain(record: dict[str, Any]) -> domain.Customer:
    """Convert a JSON record to a Customer entity."""
    return domain.Customer(
        id=record["id"],
        name=record["name"],
        email=record.get("email", ""),
        phone=record.get("phone", ""),
        address=record.get("address", ""),
        country=record.get("country", ""),
        tax_id=record.get("taxId"),
        currency=record.get("currency", "USD"),
        credit_limit=_decimal(record.get("creditLimit", "0")),
        balance=_decimal(record.get("balance", "0")),
        created_at=_datetime(record["createdAt"]),
    )


def vendor_to_record(vendor: domain.Vendor) -> dict[str, Any]:
    """Convert Vendor entity to a JSON record."""
    return {
        "id": vendor.id,
        "name": vendor.name,
        "email": vendor.email,
        "phone": vendor.phone,
        "address": vendor.address,
        "country": vendor.country,
        "taxId": vendor.tax_id,
        "currency": vendor.currency,
        "balance": str(vendor.balance),
        "createdAt": vendor.created_at.isoformat(),
    }


def vendor_to_domain(record: dict[str, Any]) -> domain.Vendor:
    """Convert a JSON record to a Vendor entity."""
    return domain.Vendor(
        id=record["id"],
        name=record["name"],
        email=record.get("email", ""),
        phone=record.get("phone", ""),
        address=record.get("address", ""),
        country=record.get("country", ""),
        tax_id=record.get("taxId"),
        currency=record.get("currency", "USD"),
        balance=_decimal(record.get("balance", "0")),
        created_at=_datetime(record["createdAt"]),
    )


def currency_to_record(currency: domain.Currency) -> dict[str, Any]:
    """Convert Currency entity to a JSON record."""
    return {
        "code": currency.code,
        "name": currency.name,
        "symbol": currency.symbol,
        "rate": str(currency.rate),
    }


def currency_to_domain(record: dict[str, Any]) -> domain.Currency:
    """Convert a JSON record to a Currency entity."""
    return domain.Currency(
        code=record["code"],
        name=record["name"],
        symbol=record["symbol"],
        rate=_decimal(record["rate"]),
    )


def settings_to_record(settings: domain.CompanySettings) -> dict[str, Any]:
    """Convert CompanySettings to a JSON record."""
    return {
        "name": settings.name,
        "address": settings.address,
        "country": settings.country,
        "currency": settings.currency,
        "taxId": settings.tax_id,
        "financialYearStart": settings.financial_year_start,
        "logo": settings.logo,
        "defaultVatRate": str(settings.default_vat_rate),
        "defaultCorporateTaxRate": str(settings.default_corporate_tax_rate),
    }


def settings_to_domain(record: dict[str, Any]) -> domain.CompanySettings:
    """Convert a JSON record to CompanySettings."""
    return domain.CompanySettings(
        name=record["name"],
        address=record.get("address", ""),
        country=record.get("country", ""),
        currency=record.get("currency", "USD"),
        tax_id=record.get("taxId", ""),
        financial_year_start=record.get("financialYearStart", "01-01"),
        logo=record.get("logo"),
        default_vat_rate=_decimal(record.get("defaultVatRate", "0")),
        default_corporate_tax_rate=_decimal(record.get("defaultCorporateTaxRate", "0")),
    )
