"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InvalidTransitionError(ValidationError):
    """Status change not permitted by the entity's lifecycle."""


class UnknownCountryError(ValidationError):
    """Country code missing from the tax rate table."""


class UnknownCurrencyError(ValidationError):
    """Currency code missing from the currency table."""


class StorageError(DomainError):
    """Key-value store could not load or save a document."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def customer_not_found(customer_id: str) -> str:
    """Return message for missing customer."""
    return f"Customer {customer_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def invoice_not_found(invoice_id: str) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def unknown_country(country_code: str) -> str:
    """Return message for a country without tax rates."""
    return f"Tax rates not found for country: {country_code}"


def unknown_currency(currency_code: str) -> str:
    """Return message for an unsupported currency."""
    return f"Currency '{currency_code}' is not supported"


def invalid_transition(kind: str, current: str, requested: str) -> str:
    """Return message for a disallowed status change."""
    return f"Cannot change {kind} status from '{current}' to '{requested}'"


def currency_mismatch(debit_currency: str, credit_currency: str) -> str:
    """Return message when a posting would move value across currencies."""
    return (
        f"Debit account currency {debit_currency} does not match credit account "
        f"currency {credit_currency}. Cross-currency postings are not supported."
    )


def transaction_currency_mismatch(transaction_currency: str, account_currency: str) -> str:
    """Return message when a transaction's currency differs from its accounts'."""
    return (
        f"Transaction currency {transaction_currency} does not match account "
        f"currency {account_currency}. Cross-currency postings are not supported."
    )
