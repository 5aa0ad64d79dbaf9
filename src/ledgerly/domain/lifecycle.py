"""Status transition rules for transactions and invoices."""

from ledgerly.domain.entities import InvoiceStatus, TransactionStatus
from ledgerly.domain.errors import InvalidTransitionError, invalid_transition

TRANSACTION_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset(
        {TransactionStatus.APPROVED, TransactionStatus.RECONCILED}
    ),
    TransactionStatus.APPROVED: frozenset(
        {TransactionStatus.RECONCILED, TransactionStatus.PENDING}
    ),
    TransactionStatus.RECONCILED: frozenset({TransactionStatus.APPROVED}),
}

# Overdue is normally reached through InvoiceService.mark_overdue, which
# compares the due date against the current date.
INVOICE_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def check_transaction_transition(
    current: TransactionStatus, requested: TransactionStatus
) -> None:
    """Raise if a transaction may not move from ``current`` to ``requested``.

    Setting the current status again is always allowed.
    """
    if requested != current and requested not in TRANSACTION_TRANSITIONS[current]:
        raise InvalidTransitionError(
            invalid_transition("transaction", current.value, requested.value)
        )


def check_invoice_transition(current: InvoiceStatus, requested: InvoiceStatus) -> None:
    """Raise if an invoice may not move from ``current`` to ``requested``."""
    if requested != current and requested not in INVOICE_TRANSITIONS[current]:
        raise InvalidTransitionError(
            invalid_transition("invoice", current.value, requested.value)
        )
