"""Utility for resolving account codes and names to account IDs."""

from ledgerly.domain.errors import NotFoundError, account_not_found
from ledgerly.domain.ledger import LedgerService


def resolve_account(ledger: LedgerService, account: str) -> str:
    """Resolve an account ID, code or name to its account ID.

    Args:
        ledger: LedgerService instance
        account: Account ID, code ("1000") or name ("Cash", case-insensitive)

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
    """
    found = ledger.find_account(str(account))
    if found is None:
        raise NotFoundError(account_not_found(str(account)))
    return found.id
