"""Abstract key-value store interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ledgerly.domain.errors import StorageError

logger = logging.getLogger(__name__)

# Stable storage keys, one per aggregate
TRANSACTIONS_KEY = "transactions"
INVOICES_KEY = "invoices"
ACCOUNTS_KEY = "accounts"
CUSTOMERS_KEY = "customers"
VENDORS_KEY = "vendors"
CURRENCIES_KEY = "currencies"
SETTINGS_KEY = "settings"

ALL_KEYS = (
    TRANSACTIONS_KEY,
    INVOICES_KEY,
    ACCOUNTS_KEY,
    CUSTOMERS_KEY,
    VENDORS_KEY,
    CURRENCIES_KEY,
    SETTINGS_KEY,
)


class KeyValueStore(ABC):
    """Abstract JSON document store keyed by aggregate name.

    Implementations raise ``StorageError`` when the backend is unavailable or
    a document is corrupt. Services use ``load_or_default`` and
    ``save_best_effort`` so a failing backend never breaks in-memory state.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Load the JSON value stored under key, or None if absent."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key, replacing any previous value."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    def load_or_default(self, key: str, default: Any = None) -> Any:
        """Load a value, returning ``default`` when missing or unreadable."""
        try:
            value = self.load(key)
        except StorageError:
            logger.warning("Could not load '%s'; using defaults", key, exc_info=True)
            return default
        return default if value is None else value

    def save_best_effort(self, key: str, value: Any) -> bool:
        """Save a value, logging instead of raising on failure.

        Returns:
            True if the value was saved
        """
        try:
            self.save(key, value)
        except StorageError:
            logger.error("Could not save '%s'; in-memory state kept", key, exc_info=True)
            return False
        return True
