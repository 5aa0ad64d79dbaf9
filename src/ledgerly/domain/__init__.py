"""Domain layer for ledgerly."""

# Services import the storage layer, which imports domain errors; load them
# lazily to avoid circular imports.
_SERVICES = {
    "LedgerService": "ledgerly.domain.ledger",
    "InvoiceService": "ledgerly.domain.invoice",
    "PartyService": "ledgerly.domain.parties",
    "SettingsService": "ledgerly.domain.settings",
    "StatementService": "ledgerly.domain.statements",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
