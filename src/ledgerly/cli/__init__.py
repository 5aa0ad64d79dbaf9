"""CLI layer for ledgerly."""
