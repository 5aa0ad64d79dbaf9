"""Storage layer for ledgerly."""

from ledgerly.storage.base import KeyValueStore
from ledgerly.storage.memory import InMemoryStore
from ledgerly.storage.factories import create_sqlite_store

__all__ = ["KeyValueStore", "InMemoryStore", "create_sqlite_store"]
