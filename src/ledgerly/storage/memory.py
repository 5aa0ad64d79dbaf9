"""In-memory key-value store."""

import json
from typing import Any, Optional

from ledgerly.domain.errors import StorageError
from ledgerly.storage.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Dict-backed store that serializes values to JSON text.

    Values are stored as JSON strings so callers get the same round-trip
    behaviour (and the same failures on non-serializable values) as the
    durable backend.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._documents: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._documents.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        try:
            self._documents[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize '{key}': {e}") from e

    def keys(self) -> list[str]:
        return sorted(self._documents)
