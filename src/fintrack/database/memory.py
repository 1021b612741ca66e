"""In-memory blob store, used for tests and throwaway sessions."""

import copy
import json
from typing import Optional, Any

from fintrack.database.base import BlobStore


class InMemoryBlobStore(BlobStore):
    """Blob store that keeps serialized JSON text in a dict."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._blobs: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def load(self, key: str) -> Optional[Any]:
        raw = self._blobs.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        # Round-trip through JSON so callers cannot share mutable state with the store
        self._blobs[key] = json.dumps(copy.deepcopy(value))

    def keys(self) -> list[str]:
        """Return the keys currently stored."""
        return list(self._blobs)
