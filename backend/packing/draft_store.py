# backend/packing/draft_store.py
import copy
from typing import Any, Dict, Optional, Protocol


class DraftStore(Protocol):
    """Scoped key-value scratch storage for drafts that are not yet submitted."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryDraftStore:
    def __init__(self, prefix: str = "shipments_manager_"):
        self.prefix = prefix
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        value = self._data.get(self.prefix + key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        self._data[self.prefix + key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(self.prefix + key, None)

    def keys(self):
        return [k[len(self.prefix):] for k in self._data]
