"""In-process key/value storage."""

from __future__ import annotations

import json
from typing import Any

__all__ = ["DEFAULT_STORAGE_PREFIX", "MemoryStorage"]

DEFAULT_STORAGE_PREFIX = "model-card-app:"
"""Prefix applied to every key so several stores can share one backend."""


class MemoryStorage:
    """Key/value store kept in a process-local dict.

    Values are stored as JSON strings, so reads never alias the objects that
    were written and non-serializable values fail on write.

    Attributes:
        prefix: Prefix applied to every key.
        _items: Serialized values keyed by prefixed key.

    Example:
        >>> storage = MemoryStorage()
        >>> await storage.set_item("workflows", [])
        >>> await storage.get_item("workflows")
        []
    """

    def __init__(self, prefix: str = DEFAULT_STORAGE_PREFIX, items: dict[str, str] | None = None) -> None:
        """Initialize the store.

        Args:
            prefix: Prefix applied to every key.
            items: Optional backing dict, shared between stores with
                different prefixes.
        """
        self.prefix = prefix
        self._items: dict[str, str] = items if items is not None else {}

    async def get_item(self, key: str) -> Any | None:
        raw = self._items.get(self.prefix + key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_item(self, key: str, value: Any) -> None:
        self._items[self.prefix + key] = json.dumps(value)

    async def remove_item(self, key: str) -> None:
        self._items.pop(self.prefix + key, None)

    async def clear(self) -> None:
        for key in [k for k in self._items if k.startswith(self.prefix)]:
            del self._items[key]

    async def keys(self) -> list[str]:
        return [k[len(self.prefix) :] for k in self._items if k.startswith(self.prefix)]
