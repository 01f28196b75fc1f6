"""Storage backends for litestar-chains.

The in-memory store is always available; the database store lives in
:mod:`litestar_chains.db` and requires the [db] extra.
"""

from __future__ import annotations

from litestar_chains.storage.memory import DEFAULT_STORAGE_PREFIX, MemoryStorage

__all__ = ["DEFAULT_STORAGE_PREFIX", "MemoryStorage"]
