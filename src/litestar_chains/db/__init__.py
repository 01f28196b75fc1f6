"""Database persistence layer for litestar-chains.

This module provides the SQLAlchemy model, repository and storage backend for
persisting workflows, model cards and execution history in a database.

Requires the [db] extra:
    pip install litestar-chains[db]
"""

from __future__ import annotations

from litestar_chains.db.models import StorageItemModel
from litestar_chains.db.repositories import StorageItemRepository
from litestar_chains.db.storage import DatabaseStorage

__all__ = [
    "DatabaseStorage",
    "StorageItemModel",
    "StorageItemRepository",
]
