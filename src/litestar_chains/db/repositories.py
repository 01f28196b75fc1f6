"""Repository implementations for key/value persistence.

This module provides the async repository for storage items using
advanced-alchemy's repository pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from sqlalchemy import select

from litestar_chains.db.models import StorageItemModel

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["StorageItemRepository"]


class StorageItemRepository(SQLAlchemyAsyncRepository[StorageItemModel]):
    """Repository for storage item CRUD operations."""

    model_type = StorageItemModel

    async def get_by_key(self, key: str) -> StorageItemModel | None:
        """Get a storage item by its exact key.

        Args:
            key: The prefixed storage key.

        Returns:
            The storage item or None if not found.
        """
        stmt = select(StorageItemModel).where(StorageItemModel.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_prefix(self, prefix: str) -> Sequence[StorageItemModel]:
        """List storage items whose key starts with ``prefix``.

        Args:
            prefix: Key prefix to match.

        Returns:
            Matching storage items ordered by key.
        """
        stmt = (
            select(StorageItemModel)
            .where(StorageItemModel.key.startswith(prefix, autoescape=True))
            .order_by(StorageItemModel.key)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
