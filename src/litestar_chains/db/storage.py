"""Database-backed key/value storage.

This module provides a :class:`~litestar_chains.core.protocols.StorageService`
that keeps every key in one row of the storage item table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from litestar_chains.db.models import StorageItemModel
from litestar_chains.db.repositories import StorageItemRepository
from litestar_chains.storage.memory import DEFAULT_STORAGE_PREFIX

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

__all__ = ["DatabaseStorage"]


class DatabaseStorage:
    """Key/value store persisted with SQLAlchemy.

    Every write commits, so a value is durable as soon as
    :meth:`set_item` returns.

    Attributes:
        session: SQLAlchemy async session for database operations.
        prefix: Prefix applied to every key.
    """

    def __init__(self, session: AsyncSession, prefix: str = DEFAULT_STORAGE_PREFIX) -> None:
        """Initialize the database storage.

        Args:
            session: SQLAlchemy async session.
            prefix: Prefix applied to every key.
        """
        self.session = session
        self.prefix = prefix
        self._repo = StorageItemRepository(session=session)

    async def get_item(self, key: str) -> Any | None:
        item = await self._repo.get_by_key(self.prefix + key)
        return None if item is None else item.value

    async def set_item(self, key: str, value: Any) -> None:
        item = await self._repo.get_by_key(self.prefix + key)
        if item is None:
            await self._repo.add(StorageItemModel(key=self.prefix + key, value=value), auto_commit=True)
            return
        item.value = value
        await self._repo.update(item, auto_commit=True)

    async def remove_item(self, key: str) -> None:
        item = await self._repo.get_by_key(self.prefix + key)
        if item is not None:
            await self._repo.delete(item.id, auto_commit=True)

    async def clear(self) -> None:
        for item in await self._repo.list_by_prefix(self.prefix):
            await self._repo.delete(item.id, auto_commit=True)

    async def keys(self) -> list[str]:
        return [item.key[len(self.prefix) :] for item in await self._repo.list_by_prefix(self.prefix)]
