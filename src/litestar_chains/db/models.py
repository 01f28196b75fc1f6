"""SQLAlchemy models for key/value persistence.

This module defines the single table backing :class:`DatabaseStorage`: one
row per storage key holding the whole JSON value written under it.
"""

from __future__ import annotations

from typing import Any

from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

__all__ = ["StorageItemModel"]


# Cross-database JSON type: uses JSONB for PostgreSQL, JSON for others (SQLite, MySQL, etc.)
JSONType = JSON().with_variant(JSONB, "postgresql")


class StorageItemModel(UUIDAuditBase):
    """A persisted storage key and its JSON value.

    Attributes:
        key: Prefixed storage key, unique.
        value: The JSON value stored under the key.
    """

    __tablename__ = "chains_storage_items"

    key: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    value: Mapped[Any] = mapped_column(JSONType, nullable=True)
