"""Global model card collection."""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from litestar_chains.core.models import ModelCard, utc_now
from litestar_chains.core.serialization import model_card_from_dict, model_card_to_dict
from litestar_chains.core.types import MODEL_CARDS_STORAGE_KEY
from litestar_chains.exceptions import ModelCardNotFoundError

if TYPE_CHECKING:
    from litestar_chains.core.protocols import StorageService

__all__ = ["ModelCardService"]

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


class ModelCardService:
    """CRUD over the application's model cards.

    Cards are read from and written to storage on every call, so several
    services sharing one store always see the same collection. Workflows keep
    their own copies; nothing here touches them.

    Attributes:
        storage: The storage holding the collection.
    """

    def __init__(self, storage: StorageService) -> None:
        self.storage = storage

    async def list_model_cards(self) -> list[ModelCard]:
        """Return all model cards in creation order."""
        stored = await self.storage.get_item(MODEL_CARDS_STORAGE_KEY)
        if not isinstance(stored, list):
            return []
        cards = (model_card_from_dict(item) for item in stored if isinstance(item, dict))
        return [card for card in cards if card is not None]

    async def get_model_card(self, model_card_id: str) -> ModelCard | None:
        """Return the model card with the given id, or ``None``."""
        for card in await self.list_model_cards():
            if card.id == model_card_id:
                return card
        return None

    async def create_model_card(self, **attributes: Any) -> ModelCard:
        """Create and store a model card.

        Args:
            **attributes: :class:`ModelCard` fields except ``id`` and the
                timestamps, which are assigned here.

        Returns:
            The stored model card.
        """
        attributes = {key: value for key, value in attributes.items() if key not in _IMMUTABLE_FIELDS}
        now = utc_now()
        card = ModelCard(id=str(uuid4()), created_at=now, updated_at=now, **attributes)
        cards = await self.list_model_cards()
        await self._save([*cards, card])
        logger.info("Created model card %s (%s)", card.id, card.name)
        return card

    async def update_model_card(self, model_card_id: str, **updates: Any) -> ModelCard:
        """Update fields of a stored model card.

        Args:
            model_card_id: The card to update.
            **updates: :class:`ModelCard` fields to replace. ``id`` and the
                timestamps are ignored.

        Returns:
            The updated model card.

        Raises:
            ModelCardNotFoundError: If the card does not exist.
        """
        cards = await self.list_model_cards()
        card = next((c for c in cards if c.id == model_card_id), None)
        if card is None:
            raise ModelCardNotFoundError(model_card_id)

        allowed = {f.name for f in fields(ModelCard)} - _IMMUTABLE_FIELDS
        for key, value in updates.items():
            if key in allowed:
                setattr(card, key, value)
        card.updated_at = utc_now()

        await self._save(cards)
        return card

    async def delete_model_card(self, model_card_id: str) -> None:
        """Remove a model card; unknown ids are ignored."""
        cards = await self.list_model_cards()
        await self._save([card for card in cards if card.id != model_card_id])

    async def _save(self, cards: list[ModelCard]) -> None:
        await self.storage.set_item(MODEL_CARDS_STORAGE_KEY, [model_card_to_dict(card) for card in cards])
