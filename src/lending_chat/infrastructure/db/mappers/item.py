from __future__ import annotations

from lending_chat.domain.entities.item import Item
from lending_chat.infrastructure.db.models.item import ItemModel


def model_to_entity(model: ItemModel) -> Item:
    return Item(
        id=model.id,
        owner_id=model.owner_id,
        title=model.title,
        status=model.status,
        created_at=model.created_at,
    )
