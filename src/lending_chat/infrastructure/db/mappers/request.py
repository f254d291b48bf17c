from __future__ import annotations

from lending_chat.domain.entities.request import Request
from lending_chat.infrastructure.db.models.request import RequestModel


def model_to_entity(model: RequestModel) -> Request:
    return Request(
        id=model.id,
        item_id=model.item_id,
        requester_id=model.requester_id,
        owner_id=model.item.owner_id,
        status=model.status,
        created_at=model.created_at,
        approved_at=model.approved_at,
        closed_at=model.closed_at,
        item_title=model.item.title,
        requester_name=model.requester.name,
        owner_name=model.item.owner.name if model.item.owner is not None else None,
    )
