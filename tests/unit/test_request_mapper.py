from __future__ import annotations

from lending_chat.infrastructure.db.mappers import request as mapper
from lending_chat.infrastructure.db.models import ItemModel, RequestModel, UserModel
from tests.conftest import OWNER_ID, REQUESTER_ID, T0


def _loaded_request(*, with_owner: bool = True) -> RequestModel:
    owner = UserModel(id=OWNER_ID, name="Olivia", email="olivia@example.com")
    requester = UserModel(id=REQUESTER_ID, name="Rowan", email="rowan@example.com")
    item = ItemModel(id=10, owner_id=OWNER_ID, title="Ladder", status="REQUESTED")
    if with_owner:
        item.owner = owner
    return RequestModel(
        id=5, item_id=item.id, requester_id=REQUESTER_ID, status="PENDING",
        created_at=T0, item=item, requester=requester,
    )


def test_mapper_carries_display_names():
    request = mapper.model_to_entity(_loaded_request())

    assert request.owner_id == OWNER_ID
    assert request.item_title == "Ladder"
    assert request.requester_name == "Rowan"
    assert request.owner_name == "Olivia"


def test_mapper_tolerates_unloaded_owner():
    request = mapper.model_to_entity(_loaded_request(with_owner=False))

    assert request.owner_id == OWNER_ID
    assert request.owner_name is None
