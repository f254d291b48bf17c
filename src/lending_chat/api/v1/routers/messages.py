from __future__ import annotations

from fastapi import APIRouter, Query

from lending_chat.api.deps import CurrentIdentity, UoWDep
from lending_chat.api.v1.schemas.message import MessageResponse
from lending_chat.services import message_service

router = APIRouter(prefix="/api/v1/requests", tags=["messages"])


@router.get("/{request_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    request_id: int,
    identity: CurrentIdentity,
    uow: UoWDep,
    after_id: int | None = Query(None, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[MessageResponse]:
    messages = await message_service.list_history(
        request_id, identity, uow, after_id=after_id, limit=limit,
    )
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]
