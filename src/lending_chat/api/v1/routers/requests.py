from __future__ import annotations

from fastapi import APIRouter

from lending_chat.api.deps import CurrentIdentity, RelayDep, UoWDep
from lending_chat.api.v1.schemas.request import RequestResponse, TransitionRequestBody
from lending_chat.domain.value_objects.enums import RequestStatus
from lending_chat.services import request_service

router = APIRouter(prefix="/api/v1", tags=["requests"])


@router.post("/items/{item_id}/requests", response_model=RequestResponse, status_code=201)
async def open_request(
    item_id: int,
    identity: CurrentIdentity,
    uow: UoWDep,
) -> RequestResponse:
    request = await request_service.open_request(item_id, identity, uow)
    return RequestResponse.model_validate(request, from_attributes=True)


@router.get("/requests", response_model=list[RequestResponse])
async def list_requests(
    identity: CurrentIdentity,
    uow: UoWDep,
) -> list[RequestResponse]:
    requests = await request_service.list_requests(identity, uow)
    return [RequestResponse.model_validate(r, from_attributes=True) for r in requests]


@router.get("/requests/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: int,
    identity: CurrentIdentity,
    uow: UoWDep,
) -> RequestResponse:
    request = await request_service.get_request(request_id, identity, uow)
    return RequestResponse.model_validate(request, from_attributes=True)


@router.patch("/requests/{request_id}/status", response_model=RequestResponse)
async def transition_request(
    request_id: int,
    body: TransitionRequestBody,
    identity: CurrentIdentity,
    uow: UoWDep,
    relay: RelayDep,
) -> RequestResponse:
    request = await request_service.transition_request(
        request_id, identity, RequestStatus(body.status), uow,
    )
    await relay.request_status_changed(request)
    return RequestResponse.model_validate(request, from_attributes=True)
