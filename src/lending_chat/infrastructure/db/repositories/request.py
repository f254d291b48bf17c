from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from lending_chat.application.exceptions import DuplicateOpenRequestError
from lending_chat.domain.entities.request import Request
from lending_chat.domain.value_objects.lifecycle import OPEN_STATUSES
from lending_chat.infrastructure.db.mappers import request as mapper
from lending_chat.infrastructure.db.models.item import ItemModel
from lending_chat.infrastructure.db.models.request import RequestModel


def _select_requests():
    # the item owner is noload by default; mapping needs its name
    return select(RequestModel).options(
        joinedload(RequestModel.item, innerjoin=True).joinedload(ItemModel.owner, innerjoin=True),
    )


class RequestReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, request_id: int) -> Request | None:
        stmt = (
            _select_requests()
            .where(RequestModel.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_open_for_item(self, item_id: int) -> Request | None:
        stmt = (
            _select_requests()
            .where(
                RequestModel.item_id == item_id,
                RequestModel.status.in_([s.value for s in OPEN_STATUSES]),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_subject(self, subject_id: int) -> list[Request]:
        stmt = (
            _select_requests()
            .where(
                (RequestModel.requester_id == subject_id)
                | (RequestModel.item.has(ItemModel.owner_id == subject_id))
            )
            .order_by(RequestModel.created_at.desc(), RequestModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class RequestWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_update(self, request_id: int) -> Request | None:
        stmt = (
            _select_requests()
            .where(RequestModel.id == request_id)
            .with_for_update(of=RequestModel)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def create(
        self,
        item_id: int,
        requester_id: int,
        status: str,
        created_at: datetime,
    ) -> Request:
        model = RequestModel(
            item_id=item_id,
            requester_id=requester_id,
            status=status,
            created_at=created_at,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Another instance won the race past the partial unique index.
            raise DuplicateOpenRequestError("An active request for this item already exists") from exc
        stmt = (
            _select_requests()
            .where(RequestModel.id == model.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())

    async def update_status(
        self,
        request_id: int,
        status: str,
        *,
        approved_at: datetime | None = None,
        closed_at: datetime | None = None,
    ) -> Request:
        values: dict[str, object] = {"status": status}
        if approved_at is not None:
            values["approved_at"] = approved_at
        if closed_at is not None:
            values["closed_at"] = closed_at
        await self._session.execute(
            update(RequestModel).where(RequestModel.id == request_id).values(**values)
        )
        stmt = (
            _select_requests()
            .where(RequestModel.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())
