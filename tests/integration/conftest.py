from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lending_chat.api.deps import get_manager, get_uow_factory, get_verifier
from lending_chat.app import create_app
from lending_chat.infrastructure.ws.manager import ConnectionManager
from tests.conftest import FakeVerifier, token_for, uow_factory_for


@pytest.fixture
def manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def app(db, manager):
    app = create_app()
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory_for(db)
    app.dependency_overrides[get_verifier] = FakeVerifier
    app.dependency_overrides[get_manager] = lambda: manager
    return app


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def auth(db):
    def headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(db, user_id)}"}

    return headers
