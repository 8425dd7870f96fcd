import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.routers.deps import get_client
from app.services.content import ContentService
from app.services.session import SessionContext, SessionManager
from tests.fakes import FakeAppwrite


@pytest.fixture
def backend():
    return FakeAppwrite()


@pytest.fixture
def content(backend):
    return ContentService(backend, backend.config)


@pytest.fixture
def manager(backend):
    return SessionManager(backend)


@pytest.fixture
def ctx(manager):
    return SessionContext(manager)


@pytest.fixture
def api(backend):
    def client_for_request(request: Request):
        # One fake project; the caller's cookie picks the session
        backend.session_secret = request.cookies.get(settings.SESSION_COOKIE_NAME)
        return backend

    app.dependency_overrides[get_client] = client_for_request
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
