"""Shared pytest fixtures for Marginalia tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from marginalia.annotations.router import (
    get_annotations_service,
    get_import_service,
    get_store,
)
from marginalia.annotations.service import AnnotationsService
from marginalia.db.connection import Database
from marginalia.defaults.service import PersistedDefaultsService
from marginalia.importer.service import ImportAnnotationsService
from marginalia.main import app
from marginalia.sidebar.router import get_defaults_service
from tests.fixtures import RecordingPublisher, make_logged_in_store


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
def store():
    """Sidebar store with a focused group, a logged-in user and a main frame."""
    return make_logged_in_store()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def service(publisher, store):
    return AnnotationsService(publisher, store)


@pytest.fixture
def import_service(service, store):
    return ImportAnnotationsService(service, store)


@pytest.fixture
async def defaults_service(db, store):
    svc = PersistedDefaultsService(db, store)
    await svc.init()
    yield svc
    svc.close()


@pytest.fixture
async def client(store, service, import_service, defaults_service):
    """Async test client with the store and services wired into the app."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_annotations_service] = lambda: service
    app.dependency_overrides[get_import_service] = lambda: import_service
    app.dependency_overrides[get_defaults_service] = lambda: defaults_service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
