"""Service test fixtures: in-memory collaborators + FastAPI test client.

Invariants:
    - Every test gets a fresh FakeDocumentStore, FakeOtpGateway and FakeTextGenerator
    - Route dependencies are overridden; no outbound HTTP is ever made
    - Wizard registry and admin sessions are reset around each test
"""

import pytest
from httpx import ASGITransport, AsyncClient

import samaj_diary.api.routes.registration as registration_routes
from samaj_diary.api.dependencies import (
    get_admin_sessions,
    get_daily_content_service,
    get_document_store,
    get_otp_sender,
    get_text_generator,
)
from samaj_diary.config import get_settings
from samaj_diary.main import app
from samaj_diary.services.admin_auth import AdminSessions
from samaj_diary.services.daily_content import DailyContentService
from samaj_diary.services.repository import DirectoryRepository

from tests.services.fakes import (
    FIXED_NOW, FakeDocumentStore, FakeOtpGateway, FakeTextGenerator,
)


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def gateway():
    return FakeOtpGateway()


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def repository(store):
    return DirectoryRepository(store)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def content_service(repository, generator, settings):
    return DailyContentService(
        repository, generator, settings, clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def seeded(store):
    """Two villages and three members, one with a drifted villageId."""
    store.seed("villages", "v1", {"name": "Kherwara"})
    store.seed("villages", "v2", {"name": "Aspur"})
    store.seed("members", "m1", {
        "name": "रमेश", "fatherName": "सीता राम", "mobile": "9876543210",
        "villageId": "v1", "villageName": "Kherwara", "updatedAt": 1,
    })
    store.seed("members", "m2", {
        "name": "अमित", "fatherName": "मोहन", "mobile": "9000000002",
        "villageId": "v2", "villageName": "Aspur", "updatedAt": 1,
    })
    store.seed("members", "m3", {
        "name": "गीता", "fatherName": "राम", "mobile": "9000000003",
        "villageId": "old-id", "villageName": "kherwara ", "updatedAt": 1,
    })
    return store


@pytest.fixture
async def client(store, gateway, content_service, settings):
    """FastAPI test client with every outbound collaborator overridden."""
    sessions = AdminSessions(settings)
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_otp_sender] = lambda: gateway
    app.dependency_overrides[get_text_generator] = lambda: content_service.generator
    app.dependency_overrides[get_daily_content_service] = lambda: content_service
    app.dependency_overrides[get_admin_sessions] = lambda: sessions
    registration_routes._wizards.clear()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    registration_routes._wizards.clear()


@pytest.fixture
async def admin_headers(client, settings):
    response = await client.post(
        "/api/v1/admin/login",
        json={"email": settings.admin_email, "password": settings.admin_password},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
