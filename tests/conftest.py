"""Pytest fixtures for testing"""

import os
import tempfile

# Settings are read at import time; point them at throwaway storage first
os.environ.setdefault("GESTORNET_DATABASE_URL", "sqlite://")
os.environ.setdefault("GESTORNET_WRITE_BEHIND", "false")
os.environ.setdefault(
    "GESTORNET_SESSION_FILE",
    os.path.join(tempfile.gettempdir(), "gestornet_test_session.json"),
)

import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from gestornet.api.dependencies import Services
from gestornet.api.main import create_app
from gestornet.domain.auth import AuthManager, ManagerSession
from gestornet.domain.clients import ClientRegistry
from gestornet.domain.ledger import TransactionLedger
from gestornet.domain.models import Client
from gestornet.infrastructure.database.repositories import DocumentStore
from gestornet.infrastructure.database.session import build_engine, build_session_factory
from gestornet.infrastructure.persistence.session_storage import MemorySessionStorage
from gestornet.infrastructure.persistence.writer import StoreWriter

BOSS_PASSWORD = "chefe123"
MANAGER_NAME = "Ana"
MANAGER_PASSWORD = "ana1"


@pytest.fixture
def store() -> DocumentStore:
    """Fresh in-memory document store"""
    return DocumentStore(build_session_factory(build_engine("sqlite://")))


@pytest.fixture
def writer(store: DocumentStore) -> StoreWriter:
    """Inline writer so tests can read the store right after a mutation"""
    return StoreWriter(store, background=False)


@pytest.fixture
def session_storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def registry(writer: StoreWriter) -> ClientRegistry:
    return ClientRegistry(writer)


@pytest.fixture
def ledger(writer: StoreWriter) -> TransactionLedger:
    return TransactionLedger(writer)


@pytest.fixture
def auth(writer: StoreWriter, session_storage: MemorySessionStorage) -> AuthManager:
    return AuthManager(writer, ManagerSession(session_storage))


@pytest.fixture
def ready_auth(auth: AuthManager) -> AuthManager:
    """Boss configured and one manager registered, nobody logged in"""
    auth.setup_boss("Chefe", "chefe@example.com", BOSS_PASSWORD)
    auth.register_manager(MANAGER_NAME, MANAGER_PASSWORD)
    return auth


@pytest.fixture
def services(
    store: DocumentStore,
    writer: StoreWriter,
    registry: ClientRegistry,
    ledger: TransactionLedger,
    auth: AuthManager,
) -> Services:
    return Services(store=store, writer=writer, registry=registry, ledger=ledger, auth=auth)


@pytest.fixture
def client(services: Services) -> TestClient:
    """Create FastAPI test client over isolated services"""
    return TestClient(create_app(services))


@pytest.fixture
def logged_in_client(client: TestClient) -> TestClient:
    """Test client after the setup wizard, logged in as the first manager"""
    response = client.post(
        "/v1/setup",
        json={
            "boss_name": "Chefe",
            "boss_email": "chefe@example.com",
            "boss_password": BOSS_PASSWORD,
            "confirm_password": BOSS_PASSWORD,
            "manager_name": MANAGER_NAME,
            "manager_password": MANAGER_PASSWORD,
        },
    )
    assert response.status_code == 201
    return client


@pytest.fixture
def make_client():
    """Factory for client entities with sensible defaults"""

    def _make(code: str, **overrides) -> Client:
        values = {
            "id": f"id-{code}",
            "code": code,
            "name": f"Client {code}",
            "bi": "000111222LA033",
            "phone": "923000000",
            "location": "Viana",
            "tap": "TAP-01",
            "contract_date": datetime(2024, 1, 10),
        }
        values.update(overrides)
        return Client(**values)

    return _make
