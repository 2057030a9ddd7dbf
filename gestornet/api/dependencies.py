"""Dependency injection for FastAPI endpoints"""

from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, Request
from gestornet.config import settings
from gestornet.domain.auth import AuthManager, ManagerSession
from gestornet.domain.clients import ClientRegistry
from gestornet.domain.exceptions import (
    AuthorizationError,
    BackupError,
    BackupRestoreError,
    ClientNotFoundError,
    DomainException,
    DuplicateManagerError,
    InvalidCredentialsError,
    SetupAlreadyCompleteError,
    SetupRequiredError,
    ValidationError,
)
from gestornet.domain.ledger import TransactionLedger
from gestornet.domain.models import CLIENTS, MANAGERS, TRANSACTIONS, Manager
from gestornet.infrastructure.database.repositories import DocumentStore
from gestornet.infrastructure.database.session import build_engine, build_session_factory
from gestornet.infrastructure.persistence.session_storage import FileSessionStorage
from gestornet.infrastructure.persistence.writer import StoreWriter


@dataclass
class Services:
    """Long-lived collaborators shared by every request of one app instance"""

    store: DocumentStore
    writer: StoreWriter
    registry: ClientRegistry
    ledger: TransactionLedger
    auth: AuthManager

    def reload(self) -> None:
        """Re-read clients, transactions and managers from the store"""
        self.registry.reload(self.store.get_all(CLIENTS))
        self.ledger.reload(self.store.get_all(TRANSACTIONS))
        self.auth.reload(self.store.get_all(MANAGERS))


def build_services(
    database_url: Optional[str] = None,
    session_storage=None,
    write_behind: Optional[bool] = None,
) -> Services:
    """Wire store, writer and the in-memory collections, then restore the session"""
    engine = build_engine(database_url or settings.database_url)
    store = DocumentStore(build_session_factory(engine))
    writer = StoreWriter(store, background=settings.write_behind if write_behind is None else write_behind)

    session = ManagerSession(
        session_storage or FileSessionStorage(settings.session_file),
        key=settings.session_key,
    )
    auth = AuthManager.load(
        store,
        writer,
        session,
        boss_password_min_length=settings.boss_password_min_length,
        manager_password_min_length=settings.manager_password_min_length,
    )
    auth.restore_session()

    return Services(
        store=store,
        writer=writer,
        registry=ClientRegistry.load(store, writer),
        ledger=TransactionLedger.load(store, writer),
        auth=auth,
    )


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_services(request: Request) -> Services:
    """Provide the app's service container"""
    return request.app.state.services


def require_setup(services: Services = Depends(get_services)) -> Services:
    """Reject requests until the boss account exists"""
    if not services.auth.is_setup_complete:
        raise to_http_exception(SetupRequiredError("Initial setup has not been completed"))
    return services


def require_manager(services: Services = Depends(require_setup)) -> Manager:
    """
    Provide the logged-in manager or reject with 401.

    There is one session per server instance, not per caller: once a manager
    logs in, every HTTP client is treated as that manager until logout. Only
    run the service where a single operator can reach it.
    """
    manager = services.auth.current_manager
    if manager is None:
        raise HTTPException(status_code=401, detail="Login required")
    return manager


def to_http_exception(error: DomainException) -> HTTPException:
    """Translate a domain exception into the matching HTTP error"""
    if isinstance(error, InvalidCredentialsError):
        return HTTPException(status_code=401, detail=str(error))
    if isinstance(error, AuthorizationError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, (DuplicateManagerError, SetupRequiredError, SetupAlreadyCompleteError)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, ClientNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, BackupRestoreError):
        return HTTPException(status_code=500, detail=str(error))
    if isinstance(error, BackupError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))
