"""POST /v1/auth/* - manager login, logout and password changes"""

from fastapi import APIRouter, Depends

from gestornet.api.v1.schemas import ChangePasswordRequest, LoginRequest, ManagerSchema
from gestornet.api.dependencies import Services, require_manager, require_setup, to_http_exception
from gestornet.domain.exceptions import DomainException, InvalidCredentialsError
from gestornet.domain.models import Manager
from gestornet.infrastructure.observability.logging import log_auth_event
from gestornet.infrastructure.observability.metrics import login_counter

router = APIRouter()


@router.post("/auth/login", response_model=ManagerSchema)
def login(request_body: LoginRequest, services: Services = Depends(require_setup)):
    """Start a session for the manager whose name and password match exactly"""
    try:
        manager = services.auth.login(request_body.name, request_body.password)
    except InvalidCredentialsError as e:
        login_counter.labels(outcome="failure").inc()
        log_auth_event("login", "failure", request_body.name)
        raise to_http_exception(e)

    login_counter.labels(outcome="success").inc()
    log_auth_event("login", "success", manager.name)
    return ManagerSchema.model_validate(manager)


@router.post("/auth/logout", status_code=204)
def logout(
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    services.auth.logout()
    log_auth_event("logout", "success", manager.name)


@router.get("/auth/me", response_model=ManagerSchema)
def get_current_manager(manager: Manager = Depends(require_manager)):
    return ManagerSchema.model_validate(manager)


@router.post("/auth/password", status_code=204)
def change_password(
    request_body: ChangePasswordRequest,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Change the logged-in manager's own password"""
    try:
        services.auth.change_manager_password(
            request_body.current_password,
            request_body.new_password,
            request_body.confirm_password,
        )
    except DomainException as e:
        log_auth_event("change_password", "failure", manager.name)
        raise to_http_exception(e)

    log_auth_event("change_password", "success", manager.name)


@router.post("/auth/boss-password", status_code=204)
def change_boss_password(
    request_body: ChangePasswordRequest,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Change the boss password; the current boss password is the only credential checked"""
    try:
        services.auth.change_boss_password(
            request_body.current_password,
            request_body.new_password,
            request_body.confirm_password,
        )
    except DomainException as e:
        log_auth_event("change_boss_password", "failure", manager.name)
        raise to_http_exception(e)

    log_auth_event("change_boss_password", "success", manager.name)
