"""GET/POST/DELETE /v1/managers - manager accounts, guarded by the boss password"""

from typing import List
from fastapi import APIRouter, Depends, Header

from gestornet.api.v1.schemas import ManagerSchema, RegisterManagerRequest
from gestornet.api.dependencies import Services, require_manager, require_setup, to_http_exception
from gestornet.domain.exceptions import AuthorizationError, DomainException
from gestornet.domain.models import Manager
from gestornet.infrastructure.observability.logging import log_auth_event

router = APIRouter()


@router.get("/managers", response_model=List[ManagerSchema])
def list_managers(
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    return [ManagerSchema.model_validate(m) for m in services.auth.managers]


@router.post("/managers", response_model=ManagerSchema, status_code=201)
def register_manager(
    request_body: RegisterManagerRequest,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """
    Add a manager account.

    Returns:
        403 if the boss password is wrong, 409 if the name is taken (any case)
    """
    try:
        if not services.auth.verify_boss_password(request_body.boss_password):
            raise AuthorizationError("Boss password is incorrect")
        created = services.auth.register_manager(request_body.name, request_body.password)
    except DomainException as e:
        log_auth_event("register_manager", "failure", request_body.name)
        raise to_http_exception(e)

    log_auth_event("register_manager", "success", created.name)
    return ManagerSchema.model_validate(created)


@router.delete("/managers/{manager_id}", status_code=204)
def delete_manager(
    manager_id: str,
    boss_password: str = Header(..., alias="X-Boss-Password"),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Remove a manager; the logged-in manager can never delete themselves"""
    try:
        services.auth.delete_manager(manager_id, boss_password)
    except DomainException as e:
        log_auth_event("delete_manager", "failure", manager.name)
        raise to_http_exception(e)

    log_auth_event("delete_manager", "success", manager.name)
