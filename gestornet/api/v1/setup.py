"""GET/POST /v1/setup - first-run boss and manager configuration"""

import logging
from fastapi import APIRouter, Depends, Request

from gestornet.api.v1.schemas import ManagerSchema, SetupRequest, SetupStatusResponse
from gestornet.api.dependencies import Services, get_request_id, get_services, to_http_exception
from gestornet.domain.exceptions import DomainException, SetupAlreadyCompleteError, ValidationError
from gestornet.infrastructure.observability.logging import log_auth_event

router = APIRouter()


@router.get("/setup/status", response_model=SetupStatusResponse)
def get_setup_status(services: Services = Depends(get_services)):
    """Tell the client whether to show the setup wizard, the login screen or the app"""
    manager = services.auth.current_manager
    return SetupStatusResponse(
        setup_complete=services.auth.is_setup_complete,
        logged_in=manager is not None,
        manager=ManagerSchema.model_validate(manager) if manager else None,
    )


@router.post("/setup", response_model=ManagerSchema, status_code=201)
def run_setup(
    request_body: SetupRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    """
    Complete the first-run wizard.

    Flow:
    1. Create the boss configuration
    2. Register the first manager
    3. Log that manager in
    """
    request_id = get_request_id(request)
    auth = services.auth

    try:
        if auth.is_setup_complete:
            raise SetupAlreadyCompleteError("Initial setup was already completed")
        # Validate the manager before the boss record is written
        if not request_body.manager_name.strip() or not request_body.manager_password.strip():
            raise ValidationError("Manager name and password are required")

        auth.setup_boss(
            request_body.boss_name,
            request_body.boss_email,
            request_body.boss_password,
            request_body.confirm_password,
        )
        auth.register_manager(request_body.manager_name, request_body.manager_password)
        manager = auth.login(request_body.manager_name, request_body.manager_password)
    except DomainException as e:
        logging.warning(f"Setup rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    log_auth_event("setup", "success", manager.name)
    return ManagerSchema.model_validate(manager)
