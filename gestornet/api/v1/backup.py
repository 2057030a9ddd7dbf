"""GET/POST /v1/backup - JSON export and atomic restore"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, Request

from gestornet.api.v1.schemas import RestoreResponse
from gestornet.api.dependencies import Services, get_request_id, require_manager, require_setup, to_http_exception
from gestornet.domain.exceptions import BackupError
from gestornet.domain.models import Manager
from gestornet.infrastructure.backup import export_backup, restore_backup

router = APIRouter()


@router.get("/backup")
def download_backup(
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Managers, clients and transactions as one JSON document"""
    services.writer.flush()
    return export_backup(services.store)


@router.post("/backup", response_model=RestoreResponse)
def upload_backup(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """
    Replace all managers, clients and transactions with the uploaded backup.

    Flow:
    1. Drain pending writes so they cannot land after the restore
    2. Validate and replace the three collections in one transaction
    3. Reload the in-memory collections (and re-check the session)
    """
    request_id = get_request_id(request)
    services.writer.flush()

    try:
        document = restore_backup(services.store, payload)
    except BackupError as e:
        logging.error(f"Backup restore rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    services.reload()
    return RestoreResponse(
        managers=len(document.managers),
        clients=len(document.clients),
        transactions=len(document.transactions),
    )
