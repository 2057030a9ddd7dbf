"""/v1/transactions - daily ledger of income and expenses"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from gestornet.api.v1.schemas import TransactionCreateRequest, TransactionSchema
from gestornet.api.dependencies import Services, get_request_id, require_manager, require_setup, to_http_exception
from gestornet.domain.exceptions import DomainException
from gestornet.domain.models import Manager
from gestornet.infrastructure.observability.logging import log_transaction
from gestornet.infrastructure.observability.metrics import transaction_counter

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    today: bool = Query(False, description="Only transactions dated today"),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    ledger = services.ledger
    transactions = ledger.today_transactions() if today else ledger.transactions
    return [TransactionSchema.model_validate(t) for t in transactions]


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Record a manual entry; the logged-in manager is stamped on it"""
    request_id = get_request_id(request)

    try:
        transaction = services.ledger.add(
            type=request_body.type,
            category=request_body.category,
            description=request_body.description,
            amount=request_body.amount,
            date=request_body.date,
            method=request_body.method,
            manager_name=manager.name,
        )
    except DomainException as e:
        logging.warning(f"Transaction rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    transaction_counter.labels(type=transaction.type).inc()
    log_transaction(transaction.id, transaction.type, transaction.category, transaction.amount)
    return TransactionSchema.model_validate(transaction)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    if not any(t.id == transaction_id for t in services.ledger.transactions):
        raise HTTPException(status_code=404, detail=f"Transaction {transaction_id} not found")
    services.ledger.remove(transaction_id)
