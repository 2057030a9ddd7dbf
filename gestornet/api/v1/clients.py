"""/v1/clients - client registry, signal control, payments and fee quotes"""

import logging
from datetime import datetime
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from gestornet.api.v1.schemas import (
    ClientCreateRequest,
    ClientSchema,
    ClientUpdateRequest,
    PaymentRequest,
    PaymentResponse,
    PaymentSchema,
    QuoteResponse,
)
from gestornet.api.dependencies import Services, get_request_id, require_manager, require_setup, to_http_exception
from gestornet.domain.cashier import collect_payment, register_client
from gestornet.domain.exceptions import DomainException
from gestornet.domain.models import ClientUpdate, Manager
from gestornet.domain.pricing import quote_for_client
from gestornet.infrastructure.observability.logging import log_payment, log_transaction
from gestornet.infrastructure.observability.metrics import record_payment, transaction_counter
from gestornet.utils.date_utils import format_month, now

router = APIRouter()


def _client_or_404(services: Services, client_id: str):
    client = services.registry.get(client_id)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {client_id} not found")
    return client


@router.get("/clients", response_model=List[ClientSchema])
def list_clients(
    status: Literal["all", "active", "inactive"] = Query("all"),
    q: Optional[str] = Query(None, description="Substring of name, code or location"),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """List clients sorted by code, optionally narrowed by status and search text"""
    registry = services.registry
    if status == "active":
        clients = registry.active_clients
    elif status == "inactive":
        clients = registry.inactive_clients
    else:
        clients = registry.clients

    if q:
        matching_ids = {c.id for c in registry.search(q)}
        clients = [c for c in clients if c.id in matching_ids]

    return [ClientSchema.model_validate(c) for c in clients]


@router.post("/clients", response_model=ClientSchema, status_code=201)
def create_client(
    request_body: ClientCreateRequest,
    request: Request,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """
    Register a client.

    When an initial payment is supplied it is recorded against the new
    client and booked as income in the same request.
    """
    request_id = get_request_id(request)
    initial_payment = request_body.initial_payment.model_dump() if request_body.initial_payment else None

    try:
        client, payment = register_client(
            services.registry,
            services.ledger,
            request_body.model_dump(exclude={"initial_payment"}),
            initial_payment=initial_payment,
            manager_name=manager.name,
        )
    except DomainException as e:
        logging.warning(f"Client registration rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    if payment is not None:
        record_payment(payment.method, payment.amount)
        transaction_counter.labels(type="entrada").inc()
        log_payment(client.id, payment.amount, payment.method, client.debt)

    return ClientSchema.model_validate(client)


@router.get("/clients/{client_id}", response_model=ClientSchema)
def get_client(
    client_id: str,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    return ClientSchema.model_validate(_client_or_404(services, client_id))


@router.patch("/clients/{client_id}", response_model=ClientSchema)
def update_client(
    client_id: str,
    request_body: ClientUpdateRequest,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Apply only the fields present in the body"""
    try:
        client = services.registry.update(client_id, ClientUpdate(**request_body.model_dump(exclude_unset=True)))
    except DomainException as e:
        raise to_http_exception(e)

    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {client_id} not found")
    return ClientSchema.model_validate(client)


@router.delete("/clients/{client_id}", status_code=204)
def delete_client(
    client_id: str,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    _client_or_404(services, client_id)
    services.registry.remove(client_id)


@router.post("/clients/{client_id}/signal", response_model=ClientSchema)
def toggle_client_signal(
    client_id: str,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Cut or restore the signal; restoring it clears the unpaid months"""
    client = services.registry.toggle_signal(client_id)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {client_id} not found")
    return ClientSchema.model_validate(client)


@router.post("/clients/{client_id}/payments", response_model=PaymentResponse, status_code=201)
def create_payment(
    client_id: str,
    request_body: PaymentRequest,
    request: Request,
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """
    Take a monthly payment.

    Flow:
    1. Append the payment to the client (debt down, signal back on)
    2. Book the amount as entrada/pagamento in the ledger
    3. Record metrics and logs
    """
    request_id = get_request_id(request)

    try:
        payment, transaction = collect_payment(
            services.registry,
            services.ledger,
            client_id,
            amount=request_body.amount,
            method=request_body.method,
            manager_name=manager.name,
        )
    except DomainException as e:
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    client = services.registry.get(client_id)
    record_payment(payment.method, payment.amount)
    transaction_counter.labels(type=transaction.type).inc()
    log_payment(client_id, payment.amount, payment.method, client.debt if client else None)
    log_transaction(transaction.id, transaction.type, transaction.category, transaction.amount)

    return PaymentResponse(
        payment=PaymentSchema.model_validate(payment),
        transaction_id=transaction.id,
        client=ClientSchema.model_validate(client),
    )


@router.get("/clients/{client_id}/quote", response_model=QuoteResponse)
def get_payment_quote(
    client_id: str,
    on: Optional[datetime] = Query(None, description="Payment date; defaults to now"),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Expected amount for a payment made on the given date, late fee included"""
    client = _client_or_404(services, client_id)
    payment_date = on or now()
    quote = quote_for_client(client, payment_date)
    return QuoteResponse(
        amount=quote.amount,
        has_late_fee=quote.has_late_fee,
        reference_month=format_month(payment_date),
    )
