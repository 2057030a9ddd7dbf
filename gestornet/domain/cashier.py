"""Client payment flow: record the payment on the client and the matching ledger income"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from gestornet.domain.clients import ClientRegistry
from gestornet.domain.exceptions import ClientNotFoundError, ValidationError
from gestornet.domain.ledger import TransactionLedger
from gestornet.domain.models import PAYMENT_METHODS, Client, Payment, Transaction
from gestornet.utils.date_utils import format_month, now

MONTHLY_PAYMENT_LABEL = "Pagamento mensalidade"
CONTRACT_PAYMENT_LABEL = "Pagamento contrato"


def collect_payment(
    registry: ClientRegistry,
    ledger: TransactionLedger,
    client_id: str,
    amount: float,
    method: str,
    manager_name: Optional[str] = None,
    when: Optional[datetime] = None,
    description_prefix: str = MONTHLY_PAYMENT_LABEL,
) -> Tuple[Payment, Transaction]:
    """
    Take a monthly payment from a client.

    Flow:
    1. Append a mensalidade payment to the client (clears debt, restores signal)
    2. Record the same amount as entrada/pagamento in the ledger

    Raises:
        ClientNotFoundError: no client with that id (nothing is recorded)
    """
    when = when or now()

    # A concurrent remove must not slip in between the lookup and the ledger entry
    with registry.lock:
        client = registry.get(client_id)
        if client is None:
            raise ClientNotFoundError(f"Client {client_id} not found")

        payment = registry.make_payment(
            client_id,
            amount=amount,
            method=method,
            payment_type="mensalidade",
            paid_at=when,
            reference_month=format_month(when),
        )
        transaction = ledger.add(
            type="entrada",
            category="pagamento",
            description=f"{description_prefix} - {client.name}",
            amount=amount,
            date=when,
            method=method,
            client_id=client.id,
            client_name=client.name,
            manager_name=manager_name,
        )
    return payment, transaction


def register_client(
    registry: ClientRegistry,
    ledger: TransactionLedger,
    data: Dict[str, Any],
    initial_payment: Optional[Dict[str, Any]] = None,
    manager_name: Optional[str] = None,
) -> Tuple[Client, Optional[Payment]]:
    """Add a client and optionally collect the contract payment in the same step"""
    if initial_payment:
        if not initial_payment.get("amount") or initial_payment["amount"] <= 0:
            raise ValidationError("Initial payment amount must be greater than zero")
        if initial_payment.get("method") not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method: {initial_payment.get('method')!r}")

    client = registry.add(**data)
    payment = None
    if initial_payment:
        payment, _ = collect_payment(
            registry,
            ledger,
            client.id,
            amount=initial_payment["amount"],
            method=initial_payment["method"],
            manager_name=manager_name,
            description_prefix=CONTRACT_PAYMENT_LABEL,
        )
        client = registry.get(client.id)
    return client, payment
