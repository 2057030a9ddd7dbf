"""Client registry - subscribers with debt, signal and activity state"""

import copy
import threading
import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union
from gestornet.domain.codes import generate_next_code, sort_clients_by_code
from gestornet.domain.exceptions import ValidationError
from gestornet.domain.models import (
    CLIENTS,
    PAYMENT_METHODS,
    PAYMENT_TYPES,
    Client,
    ClientUpdate,
    Payment,
)
from gestornet.domain.pricing import INACTIVE_MONTHS_THRESHOLD
from gestornet.utils.date_utils import coerce_timestamp, format_month

REQUIRED_CLIENT_FIELDS = ("name", "bi", "phone", "location", "tap")


def new_id() -> str:
    return uuid.uuid4().hex


def is_active_for(months_without_payment: int) -> bool:
    """Activity rule: active while fewer than 3 months are unpaid"""
    return months_without_payment < INACTIVE_MONTHS_THRESHOLD


class ClientRegistry:
    """
    In-memory working copy of the client collection.

    Every mutation updates memory first and then hands the changed record to
    the writer (write-through, fire-and-forget). Reads return copies sorted
    by client code.

    Unknown ids are silent no-ops for update/remove/toggle/payment.
    """

    def __init__(self, writer, clients: Optional[Iterable[Client]] = None):
        self.writer = writer
        self._lock = threading.RLock()
        self._clients: Dict[str, Client] = {}
        for client in clients or []:
            self._clients[client.id] = client

    @property
    def lock(self):
        """Reentrant lock; hold it to run several registry calls as one step"""
        return self._lock

    @classmethod
    def load(cls, store, writer) -> "ClientRegistry":
        """Build the registry from the persisted clients collection"""
        return cls(writer, [Client.from_record(r) for r in store.get_all(CLIENTS)])

    def reload(self, records: List[Dict[str, Any]]) -> None:
        """Replace the working copy (after a backup restore); nothing is written"""
        clients = [Client.from_record(r) for r in records]
        with self._lock:
            self._clients = {c.id: c for c in clients}

    # --- Views ---

    @property
    def clients(self) -> List[Client]:
        with self._lock:
            return copy.deepcopy(sort_clients_by_code(self._clients.values()))

    @property
    def active_clients(self) -> List[Client]:
        return [c for c in self.clients if c.is_active]

    @property
    def inactive_clients(self) -> List[Client]:
        # Broader than the stored flag: also catches clients still marked
        # active but already past the unpaid-months threshold.
        return [
            c for c in self.clients
            if not c.is_active or c.months_without_payment >= INACTIVE_MONTHS_THRESHOLD
        ]

    def get(self, client_id: str) -> Optional[Client]:
        with self._lock:
            client = self._clients.get(client_id)
            return copy.deepcopy(client) if client else None

    def search(self, query: str) -> List[Client]:
        """Case-insensitive substring match on name, code or location"""
        needle = (query or "").strip().lower()
        if not needle:
            return self.clients
        return [
            c for c in self.clients
            if needle in c.name.lower() or needle in c.code.lower() or needle in c.location.lower()
        ]

    # --- Mutations ---

    def add(
        self,
        name: str,
        bi: str,
        phone: str,
        location: str,
        tap: str,
        contract_date: Optional[Union[date, datetime, str]] = None,
    ) -> Client:
        """
        Register a new client.

        The code is the uppercased first letter of the name followed by the next
        free number for that letter (F1, F2, ...).

        Raises:
            ValidationError: a required field is empty
        """
        values = {"name": name, "bi": bi, "phone": phone, "location": location, "tap": tap}
        missing = [f for f in REQUIRED_CLIENT_FIELDS if not (values[f] or "").strip()]
        if missing:
            raise ValidationError(f"Missing required client fields: {', '.join(missing)}")

        with self._lock:
            letter = values["name"].strip()[0].upper()
            code = generate_next_code([c.code for c in self._clients.values()], letter)
            client = Client(
                id=new_id(),
                code=code,
                name=values["name"].strip(),
                bi=values["bi"].strip(),
                phone=values["phone"].strip(),
                location=values["location"].strip(),
                tap=values["tap"].strip(),
                contract_date=coerce_timestamp(contract_date),
                has_signal=True,
                months_without_payment=0,
                debt=0,
                payments=[],
                is_active=True,
            )
            self._clients[client.id] = client
            self._persist(client)
            return copy.deepcopy(client)

    def update(self, client_id: str, changes: ClientUpdate) -> Optional[Client]:
        """Apply the provided fields; returns the updated client or None if unknown"""
        if changes.months_without_payment is not None and changes.months_without_payment < 0:
            raise ValidationError("months_without_payment cannot be negative")
        if changes.debt is not None and changes.debt < 0:
            raise ValidationError("debt cannot be negative")
        for text_field in REQUIRED_CLIENT_FIELDS:
            value = getattr(changes, text_field)
            if value is not None and not value.strip():
                raise ValidationError(f"{text_field} cannot be empty")

        with self._lock:
            client = self._clients.get(client_id)
            if client is None:
                return None

            for text_field in REQUIRED_CLIENT_FIELDS:
                value = getattr(changes, text_field)
                if value is not None:
                    setattr(client, text_field, value.strip())
            if changes.contract_date is not None:
                client.contract_date = coerce_timestamp(changes.contract_date)
            if changes.debt is not None:
                client.debt = changes.debt
            if changes.has_signal is not None:
                client.has_signal = changes.has_signal
            if changes.months_without_payment is not None:
                client.months_without_payment = changes.months_without_payment
            if changes.has_signal is not None or changes.months_without_payment is not None:
                client.is_active = is_active_for(client.months_without_payment)

            self._persist(client)
            return copy.deepcopy(client)

    def remove(self, client_id: str) -> None:
        with self._lock:
            if self._clients.pop(client_id, None) is not None:
                self.writer.remove(CLIENTS, client_id)

    def toggle_signal(self, client_id: str) -> Optional[Client]:
        """
        Flip the signal.

        Turning it on clears the unpaid months; turning it off keeps them.
        """
        with self._lock:
            client = self._clients.get(client_id)
            if client is None:
                return None

            client.has_signal = not client.has_signal
            if client.has_signal:
                client.months_without_payment = 0
            client.is_active = is_active_for(client.months_without_payment)

            self._persist(client)
            return copy.deepcopy(client)

    def make_payment(
        self,
        client_id: str,
        amount: float,
        method: str,
        payment_type: str = "mensalidade",
        paid_at: Optional[Union[datetime, str]] = None,
        reference_month: Optional[str] = None,
    ) -> Payment:
        """
        Record a payment against a client.

        Debt decreases by the amount, never below zero. Any payment, whatever
        its size, restores the signal and clears the unpaid months.

        The payment object is returned even when the client does not exist;
        in that case nothing is stored.
        """
        if amount is None or amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method: {method!r}")
        if payment_type not in PAYMENT_TYPES:
            raise ValidationError(f"Invalid payment type: {payment_type!r}")

        paid_at = coerce_timestamp(paid_at)
        payment = Payment(
            id=new_id(),
            client_id=client_id,
            amount=amount,
            date=paid_at,
            method=method,
            type=payment_type,
            reference_month=reference_month or format_month(paid_at),
        )

        with self._lock:
            client = self._clients.get(client_id)
            if client is not None:
                client.debt = max(0, client.debt - amount)
                client.months_without_payment = 0
                client.has_signal = True
                client.is_active = True
                client.payments.append(payment)
                self._persist(client)

        return copy.deepcopy(payment)

    def _persist(self, client: Client) -> None:
        self.writer.put(CLIENTS, client.to_record())
