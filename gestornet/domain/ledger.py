"""Transaction ledger - daily cash and transfer movements"""

import copy
import threading
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union
from gestornet.domain.clients import new_id
from gestornet.domain.exceptions import ValidationError
from gestornet.domain.models import (
    PAYMENT_METHODS,
    TRANSACTION_CATEGORIES,
    TRANSACTIONS,
    TRANSACTION_TYPES,
    DailyReport,
    LedgerTotals,
    Transaction,
)
from gestornet.domain.reporting import build_daily_report, compute_totals
from gestornet.utils.date_utils import coerce_timestamp, is_same_day, now


class TransactionLedger:
    """In-memory working copy of the transactions collection, write-through to the store"""

    def __init__(self, writer, transactions: Optional[Iterable[Transaction]] = None):
        self.writer = writer
        self._lock = threading.RLock()
        self._transactions: List[Transaction] = list(transactions or [])

    @classmethod
    def load(cls, store, writer) -> "TransactionLedger":
        return cls(writer, [Transaction.from_record(r) for r in store.get_all(TRANSACTIONS)])

    def reload(self, records: List[Dict[str, Any]]) -> None:
        transactions = [Transaction.from_record(r) for r in records]
        with self._lock:
            self._transactions = transactions

    @property
    def transactions(self) -> List[Transaction]:
        with self._lock:
            return copy.deepcopy(self._transactions)

    def add(
        self,
        type: str,
        category: str,
        description: str,
        amount: float,
        date: Optional[Union[datetime, str]] = None,
        method: Optional[str] = None,
        client_id: Optional[str] = None,
        client_name: Optional[str] = None,
        manager_name: Optional[str] = None,
    ) -> Transaction:
        """
        Append a transaction.

        Raises:
            ValidationError: amount <= 0, unknown type/category/method, or empty description
        """
        if amount is None or amount <= 0:
            raise ValidationError("Transaction amount must be greater than zero")
        if type not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type: {type!r}")
        if category not in TRANSACTION_CATEGORIES:
            raise ValidationError(f"Invalid transaction category: {category!r}")
        if not (description or "").strip():
            raise ValidationError("Transaction description is required")
        if type == "entrada" and method is not None and method not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method: {method!r}")

        transaction = Transaction(
            id=new_id(),
            type=type,
            category=category,
            description=description.strip(),
            amount=amount,
            date=coerce_timestamp(date),
            method=method if type == "entrada" else None,
            client_id=client_id,
            client_name=client_name,
            manager_name=manager_name,
        )

        with self._lock:
            self._transactions.append(transaction)
            self.writer.put(TRANSACTIONS, transaction.to_record())

        return copy.deepcopy(transaction)

    def remove(self, transaction_id: str) -> None:
        with self._lock:
            remaining = [t for t in self._transactions if t.id != transaction_id]
            if len(remaining) == len(self._transactions):
                return
            self._transactions = remaining
            self.writer.remove(TRANSACTIONS, transaction_id)

    def report_for_day(self, day: Union[date, datetime]) -> DailyReport:
        with self._lock:
            return copy.deepcopy(build_daily_report(self._transactions, day))

    def today_report(self) -> DailyReport:
        """Report for the current day, recomputed on every call"""
        return self.report_for_day(now())

    def today_transactions(self) -> List[Transaction]:
        today = now()
        with self._lock:
            return copy.deepcopy([t for t in self._transactions if is_same_day(t.date, today)])

    def totals(self) -> LedgerTotals:
        """Totals over the whole ledger, independent of day"""
        with self._lock:
            return compute_totals(self._transactions)

    @property
    def total_entradas(self) -> float:
        return self.totals().total_entradas

    @property
    def total_saidas(self) -> float:
        return self.totals().total_saidas

    @property
    def balance(self) -> float:
        return self.totals().balance
