"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from gestornet.utils.date_utils import parse_timestamp

# Allowed values for the string-typed fields below
PAYMENT_METHODS = ("cash", "transfer")
PAYMENT_TYPES = ("mensalidade", "multa")
TRANSACTION_TYPES = ("entrada", "saida")
TRANSACTION_CATEGORIES = ("pagamento", "alimentacao", "salario", "agua", "outro")

BOSS_CONFIG_ID = "boss"

# Persistence collection names
MANAGERS = "managers"
CLIENTS = "clients"
TRANSACTIONS = "transactions"
BOSS_CONFIG = "bossConfig"
COLLECTIONS = (MANAGERS, CLIENTS, TRANSACTIONS, BOSS_CONFIG)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Manager:
    """Operator account used for day-to-day management"""

    id: str
    name: str
    password: str  # plaintext, see credentials_match

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "password": self.password}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Manager":
        return cls(id=str(record["id"]), name=record["name"], password=record["password"])


@dataclass
class BossConfig:
    """Singleton owner account; its presence marks setup as complete"""

    name: str
    email: str
    password: str
    created_at: datetime
    id: str = BOSS_CONFIG_ID

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BossConfig":
        return cls(
            id=record.get("id", BOSS_CONFIG_ID),
            name=record["name"],
            email=record["email"],
            password=record["password"],
            created_at=parse_timestamp(record["createdAt"]),
        )


@dataclass
class Payment:
    """Single payment embedded in a client's history"""

    id: str
    client_id: str
    amount: float
    date: datetime
    method: str  # "cash" or "transfer"
    type: str  # "mensalidade" or "multa"
    reference_month: str  # "YYYY-MM"

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "amount": self.amount,
            "date": _iso(self.date),
            "method": self.method,
            "type": self.type,
            "referenceMonth": self.reference_month,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Payment":
        return cls(
            id=str(record["id"]),
            client_id=str(record["clientId"]),
            amount=record["amount"],
            date=parse_timestamp(record["date"]),
            method=record["method"],
            type=record["type"],
            reference_month=record["referenceMonth"],
        )


@dataclass
class Client:
    """Subscriber with derived signal/debt/activity state"""

    id: str
    code: str
    name: str
    bi: str
    phone: str
    location: str
    tap: str
    contract_date: datetime
    has_signal: bool = True
    months_without_payment: int = 0
    debt: float = 0
    payments: List[Payment] = field(default_factory=list)
    is_active: bool = True

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "bi": self.bi,
            "phone": self.phone,
            "location": self.location,
            "tap": self.tap,
            "contractDate": _iso(self.contract_date),
            "hasSignal": self.has_signal,
            "monthsWithoutPayment": self.months_without_payment,
            "debt": self.debt,
            "payments": [p.to_record() for p in self.payments],
            "isActive": self.is_active,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Client":
        return cls(
            id=str(record["id"]),
            code=record["code"],
            name=record["name"],
            bi=record.get("bi", ""),
            phone=record.get("phone", ""),
            location=record.get("location", ""),
            tap=record.get("tap", ""),
            contract_date=parse_timestamp(record["contractDate"]),
            has_signal=bool(record.get("hasSignal", True)),
            months_without_payment=int(record.get("monthsWithoutPayment", 0)),
            debt=record.get("debt", 0),
            payments=[Payment.from_record(p) for p in record.get("payments", [])],
            is_active=bool(record.get("isActive", True)),
        )


@dataclass
class ClientUpdate:
    """Explicit field-level update for a client; None means 'leave unchanged'"""

    name: Optional[str] = None
    bi: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    tap: Optional[str] = None
    contract_date: Optional[datetime] = None
    has_signal: Optional[bool] = None
    months_without_payment: Optional[int] = None
    debt: Optional[float] = None


@dataclass
class Transaction:
    """Ledger entry for money coming in (entrada) or going out (saida)"""

    id: str
    type: str  # "entrada" or "saida"
    category: str
    description: str
    amount: float
    date: datetime
    method: Optional[str] = None  # only kept for entrada
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    manager_name: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record = {
            "id": self.id,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "date": _iso(self.date),
        }
        optional = {
            "method": self.method,
            "clientId": self.client_id,
            "clientName": self.client_name,
            "managerName": self.manager_name,
        }
        record.update({k: v for k, v in optional.items() if v is not None})
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Transaction":
        return cls(
            id=str(record["id"]),
            type=record["type"],
            category=record["category"],
            description=record.get("description", ""),
            amount=record["amount"],
            date=parse_timestamp(record["date"]),
            method=record.get("method"),
            client_id=record.get("clientId"),
            client_name=record.get("clientName"),
            manager_name=record.get("managerName"),
        )


@dataclass
class DailyReport:
    """Aggregated ledger activity for one calendar day"""

    date: datetime
    total_entradas: float
    total_saidas: float
    balance: float
    transactions: List[Transaction]


@dataclass
class ReportBreakdown:
    """Cash/transfer split of income and per-category expenses for a report"""

    cash_total: float
    cash_count: int
    transfer_total: float
    transfer_count: int
    expenses_by_category: Dict[str, float]


@dataclass
class PaymentQuote:
    """Output of the pricing oracle"""

    amount: float
    has_late_fee: bool


@dataclass
class LedgerTotals:
    """Whole-ledger summary, independent of day"""

    total_entradas: float
    total_saidas: float
    balance: float
