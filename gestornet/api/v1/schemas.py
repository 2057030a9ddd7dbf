"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

PaymentMethod = Literal["cash", "transfer"]
TransactionType = Literal["entrada", "saida"]
TransactionCategory = Literal["pagamento", "alimentacao", "salario", "agua", "outro"]


# --- Auth / setup ---


class ManagerSchema(BaseModel):
    """Manager as exposed by the API (never includes the password)"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class SetupStatusResponse(BaseModel):
    """Response for GET /v1/setup/status"""

    setup_complete: bool
    logged_in: bool
    manager: Optional[ManagerSchema] = None


class SetupRequest(BaseModel):
    """Request body for POST /v1/setup: boss account plus the first manager"""

    boss_name: str = Field(..., min_length=1)
    boss_email: str = Field(..., min_length=1)
    boss_password: str = Field(..., min_length=1)
    confirm_password: Optional[str] = None
    manager_name: str = Field(..., min_length=1)
    manager_password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    name: str
    password: str


class ChangePasswordRequest(BaseModel):
    """Request body for the manager and boss password endpoints"""

    current_password: str
    new_password: str
    confirm_password: Optional[str] = None


class RegisterManagerRequest(BaseModel):
    """Request body for POST /v1/managers"""

    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    boss_password: str


# --- Clients ---


class PaymentSchema(BaseModel):
    """Single payment in a client's history"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    amount: float
    date: datetime
    method: PaymentMethod
    type: Literal["mensalidade", "multa"]
    reference_month: str


class ClientSchema(BaseModel):
    """Client with derived status and payment history"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    bi: str
    phone: str
    location: str
    tap: str
    contract_date: datetime
    has_signal: bool
    months_without_payment: int
    debt: float
    is_active: bool
    payments: List[PaymentSchema] = []


class InitialPayment(BaseModel):
    amount: float = Field(..., gt=0)
    method: PaymentMethod


class ClientCreateRequest(BaseModel):
    """Request body for POST /v1/clients"""

    name: str = Field(..., min_length=1)
    bi: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    tap: str = Field(..., min_length=1)
    contract_date: Optional[datetime] = None
    initial_payment: Optional[InitialPayment] = None


class ClientUpdateRequest(BaseModel):
    """Request body for PATCH /v1/clients/{id}; omitted fields stay unchanged"""

    name: Optional[str] = None
    bi: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    tap: Optional[str] = None
    contract_date: Optional[datetime] = None
    has_signal: Optional[bool] = None
    months_without_payment: Optional[int] = Field(None, ge=0)
    debt: Optional[float] = Field(None, ge=0)


class PaymentRequest(BaseModel):
    """Request body for POST /v1/clients/{id}/payments"""

    amount: float = Field(..., gt=0, description="Amount paid in Kz")
    method: PaymentMethod


class PaymentResponse(BaseModel):
    """Payment plus the ledger entry created for it"""

    payment: PaymentSchema
    transaction_id: str
    client: ClientSchema


class QuoteResponse(BaseModel):
    """Response for GET /v1/clients/{id}/quote"""

    amount: float
    has_late_fee: bool
    reference_month: str


# --- Transactions / reports ---


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: TransactionType
    category: TransactionCategory
    description: str
    amount: float
    date: datetime
    method: Optional[PaymentMethod] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    manager_name: Optional[str] = None


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    type: TransactionType
    category: TransactionCategory
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    method: Optional[PaymentMethod] = None
    date: Optional[datetime] = None


class ReportBreakdownSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cash_total: float
    cash_count: int
    transfer_total: float
    transfer_count: int
    expenses_by_category: Dict[str, float]


class DailyReportResponse(BaseModel):
    """Response for GET /v1/reports/daily"""

    date: datetime
    total_entradas: float
    total_saidas: float
    balance: float
    transactions: List[TransactionSchema]
    breakdown: ReportBreakdownSchema
    manager_name: Optional[str] = None


class SummaryResponse(BaseModel):
    """Response for GET /v1/reports/summary"""

    total_clients: int
    active_clients: int
    inactive_clients: int
    total_entradas: float
    total_saidas: float
    balance: float
    today_entradas: float
    today_saidas: float


class RestoreResponse(BaseModel):
    """Response for POST /v1/backup"""

    managers: int
    clients: int
    transactions: int
