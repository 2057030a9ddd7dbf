"""Prometheus metrics for payments, ledger activity, logins and persistence health"""

from prometheus_client import Counter, Histogram

# Billing metrics
payment_counter = Counter(
    "gestornet_payments_total",
    "Client payments recorded",
    ["method"],  # cash | transfer
)

payment_amount_counter = Counter(
    "gestornet_payment_amount_total",
    "Sum of client payment amounts (Kz)",
    ["method"],
)

# Ledger metrics
transaction_counter = Counter(
    "gestornet_transactions_total",
    "Ledger transactions recorded",
    ["type"],  # entrada | saida
)

# Auth metrics
login_counter = Counter(
    "gestornet_login_attempts_total",
    "Manager login attempts",
    ["outcome"],  # success | failure
)

# Persistence metrics
persistence_failure_counter = Counter(
    "gestornet_persistence_failures_total",
    "Failed write-through operations",
    ["collection"],
)

backup_counter = Counter(
    "gestornet_backup_total",
    "Backup exports and restores",
    ["operation", "outcome"],  # export|restore, success|failure
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(method: str, amount: float) -> None:
    """Record payment metrics by method"""
    payment_counter.labels(method=method).inc()
    payment_amount_counter.labels(method=method).inc(amount)
