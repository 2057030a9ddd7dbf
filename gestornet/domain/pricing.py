"""Subscription pricing - monthly fee, first-month half fee and late fee"""

from datetime import date, datetime
from typing import Union
from gestornet.domain.models import Client, PaymentQuote
from gestornet.utils.date_utils import DateLike, parse_month

# Fixed policy (amounts in Kz)
PAYMENT_CONFIG = {
    "MONTHLY_FEE": 3500,
    "LATE_FEE": 500,
    "HALF_MONTH_FEE": 1750,
    "DUE_DAY": 15,
    "INACTIVE_MONTHS_THRESHOLD": 3,
}

MONTHLY_FEE = PAYMENT_CONFIG["MONTHLY_FEE"]
LATE_FEE = PAYMENT_CONFIG["LATE_FEE"]
HALF_MONTH_FEE = PAYMENT_CONFIG["HALF_MONTH_FEE"]
DUE_DAY = PAYMENT_CONFIG["DUE_DAY"]
INACTIVE_MONTHS_THRESHOLD = PAYMENT_CONFIG["INACTIVE_MONTHS_THRESHOLD"]

# Contracts signed within this day window pay half for their first month
HALF_FEE_CONTRACT_DAYS = range(15, 26)


def is_month_after(contract_date: Union[date, datetime], reference_month: date) -> bool:
    """True when reference_month is the calendar month right after the contract month"""
    if contract_date.month == 12:
        return reference_month.month == 1
    return reference_month.month == contract_date.month + 1


def calculate_payment_amount(
    contract_date: Union[date, datetime],
    payment_date: Union[date, datetime],
    reference_month: DateLike,
) -> PaymentQuote:
    """
    Price one monthly payment.

    Rules:
    - First month after the contract month, contract day in [15, 25]: half fee (1750)
    - Otherwise: full monthly fee (3500)
    - Paying after the due day (15th) adds the late fee (500)

    Example:
        contract 2024-01-20, paid 2024-02-10 for 2024-02 → 1750, no late fee
        contract 2024-01-05, paid 2024-02-20 for 2024-02 → 3500 + 500 = 4000
    """
    reference = parse_month(reference_month)

    first_month = is_month_after(contract_date, reference)
    is_half_payment = first_month and contract_date.day in HALF_FEE_CONTRACT_DAYS

    base_amount = HALF_MONTH_FEE if is_half_payment else MONTHLY_FEE
    has_late_fee = payment_date.day > DUE_DAY

    return PaymentQuote(
        amount=base_amount + LATE_FEE if has_late_fee else base_amount,
        has_late_fee=has_late_fee,
    )


def quote_for_client(client: Client, payment_date: Union[date, datetime]) -> PaymentQuote:
    """Price the payment a client owes for the month of payment_date"""
    return calculate_payment_amount(client.contract_date, payment_date, payment_date)
