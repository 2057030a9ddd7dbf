"""Daily report aggregation over ledger transactions"""

from collections import defaultdict
from datetime import date, datetime
from typing import Iterable, List, Union
from gestornet.domain.models import DailyReport, LedgerTotals, ReportBreakdown, Transaction
from gestornet.utils.date_utils import is_same_day, start_of_day


def compute_totals(transactions: Iterable[Transaction]) -> LedgerTotals:
    """Sum income (entrada) and expenses (saida); balance = income - expenses"""
    transactions = list(transactions)
    total_entradas = sum(t.amount for t in transactions if t.type == "entrada")
    total_saidas = sum(t.amount for t in transactions if t.type == "saida")
    return LedgerTotals(
        total_entradas=total_entradas,
        total_saidas=total_saidas,
        balance=total_entradas - total_saidas,
    )


def build_daily_report(transactions: Iterable[Transaction], day: Union[date, datetime]) -> DailyReport:
    """
    Aggregate the transactions that fall on the given local calendar day.

    Transactions on other days are ignored; the report keeps the matching
    entries in their original order.
    """
    day_transactions: List[Transaction] = [t for t in transactions if is_same_day(t.date, day)]
    totals = compute_totals(day_transactions)

    return DailyReport(
        date=start_of_day(day),
        total_entradas=totals.total_entradas,
        total_saidas=totals.total_saidas,
        balance=totals.balance,
        transactions=day_transactions,
    )


def summarize_daily_report(report: DailyReport) -> ReportBreakdown:
    """Split a report's income by payment method and its expenses by category"""
    entradas = [t for t in report.transactions if t.type == "entrada"]
    saidas = [t for t in report.transactions if t.type == "saida"]

    cash = [t for t in entradas if t.method == "cash"]
    transfer = [t for t in entradas if t.method == "transfer"]

    expenses_by_category = defaultdict(float)
    for t in saidas:
        expenses_by_category[t.category] += t.amount

    return ReportBreakdown(
        cash_total=sum(t.amount for t in cash),
        cash_count=len(cash),
        transfer_total=sum(t.amount for t in transfer),
        transfer_count=len(transfer),
        expenses_by_category=dict(expenses_by_category),
    )
