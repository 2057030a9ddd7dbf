"""GET /v1/reports/* - daily cash report and dashboard summary"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from gestornet.api.v1.schemas import (
    DailyReportResponse,
    ReportBreakdownSchema,
    SummaryResponse,
    TransactionSchema,
)
from gestornet.api.dependencies import Services, require_manager, require_setup
from gestornet.domain.models import Manager
from gestornet.domain.reporting import summarize_daily_report
from gestornet.utils.date_utils import now

router = APIRouter()


@router.get("/reports/daily", response_model=DailyReportResponse)
def get_daily_report(
    day: Optional[date] = Query(None, description="Calendar day (YYYY-MM-DD); defaults to today"),
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """
    Report for one day.

    Returns:
        Totals, the day's transactions, the cash/transfer split of income and
        expenses per category
    """
    report = services.ledger.report_for_day(day or now())
    return DailyReportResponse(
        date=report.date,
        total_entradas=report.total_entradas,
        total_saidas=report.total_saidas,
        balance=report.balance,
        transactions=[TransactionSchema.model_validate(t) for t in report.transactions],
        breakdown=ReportBreakdownSchema.model_validate(summarize_daily_report(report)),
        manager_name=manager.name,
    )


@router.get("/reports/summary", response_model=SummaryResponse)
def get_summary(
    manager: Manager = Depends(require_manager),
    services: Services = Depends(require_setup),
):
    """Dashboard counters: client activity plus all-time and today's totals"""
    registry = services.registry
    totals = services.ledger.totals()
    today = services.ledger.today_report()
    return SummaryResponse(
        total_clients=len(registry.clients),
        active_clients=len(registry.active_clients),
        inactive_clients=len(registry.inactive_clients),
        total_entradas=totals.total_entradas,
        total_saidas=totals.total_saidas,
        balance=totals.balance,
        today_entradas=today.total_entradas,
        today_saidas=today.total_saidas,
    )
