"""Report API Routes"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.use_cases.ledger.dtos import PeriodReportDTO, DashboardDTO
from src.app.use_cases.ledger import GetPeriodReport, GetDashboard
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerTransactionRepository,
)
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/period", response_model=PeriodReportDTO)
async def get_period_report(
    start_day: date = Query(..., description="First day (inclusive)"),
    end_day: date = Query(..., description="Last day (inclusive)"),
    session: AsyncSession = Depends(get_session)
):
    """Supplied quantity, billed and paid totals for all customers over a day range."""
    use_case = GetPeriodReport(SqlAlchemyLedgerTransactionRepository(session))
    result = await use_case.execute(start_day, end_day)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/dashboard", response_model=DashboardDTO)
async def get_dashboard(
    day: Optional[date] = Query(default=None, description="Reference day (defaults to today)"),
    session: AsyncSession = Depends(get_session)
):
    use_case = GetDashboard(
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(today=day)
    return result.value
