"""Ledger API Routes

Daily sheet, single supply/payment entries, deletes and reconciliation.
Every write reconciles the affected customer/day and replays the
customer's ledger before the response is returned.
"""

from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.ledger_request import ReconcileRequestSchema
from src.app.use_cases.ledger.dtos import (
    RecordDailySheetCommandDTO,
    DailySheetResultDTO,
    DailySheetDTO,
    RecordSupplyCommandDTO,
    RecordPaymentCommandDTO,
    EntryResultDTO,
    DeleteTransactionResponseDTO,
    ReconciliationResultDTO,
)
from src.app.use_cases.ledger import (
    RecordDailySheet,
    GetDailySheet,
    RecordSupply,
    RecordPayment,
    DeleteTransaction,
    ReconcileLedgers,
)
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerTransactionRepository,
    SqlAlchemyLedgerSettingsRepository,
)
from src.adapter.services import SqlAlchemyUnitOfWork, SettingsRateProvider
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/ledger", tags=["Ledger"])


def _rate_provider(settings_repo: SqlAlchemyLedgerSettingsRepository) -> SettingsRateProvider:
    return SettingsRateProvider(settings_repo, ApplicationConfig.DEFAULT_FARM_RATE)


@router.get("/daily-sheet", response_model=DailySheetDTO)
async def get_daily_sheet(
    day: date = Query(..., description="Sheet day (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session)
):
    """Every customer's stored quantity and payment for a day, ready for editing."""
    settings_repo = SqlAlchemyLedgerSettingsRepository(session)
    use_case = GetDailySheet(
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
        _rate_provider(settings_repo),
    )
    result = await use_case.execute(day)
    return result.value


@router.post("/daily-sheet", response_model=DailySheetResultDTO)
async def record_daily_sheet(
    request: RecordDailySheetCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """
    Save a day's sheet.

    **Request body:**
    - `day` (required): sheet day
    - `farm_rate` (optional): becomes the global farm rate
    - `entries`: `{customer_id, quantity, payment}` per customer; 0 means none

    Each customer is saved independently. Failures for one customer are
    reported in `results` and do not undo the others.
    """
    settings_repo = SqlAlchemyLedgerSettingsRepository(session)
    use_case = RecordDailySheet(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
        settings_repo,
        _rate_provider(settings_repo),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/supplies", response_model=EntryResultDTO)
async def record_supply(
    request: RecordSupplyCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """Set one customer's supply quantity for a day (0 removes it)."""
    use_case = RecordSupply(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
        _rate_provider(SqlAlchemyLedgerSettingsRepository(session)),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/payments", response_model=EntryResultDTO)
async def record_payment(
    request: RecordPaymentCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """Set one customer's payment for a day (0 removes it)."""
    use_case = RecordPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete("/transactions/{transaction_id}", response_model=DeleteTransactionResponseDTO)
async def delete_transaction(transaction_id: int, session: AsyncSession = Depends(get_session)):
    use_case = DeleteTransaction(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(transaction_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/reconcile", response_model=ReconciliationResultDTO, status_code=status.HTTP_200_OK)
async def reconcile_ledgers(
    request: ReconcileRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Compare every customer's cached balances with a fresh replay.

    With `repair: true` inconsistent customers are rewritten.
    """
    use_case = ReconcileLedgers(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(repair=request.repair)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
