"""Backup API Routes"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.app.use_cases.ledger.dtos import BackupDocumentDTO, RestoreResultDTO
from src.app.use_cases.ledger import ExportBackup, RestoreBackup
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerTransactionRepository,
    SqlAlchemyLedgerSettingsRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/backup", tags=["Backup"])


@router.get("/export", response_model=BackupDocumentDTO, response_model_by_alias=False)
async def export_backup(session: AsyncSession = Depends(get_session)):
    """Full snapshot of customers, transactions and settings (snake_case)."""
    use_case = ExportBackup(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
        SqlAlchemyLedgerSettingsRepository(session),
        ApplicationConfig.DEFAULT_FARM_RATE,
    )
    result = await use_case.execute()

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/restore", response_model=RestoreResultDTO)
async def restore_backup(
    request: BackupDocumentDTO,
    session: AsyncSession = Depends(get_session)
):
    """
    Replace all data with a backup document.

    Accepts the export format or the camelCase layout of the browser app
    (`customerId`, `date`, `type`, ...). Stored balances in the document are
    recomputed before commit.
    """
    use_case = RestoreBackup(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
        SqlAlchemyLedgerSettingsRepository(session),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
