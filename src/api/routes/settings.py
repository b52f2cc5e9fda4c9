"""Settings API Routes"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.app.use_cases.ledger.dtos import SettingsDTO, UpdateSettingsCommandDTO
from src.app.use_cases.ledger import GetSettings, UpdateSettings
from src.adapter.repositories import SqlAlchemyLedgerSettingsRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsDTO)
async def get_settings(session: AsyncSession = Depends(get_session)):
    use_case = GetSettings(
        SqlAlchemyLedgerSettingsRepository(session),
        ApplicationConfig.DEFAULT_FARM_RATE,
    )
    result = await use_case.execute()
    return result.value


@router.put("", response_model=SettingsDTO)
async def update_settings(
    request: UpdateSettingsCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """
    Update the global farm rate and/or the default supply rate.

    Stored supplies keep their recorded rate; the new farm rate applies to
    entries reconciled from now on.
    """
    use_case = UpdateSettings(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyLedgerSettingsRepository(session),
        ApplicationConfig.DEFAULT_FARM_RATE,
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
