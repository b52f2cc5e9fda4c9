"""UpdateSettings Use Case

Changing the farm rate affects future day reconciliations only; stored
supplies keep the rate they were recorded with.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.ledger_settings import LedgerSettings
from .dtos import UpdateSettingsCommandDTO, SettingsDTO

logger = logging.getLogger(__name__)


class UpdateSettings:

    def __init__(
        self,
        uow: UnitOfWork,
        settings_repo: LedgerSettingsRepository,
        default_farm_rate: Decimal,
    ):
        self.uow = uow
        self.settings_repo = settings_repo
        self.default_farm_rate = Decimal(default_farm_rate)

    async def execute(self, command: UpdateSettingsCommandDTO) -> Result[SettingsDTO]:
        try:
            settings = await self.settings_repo.get()
            if settings is None:
                settings = LedgerSettings(farm_rate=self.default_farm_rate)

            if command.farm_rate is not None:
                settings.farm_rate = command.farm_rate
            if command.default_supply_rate is not None:
                settings.default_supply_rate = command.default_supply_rate

            settings = await self.settings_repo.save(settings)
            await self.uow.commit()
            logger.info(
                f"Settings updated: farm_rate={settings.farm_rate} "
                f"default_supply_rate={settings.default_supply_rate}"
            )

            return Return.ok(
                SettingsDTO(
                    farm_rate=settings.farm_rate,
                    default_supply_rate=settings.default_supply_rate,
                    last_backup=settings.last_backup,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_SETTINGS_FAILED",
                    message="Failed to update settings",
                    reason=str(e),
                )
            )
