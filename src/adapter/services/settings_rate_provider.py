"""Farm rate read from the persisted ledger settings"""

from decimal import Decimal
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.app.services.rate_provider import RateProvider


class SettingsRateProvider(RateProvider):
    """
    Reads farm_rate from the settings row, falling back to the configured
    default when settings were never initialized
    """

    def __init__(self, settings_repo: LedgerSettingsRepository, default_farm_rate: Decimal):
        self.settings_repo = settings_repo
        self.default_farm_rate = Decimal(default_farm_rate)

    async def get_farm_rate(self) -> Decimal:
        settings = await self.settings_repo.get()
        if settings is None:
            return self.default_farm_rate
        return settings.farm_rate
