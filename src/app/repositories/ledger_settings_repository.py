"""Ledger Settings Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.ledger_settings import LedgerSettings


class LedgerSettingsRepository(ABC):

    @abstractmethod
    async def get(self) -> Optional[LedgerSettings]:
        """
        Retrieve the global settings row

        Returns:
            LedgerSettings if initialized, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, settings: LedgerSettings) -> LedgerSettings:
        """
        Insert or update the global settings row

        Args:
            settings: Settings to persist

        Returns:
            Persisted settings
        """
        pass

    @abstractmethod
    async def delete_all(self) -> None:
        """Delete the settings row (backup restore)"""
        pass
