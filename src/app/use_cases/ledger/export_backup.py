"""ExportBackup Use Case

Full snapshot of customers, transactions and settings for offline keeping.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.base import utc_now
from src.domain.ledger_settings import LedgerSettings
from .dtos import (
    BackupDocumentDTO,
    BackupCustomerDTO,
    BackupTransactionDTO,
    BackupSettingsDTO,
)

logger = logging.getLogger(__name__)


class ExportBackup:
    """
    Use Case: Export backup

    Records the export time as settings.last_backup (settings are initialized
    with the default farm rate if they were never saved).
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
        settings_repo: LedgerSettingsRepository,
        default_farm_rate: Decimal,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.settings_repo = settings_repo
        self.default_farm_rate = Decimal(default_farm_rate)

    async def execute(self) -> Result[BackupDocumentDTO]:
        try:
            timestamp = utc_now()

            settings = await self.settings_repo.get()
            if settings is None:
                settings = LedgerSettings(farm_rate=self.default_farm_rate)
            settings.last_backup = timestamp
            settings = await self.settings_repo.save(settings)

            customers = await self.customer_repo.get_all()
            transactions = await self.transaction_repo.get_all()
            await self.uow.commit()

            logger.info(f"Exported backup: {len(customers)} customers, {len(transactions)} transactions")
            return Return.ok(
                BackupDocumentDTO(
                    customers=[BackupCustomerDTO.from_entity(c) for c in customers],
                    transactions=[BackupTransactionDTO.from_entity(t) for t in transactions],
                    settings=[BackupSettingsDTO.from_entity(settings)],
                    timestamp=timestamp,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="EXPORT_BACKUP_FAILED",
                    message="Failed to export backup",
                    reason=str(e),
                )
            )
