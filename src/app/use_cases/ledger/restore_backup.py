"""RestoreBackup Use Case

Replaces all data with a backup document. Cached balances in the document
are never trusted: every restored customer is replayed before commit.
"""

import logging
from collections import Counter
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_engine import LedgerEngine
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.base import as_naive_utc
from src.domain.ledger_settings import LedgerSettings
from .dtos import BackupDocumentDTO, RestoreResultDTO

logger = logging.getLogger(__name__)


def _validate(document: BackupDocumentDTO) -> Optional[str]:
    duplicate_customers = [i for i, n in Counter(c.id for c in document.customers).items() if n > 1]
    if duplicate_customers:
        return f"Duplicate customer ids: {sorted(duplicate_customers)}"

    phones = [p for p, n in Counter(c.phone for c in document.customers).items() if n > 1]
    if phones:
        return f"Duplicate phone numbers: {sorted(phones)}"

    duplicate_transactions = [i for i, n in Counter(t.id for t in document.transactions).items() if n > 1]
    if duplicate_transactions:
        return f"Duplicate transaction ids: {sorted(duplicate_transactions)}"

    known = {c.id for c in document.customers}
    orphans = sorted({t.customer_id for t in document.transactions if t.customer_id not in known})
    if orphans:
        return f"Transactions reference unknown customers: {orphans}"

    return None


class RestoreBackup:
    """
    Use Case: Restore backup

    Business Rules:
    1. Document is validated before anything is deleted
    2. Existing transactions, customers and settings are cleared
    3. Rows are inserted with their original ids
    4. Every customer is replayed so derived values agree with the history
    5. All of it lands in one commit (or none of it)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
        settings_repo: LedgerSettingsRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.settings_repo = settings_repo
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, document: BackupDocumentDTO) -> Result[RestoreResultDTO]:
        problem = _validate(document)
        if problem:
            return Return.err(
                Error(
                    code="INVALID_BACKUP",
                    message="Backup document is inconsistent",
                    reason=problem,
                )
            )

        try:
            await self.transaction_repo.delete_all()
            await self.customer_repo.delete_all()
            await self.settings_repo.delete_all()

            customers = [c.to_entity() for c in document.customers]
            await self.customer_repo.bulk_insert(customers)
            await self.transaction_repo.bulk_insert([t.to_entity() for t in document.transactions])

            if document.settings:
                imported = document.settings[0]
                await self.settings_repo.save(
                    LedgerSettings(
                        farm_rate=imported.farm_rate,
                        default_supply_rate=imported.default_supply_rate,
                        last_backup=as_naive_utc(imported.last_backup),
                    )
                )

            corrected = 0
            for customer in customers:
                replay = await self.engine.replay(customer)
                corrected += replay.transactions_rewritten + len(replay.customer_fields_rewritten)

            await self.uow.commit()

            if corrected:
                logger.warning(f"Backup restore corrected {corrected} stale derived values")
            logger.info(
                f"Restored backup: {len(customers)} customers, "
                f"{len(document.transactions)} transactions"
            )
            return Return.ok(
                RestoreResultDTO(
                    customers_restored=len(customers),
                    transactions_restored=len(document.transactions),
                    customers_replayed=len(customers),
                    balances_corrected=corrected,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RESTORE_BACKUP_FAILED",
                    message="Failed to restore backup",
                    reason=str(e),
                )
            )
