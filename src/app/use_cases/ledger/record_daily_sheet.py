"""RecordDailySheet Use Case

Saves a whole day's sheet: one (quantity, payment) pair per customer.
Each customer is reconciled and replayed in its own unit of work, so a
failure for one customer never rolls back the others.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.rate_provider import RateProvider, FixedRateProvider
from src.app.services.ledger_engine import LedgerEngine, LedgerEntryError
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.ledger_settings import LedgerSettings
from .dtos import (
    RecordDailySheetCommandDTO,
    DailySheetEntryDTO,
    DailySheetResultDTO,
    DailySheetCustomerResultDTO,
)

logger = logging.getLogger(__name__)


class RecordDailySheet:
    """
    Use Case: Save daily sheet

    Business Rules:
    1. A farm_rate on the sheet becomes the new global farm rate (committed first)
    2. Effective rate per customer = farm rate + customer.supply_rate
    3. Each listed customer: reconcile the day, replay, commit
    4. Unchanged customers cause zero writes
    5. Customers not listed on the sheet are left untouched
    6. Per-customer failures are reported and processing continues
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
        settings_repo: LedgerSettingsRepository,
        rate_provider: RateProvider,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.settings_repo = settings_repo
        self.rate_provider = rate_provider
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, command: RecordDailySheetCommandDTO) -> Result[DailySheetResultDTO]:
        try:
            if command.farm_rate is not None:
                farm_rate = await self._save_farm_rate(command.farm_rate)
            else:
                farm_rate = await self.rate_provider.get_farm_rate()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RECORD_DAILY_SHEET_FAILED",
                    message="Failed to resolve farm rate",
                    reason=str(e),
                )
            )

        # One farm rate prices the whole sheet
        sheet_rates = FixedRateProvider(farm_rate)
        results = []
        for entry in command.entries:
            results.append(await self._record_entry(command, entry, sheet_rates))

        summary = DailySheetResultDTO(
            day=command.day,
            farm_rate=farm_rate,
            customers_updated=sum(1 for r in results if r.status == "updated"),
            customers_unchanged=sum(1 for r in results if r.status == "unchanged"),
            customers_failed=sum(1 for r in results if r.status == "failed"),
            results=results,
        )
        logger.info(
            f"Daily sheet {command.day}: updated={summary.customers_updated} "
            f"unchanged={summary.customers_unchanged} failed={summary.customers_failed}"
        )
        return Return.ok(summary)

    async def _save_farm_rate(self, farm_rate: Decimal) -> Decimal:
        settings = await self.settings_repo.get()
        if settings is None:
            settings = LedgerSettings(farm_rate=farm_rate)
        elif settings.farm_rate == farm_rate:
            return farm_rate
        else:
            settings.farm_rate = farm_rate
        await self.settings_repo.save(settings)
        await self.uow.commit()
        logger.info(f"Farm rate set to {farm_rate}")
        return farm_rate

    async def _record_entry(
        self,
        command: RecordDailySheetCommandDTO,
        entry: DailySheetEntryDTO,
        sheet_rates: RateProvider,
    ) -> DailySheetCustomerResultDTO:
        try:
            # Fetched per entry: a rollback for an earlier customer expires loaded rows
            customer = await self.customer_repo.get_by_id(entry.customer_id, for_update=True)
            if not customer:
                return DailySheetCustomerResultDTO(
                    customer_id=entry.customer_id,
                    status="failed",
                    error_code="CUSTOMER_NOT_FOUND",
                    reason=f"Customer {entry.customer_id} not found",
                )

            rate = await sheet_rates.effective_rate(customer)
            reconciliation = await self.engine.reconcile_day(
                customer, command.day, entry.quantity, entry.payment, rate
            )
            if not reconciliation.changed:
                return DailySheetCustomerResultDTO(
                    customer_id=customer.id,
                    status="unchanged",
                    current_balance=customer.current_balance,
                )

            await self.uow.commit()
            return DailySheetCustomerResultDTO(
                customer_id=customer.id,
                status="updated",
                current_balance=reconciliation.replay.outcome.current_balance,
            )

        except LedgerEntryError as e:
            await self.uow.rollback()
            return DailySheetCustomerResultDTO(
                customer_id=entry.customer_id,
                status="failed",
                error_code=e.code,
                reason=e.message,
            )
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Daily sheet {command.day}: customer {entry.customer_id} failed: {e}")
            return DailySheetCustomerResultDTO(
                customer_id=entry.customer_id,
                status="failed",
                error_code="RECONCILE_FAILED",
                reason=str(e),
            )
