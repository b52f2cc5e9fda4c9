"""ReconcileLedgers Use Case

Checks every customer's cached balances and summary against a fresh replay
of its history, optionally repairing the customers that drifted.
"""

import logging
import time
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_engine import LedgerEngine
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.base import utc_now
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


def _as_text(value):
    return None if value is None else str(value)


class ReconcileLedgers:
    """
    Use Case: Reconcile customer ledgers

    Business Rules:
    1. Every customer is replayed in memory and compared field by field
       (each balance_after, current_balance, total_supplied, total_paid,
       last_supply_date)
    2. Without repair nothing is written
    3. With repair each inconsistent customer is replayed and committed on
       its own; a failed repair is logged and the run continues

    Flow:
    1. Get all customer ids
    2. For each customer:
       a. Verify against a fresh replay
       b. Record discrepancies
       c. If repairing, replay and commit
    3. Return reconciliation result
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, repair: bool = False) -> Result[ReconciliationResultDTO]:
        """
        Execute ledger reconciliation

        Args:
            repair: Rewrite derived values of inconsistent customers

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = utc_now()

        try:
            logger.info(f"Starting customer ledger reconciliation (repair={repair})")

            customer_ids = [c.id for c in await self.customer_repo.get_all()]
            discrepancies: list[LedgerDiscrepancyDTO] = []
            inconsistent = 0
            repaired = 0

            for customer_id in customer_ids:
                customer = await self.customer_repo.get_by_id(customer_id, for_update=repair)
                if customer is None:
                    continue

                found = await self.engine.verify(customer)
                if not found:
                    continue

                inconsistent += 1
                discrepancies.extend(
                    LedgerDiscrepancyDTO(
                        customer_id=d.customer_id,
                        field=d.field,
                        transaction_id=d.transaction_id,
                        stored=_as_text(d.stored),
                        expected=_as_text(d.expected),
                    )
                    for d in found
                )

                if repair:
                    try:
                        await self.engine.replay(customer)
                        await self.uow.commit()
                        repaired += 1
                        logger.info(f"Repaired ledger of customer {customer_id}")
                    except Exception as e:
                        await self.uow.rollback()
                        logger.error(f"Failed to repair ledger of customer {customer_id}: {e}")

            execution_time_ms = int((time.time() - start_time) * 1000)

            response = ReconciliationResultDTO(
                total_customers_checked=len(customer_ids),
                customers_inconsistent=inconsistent,
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                customers_repaired=repaired,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"across {inconsistent} of {len(customer_ids)} customers, "
                    f"repaired {repaired} in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(customer_ids)} ledgers consistent "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile customer ledgers",
                    reason=str(e),
                )
            )
