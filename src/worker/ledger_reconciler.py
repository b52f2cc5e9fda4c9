"""Ledger Reconciliation Background Worker

Periodically replays every customer's ledger in memory and reports (or
repairs) cached balances that no longer match the transaction history.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional
from config import ApplicationConfig
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.repositories.ledger_transaction_repository import SqlAlchemyLedgerTransactionRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_engine, build_session_factory
from src.app.use_cases.ledger import ReconcileLedgers
from src.app.use_cases.ledger.dtos import ReconciliationResultDTO
from src.domain.base import utc_now

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker:
    """
    Background worker for customer ledger reconciliation

    Features:
    - Compares every balance_after and customer summary with a fresh replay
    - Logs discrepancies for investigation
    - Optionally repairs inconsistent customers
    - Can run once or continuously

    Usage:
        # Run once
        worker = LedgerReconcilerWorker()
        result = await worker.run_once()

        # Run continuously, repairing drift
        worker = LedgerReconcilerWorker(repair=True)
        await worker.run_forever(interval_seconds=86400)  # Daily
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        repair: Optional[bool] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            repair: Rewrite inconsistent ledgers (defaults to ApplicationConfig.RECONCILIATION_AUTO_REPAIR)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.repair = ApplicationConfig.RECONCILIATION_AUTO_REPAIR if repair is None else repair

        self.engine = build_engine(self.db_uri)
        self.async_session_factory = build_session_factory(self.engine)

        logger.info(f"LedgerReconcilerWorker initialized (repair={self.repair})")

    async def run_once(self) -> ReconciliationResultDTO:
        """
        Run reconciliation once

        Returns:
            ReconciliationResultDTO with reconciliation results
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_customers_checked=0,
                customers_inconsistent=0,
                discrepancies_found=0,
                discrepancies=[],
                customers_repaired=0,
                reconciliation_time=utc_now(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedgers(
                uow=SqlAlchemyUnitOfWork(session),
                customer_repo=SqlAlchemyCustomerRepository(session),
                transaction_repo=SqlAlchemyLedgerTransactionRepository(session),
            )

            result = await use_case.execute(repair=self.repair)

            if result.is_err():
                logger.error(f"Reconciliation failed: {result.error.message}")
                raise RuntimeError(f"Reconciliation failed: {result.error.message}")

            response = result.value

            if response.discrepancies_found > 0:
                logger.error(
                    f"ALERT: {response.discrepancies_found} ledger discrepancies found "
                    f"across {response.customers_inconsistent} customers"
                )
                for d in response.discrepancies:
                    logger.error(
                        f"  - Customer {d.customer_id} {d.field}"
                        f"{f' (transaction {d.transaction_id})' if d.transaction_id else ''}: "
                        f"stored={d.stored}, expected={d.expected}"
                    )

            return response

    async def run_forever(self, interval_seconds: int = 86400):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between reconciliation runs (default: 24 hours)
        """
        logger.info(
            f"Starting continuous ledger reconciliation with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_customers_checked} customers, "
                    f"found {result.discrepancies_found} discrepancies, "
                    f"repaired {result.customers_repaired} "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("LedgerReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once, report only
        python -m src.worker.ledger_reconciler --once

        # Run once and repair inconsistent ledgers
        python -m src.worker.ledger_reconciler --once --repair

        # Run continuously with custom interval (in seconds)
        python -m src.worker.ledger_reconciler --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Customer Ledger Reconciliation Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--repair", action="store_true", default=None,
        help="Rewrite inconsistent ledgers (default: RECONCILIATION_AUTO_REPAIR)"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: RECONCILIATION_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = LedgerReconcilerWorker(repair=args.repair)

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Customers checked: {result.total_customers_checked}")
            print(f"  Inconsistent customers: {result.customers_inconsistent}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Customers repaired: {result.customers_repaired}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            if result.discrepancies:
                print("\nDiscrepancies:")
                for d in result.discrepancies:
                    print(
                        f"  - Customer {d.customer_id} {d.field}: "
                        f"stored={d.stored}, expected={d.expected}"
                    )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
