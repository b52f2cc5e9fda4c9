"""Unit tests for ReconcileLedgers use case

Tests cover:
- Consistent ledgers (no discrepancies, no writes)
- Discrepancy detection without repair
- Repair mode rewrites and commits per customer
- Error handling
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.ledger_engine import LedgerEngine
from src.app.use_cases.ledger.reconcile_ledgers import ReconcileLedgers

RATE = Decimal("160")


@pytest.fixture
def reconcile_use_case(mock_uow, store):
    return ReconcileLedgers(
        uow=mock_uow,
        customer_repo=store.customers,
        transaction_repo=store.transactions,
    )


async def seed(store, phone="03001234567"):
    customer = await store.add_customer(phone=phone)
    engine = LedgerEngine(store.customers, store.transactions)
    await engine.reconcile_day(customer, date(2024, 1, 1), Decimal("10"), Decimal("600"), RATE)
    store.writes.reset()
    return customer


@pytest.mark.asyncio
class TestReconcileLedgers:

    async def test_no_discrepancy_when_ledgers_consistent(self, reconcile_use_case, store):
        """
        Given: Every cached value matches a replay
        When: Reconciliation runs
        Then: No discrepancy is reported and nothing is written
        """
        # Arrange
        await seed(store, "03000000001")
        await seed(store, "03000000002")

        # Act
        result = await reconcile_use_case.execute()

        # Assert
        assert result.is_ok()
        assert result.value.total_customers_checked == 2
        assert result.value.discrepancies_found == 0
        assert result.value.customers_inconsistent == 0
        assert store.writes.total == 0

    async def test_detects_stale_values_without_repair(self, reconcile_use_case, store, mock_uow):
        """
        Given: A corrupted balance_after and current_balance
        When: Reconciliation runs without repair
        Then: Both are reported and left as they are
        """
        # Arrange
        customer = await seed(store)
        txn = (await store.transactions.find_all_by_customer(customer.id))[0]
        txn.balance_after = Decimal("7")
        customer.current_balance = Decimal("7")

        # Act
        result = await reconcile_use_case.execute()

        # Assert
        response = result.value
        assert response.customers_inconsistent == 1
        assert response.discrepancies_found == 2
        assert response.customers_repaired == 0
        fields = {d.field for d in response.discrepancies}
        assert fields == {"balance_after", "current_balance"}
        current = next(d for d in response.discrepancies if d.field == "current_balance")
        assert current.stored == "7"
        assert current.expected == "1000.00"
        assert customer.current_balance == Decimal("7")
        mock_uow.commit.assert_not_awaited()

    async def test_repair_rewrites_inconsistent_customers(self, reconcile_use_case, store, mock_uow):
        healthy = await seed(store, "03000000001")
        broken = await seed(store, "03000000002")
        broken.total_paid = Decimal("0")

        result = await reconcile_use_case.execute(repair=True)

        assert result.value.customers_repaired == 1
        assert broken.total_paid == Decimal("600")
        assert healthy.total_paid == Decimal("600")
        mock_uow.commit.assert_awaited_once()

        second = await reconcile_use_case.execute()
        assert second.value.discrepancies_found == 0

    async def test_failed_repair_is_logged_and_run_continues(self, mock_uow, store):
        broken = await seed(store)
        broken.total_paid = Decimal("0")
        mock_uow.commit = AsyncMock(side_effect=RuntimeError("locked"))
        use_case = ReconcileLedgers(mock_uow, store.customers, store.transactions)

        result = await use_case.execute(repair=True)

        assert result.is_ok()
        assert result.value.customers_repaired == 0
        assert result.value.customers_inconsistent == 1
        mock_uow.rollback.assert_awaited_once()

    async def test_returns_error_when_store_fails(self, mock_uow):
        customer_repo = MagicMock()
        customer_repo.get_all = AsyncMock(side_effect=Exception("Database connection error"))
        use_case = ReconcileLedgers(mock_uow, customer_repo, MagicMock())

        result = await use_case.execute()

        assert result.is_err()
        assert result.error.code == "RECONCILIATION_FAILED"
        assert "Database connection error" in result.error.reason
