"""Unit tests for ExportBackup and RestoreBackup use cases"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.ledger_engine import LedgerEngine
from src.app.use_cases.ledger.export_backup import ExportBackup
from src.app.use_cases.ledger.restore_backup import RestoreBackup
from src.app.use_cases.ledger.dtos import BackupDocumentDTO
from src.domain.ledger_settings import LedgerSettings
from src.domain.ledger_transaction import TransactionKind


@pytest.fixture
def mock_settings_repo():
    repo = MagicMock()
    repo.get = AsyncMock(return_value=None)
    repo.save = AsyncMock(side_effect=lambda s: s)
    repo.delete_all = AsyncMock()
    return repo


def browser_backup(**overrides):
    """Backup document in the camelCase layout written by the browser app"""
    document = {
        "customers": [
            {
                "id": 3,
                "name": "Bismillah Chicken Shop",
                "phone": "03001234567",
                "supplyRate": 10,
                "openingBalance": 0,
                "currentBalance": 99999,
                "totalSupplied": 0,
                "totalPaid": 0,
                "createdAt": "2024-01-01T05:00:00.000Z",
            }
        ],
        "transactions": [
            {
                "id": 11,
                "customerId": 3,
                "customerName": "Bismillah Chicken Shop",
                "date": "2024-01-02T00:00:00.000Z",
                "type": "PAYMENT",
                "amount": 600,
                "paymentMethod": "Cash",
                "notes": "",
            },
            {
                "id": 12,
                "customerId": 3,
                "date": "2024-01-01T00:00:00.000Z",
                "type": "SUPPLY",
                "quantity": 8,
                "rate": 160,
                "amount": 1280,
                "balanceAfter": 1280,
            },
        ],
        "settings": [{"id": "global", "farmRate": 150}],
        "timestamp": "2024-01-03T10:00:00.000Z",
    }
    document.update(overrides)
    return BackupDocumentDTO.model_validate(document)


@pytest.mark.asyncio
class TestRestoreBackup:

    async def test_restores_and_replays(self, mock_uow, store, mock_settings_repo):
        """
        Given: Browser-app backup with stale cached balances
        When: It is restored
        Then: Ids are kept and every derived value is recomputed
        """
        # Arrange
        use_case = RestoreBackup(mock_uow, store.customers, store.transactions, mock_settings_repo)

        # Act
        result = await use_case.execute(browser_backup())

        # Assert
        assert result.is_ok()
        assert result.value.customers_restored == 1
        assert result.value.transactions_restored == 2
        assert result.value.balances_corrected > 0

        customer = await store.customers.get_by_id(3)
        assert customer.current_balance == Decimal("680")
        assert customer.total_supplied == Decimal("8")
        assert customer.total_paid == Decimal("600")
        assert customer.last_supply_date == date(2024, 1, 1)

        payment = await store.transactions.get_by_id(11)
        assert payment.kind == TransactionKind.PAYMENT
        assert payment.notes is None
        assert payment.balance_after == Decimal("680")

        saved = mock_settings_repo.save.await_args.args[0]
        assert saved.farm_rate == Decimal("150")
        mock_uow.commit.assert_awaited_once()

    async def test_existing_data_replaced(self, mock_uow, store, mock_settings_repo):
        old = await store.add_customer(phone="03119999999")
        use_case = RestoreBackup(mock_uow, store.customers, store.transactions, mock_settings_repo)

        await use_case.execute(browser_backup())

        assert await store.customers.get_by_id(old.id) is None
        assert [c.id for c in await store.customers.get_all()] == [3]
        mock_settings_repo.delete_all.assert_awaited_once()

    async def test_orphan_transaction_rejected_before_any_delete(self, mock_uow, store, mock_settings_repo):
        existing = await store.add_customer()
        document = browser_backup()
        document.transactions[0].customer_id = 77
        use_case = RestoreBackup(mock_uow, store.customers, store.transactions, mock_settings_repo)

        result = await use_case.execute(document)

        assert result.is_err()
        assert result.error.code == "INVALID_BACKUP"
        assert "77" in result.error.reason
        assert await store.customers.get_by_id(existing.id) is existing

    async def test_duplicate_transaction_ids_rejected(self, mock_uow, store, mock_settings_repo):
        document = browser_backup()
        document.transactions[1].id = document.transactions[0].id
        use_case = RestoreBackup(mock_uow, store.customers, store.transactions, mock_settings_repo)

        result = await use_case.execute(document)

        assert result.error.code == "INVALID_BACKUP"

    def test_supply_without_quantity_rejected(self):
        with pytest.raises(ValueError):
            BackupDocumentDTO.model_validate(
                {"transactions": [{"id": 1, "customerId": 1, "date": "2024-01-01", "type": "SUPPLY", "amount": 5}]}
            )

    async def test_store_failure_rolls_back(self, mock_uow, mock_settings_repo):
        transaction_repo = MagicMock()
        transaction_repo.delete_all = AsyncMock(side_effect=RuntimeError("read-only database"))
        use_case = RestoreBackup(mock_uow, MagicMock(), transaction_repo, mock_settings_repo)

        result = await use_case.execute(browser_backup())

        assert result.error.code == "RESTORE_BACKUP_FAILED"
        mock_uow.rollback.assert_awaited_once()


@pytest.mark.asyncio
class TestExportBackup:

    async def test_exports_everything_and_stamps_last_backup(self, mock_uow, store, mock_settings_repo):
        customer = await store.add_customer()
        engine = LedgerEngine(store.customers, store.transactions)
        await engine.reconcile_day(customer, date(2024, 1, 1), Decimal("2"), Decimal("0"), Decimal("150"))
        use_case = ExportBackup(mock_uow, store.customers, store.transactions, mock_settings_repo, Decimal("150"))

        result = await use_case.execute()

        document = result.value
        assert [c.id for c in document.customers] == [customer.id]
        assert len(document.transactions) == 1
        assert document.settings[0].farm_rate == Decimal("150")
        assert document.settings[0].last_backup == document.timestamp
        mock_uow.commit.assert_awaited_once()

    async def test_keeps_saved_farm_rate(self, mock_uow, store, mock_settings_repo):
        mock_settings_repo.get = AsyncMock(return_value=LedgerSettings(farm_rate=Decimal("175")))
        use_case = ExportBackup(mock_uow, store.customers, store.transactions, mock_settings_repo, Decimal("150"))

        result = await use_case.execute()

        assert result.value.settings[0].farm_rate == Decimal("175")
        assert isinstance(result.value.timestamp, datetime)

    async def test_export_then_restore_reproduces_balances(self, mock_uow, store, mock_settings_repo):
        customer = await store.add_customer(opening_balance="40")
        engine = LedgerEngine(store.customers, store.transactions)
        await engine.reconcile_day(customer, date(2024, 1, 1), Decimal("3"), Decimal("100"), Decimal("150"))
        exported = (await ExportBackup(
            mock_uow, store.customers, store.transactions, mock_settings_repo, Decimal("150")
        ).execute()).value

        restored = await RestoreBackup(
            mock_uow, store.customers, store.transactions, mock_settings_repo
        ).execute(BackupDocumentDTO.model_validate(exported.model_dump()))

        assert restored.value.balances_corrected == 0
        again = await store.customers.get_by_id(customer.id)
        assert again.current_balance == Decimal("390.00")
