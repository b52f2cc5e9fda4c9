"""Unit tests for RecordSupply and RecordPayment use cases"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.rate_provider import FixedRateProvider
from src.app.use_cases.ledger.record_supply import RecordSupply
from src.app.use_cases.ledger.record_payment import RecordPayment
from src.app.use_cases.ledger.dtos import RecordSupplyCommandDTO, RecordPaymentCommandDTO
from src.domain.ledger_transaction import PaymentMethod, TransactionKind

DAY1 = date(2024, 1, 1)
DAY2 = date(2024, 1, 2)


@pytest.fixture
def record_supply(mock_uow, store):
    return RecordSupply(mock_uow, store.customers, store.transactions, FixedRateProvider(Decimal("150")))


@pytest.fixture
def record_payment(mock_uow, store):
    return RecordPayment(mock_uow, store.customers, store.transactions)


@pytest.mark.asyncio
class TestRecordSupply:

    async def test_records_supply_at_effective_rate(self, record_supply, store, mock_uow):
        """
        Given: Customer with supply_rate 10 and farm rate 150
        When: 10 units are supplied
        Then: Amount is 1600 and the unit of work commits
        """
        # Arrange
        customer = await store.add_customer(supply_rate="10")

        # Act
        result = await record_supply.execute(
            RecordSupplyCommandDTO(customer_id=customer.id, day=DAY1, quantity=Decimal("10"))
        )

        # Assert
        assert result.is_ok()
        assert result.value.changed
        assert len(result.value.inserted_ids) == 1
        assert result.value.current_balance == Decimal("1600.00")
        assert result.value.total_supplied == Decimal("10")
        mock_uow.commit.assert_awaited_once()

    async def test_keeps_existing_payment_on_day(self, record_supply, record_payment, store):
        customer = await store.add_customer()
        await record_payment.execute(
            RecordPaymentCommandDTO(customer_id=customer.id, day=DAY1, amount=Decimal("100"))
        )

        await record_supply.execute(
            RecordSupplyCommandDTO(customer_id=customer.id, day=DAY1, quantity=Decimal("2"))
        )

        kinds = sorted(t.kind.value for t in await store.transactions.find_all_by_customer(customer.id))
        assert kinds == ["PAYMENT", "SUPPLY"]
        assert customer.current_balance == Decimal("200.00")

    async def test_same_quantity_is_a_no_op(self, record_supply, store, mock_uow):
        customer = await store.add_customer()
        command = RecordSupplyCommandDTO(customer_id=customer.id, day=DAY1, quantity=Decimal("4"))
        await record_supply.execute(command)
        mock_uow.commit.reset_mock()
        store.writes.reset()

        result = await record_supply.execute(command)

        assert result.is_ok()
        assert not result.value.changed
        assert result.value.current_balance == Decimal("600.00")
        assert store.writes.total == 0
        mock_uow.commit.assert_not_awaited()

    async def test_customer_not_found(self, record_supply):
        result = await record_supply.execute(
            RecordSupplyCommandDTO(customer_id=42, day=DAY1, quantity=Decimal("1"))
        )

        assert result.is_err()
        assert result.error.code == "CUSTOMER_NOT_FOUND"

    async def test_store_error_rolls_back(self, mock_uow):
        customer_repo = MagicMock()
        customer_repo.get_by_id = AsyncMock(side_effect=RuntimeError("connection lost"))
        use_case = RecordSupply(mock_uow, customer_repo, MagicMock(), FixedRateProvider(Decimal("150")))

        result = await use_case.execute(
            RecordSupplyCommandDTO(customer_id=1, day=DAY1, quantity=Decimal("1"))
        )

        assert result.is_err()
        assert result.error.code == "RECORD_SUPPLY_FAILED"
        assert result.error.reason == "connection lost"
        mock_uow.rollback.assert_awaited_once()

    def test_negative_quantity_rejected_by_command(self):
        with pytest.raises(ValueError):
            RecordSupplyCommandDTO(customer_id=1, day=DAY1, quantity=Decimal("-1"))


@pytest.mark.asyncio
class TestRecordPayment:

    async def test_records_payment_with_method(self, record_payment, store):
        customer = await store.add_customer(opening_balance="1000")

        result = await record_payment.execute(
            RecordPaymentCommandDTO(
                customer_id=customer.id,
                day=DAY2,
                amount=Decimal("600"),
                payment_method=PaymentMethod.BANK_TRANSFER,
                notes="Meezan Bank",
            )
        )

        assert result.is_ok()
        assert result.value.current_balance == Decimal("400")
        assert result.value.total_paid == Decimal("600")
        (pay,) = await store.transactions.find_all_by_customer(customer.id)
        assert pay.kind == TransactionKind.PAYMENT
        assert pay.payment_method == PaymentMethod.BANK_TRANSFER
        assert pay.notes == "Meezan Bank"

    async def test_backdated_payment_ripples(self, record_supply, record_payment, store):
        """
        Given: Supplies on days 1 and 2
        When: A payment is recorded on day 1
        Then: The day 2 supply's balance_after drops by the payment
        """
        # Arrange
        customer = await store.add_customer()
        for day in (DAY1, DAY2):
            await record_supply.execute(
                RecordSupplyCommandDTO(customer_id=customer.id, day=day, quantity=Decimal("1"))
            )

        # Act
        await record_payment.execute(
            RecordPaymentCommandDTO(customer_id=customer.id, day=DAY1, amount=Decimal("100"))
        )

        # Assert
        rows = await store.transactions.find_all_by_customer(customer.id)
        day2_supply = next(t for t in rows if t.day == DAY2)
        assert day2_supply.balance_after == Decimal("200.00")
        assert customer.current_balance == Decimal("200.00")

    async def test_zero_amount_removes_payment(self, record_payment, store):
        customer = await store.add_customer()
        await record_payment.execute(
            RecordPaymentCommandDTO(customer_id=customer.id, day=DAY1, amount=Decimal("100"))
        )

        result = await record_payment.execute(
            RecordPaymentCommandDTO(customer_id=customer.id, day=DAY1, amount=Decimal("0"))
        )

        assert len(result.value.deleted_ids) == 1
        assert customer.current_balance == Decimal("0")

    async def test_customer_not_found(self, record_payment):
        result = await record_payment.execute(
            RecordPaymentCommandDTO(customer_id=7, day=DAY1, amount=Decimal("1"))
        )

        assert result.error.code == "CUSTOMER_NOT_FOUND"
