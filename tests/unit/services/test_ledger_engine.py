"""Unit tests for LedgerEngine

Tests cover:
- Day reconciliation (insert, update, delete, duplicates)
- No-op short-circuit (zero store writes)
- Ripple of past edits into later balances
- Idempotence of replay
- Opening balance propagation
- Aggregate agreement with the transaction set
- Read-only verification
"""

import pytest
from datetime import date
from decimal import Decimal

from src.app.services.ledger_engine import LedgerEngine, LedgerEntryError
from src.domain.ledger_replay import canonical_order
from src.domain.ledger_transaction import LedgerTransaction, PaymentMethod, TransactionKind

DAY1 = date(2024, 1, 1)
DAY2 = date(2024, 1, 2)
DAY3 = date(2024, 1, 3)
RATE = Decimal("160")


@pytest.fixture
def engine(store):
    return LedgerEngine(store.customers, store.transactions)


def assert_consistent(customer, transactions):
    """Every cached value equals a hand-computed forward pass"""
    running = customer.opening_balance
    for txn in canonical_order(transactions):
        running += txn.amount if txn.kind == TransactionKind.SUPPLY else -txn.amount
        assert txn.balance_after == running
    assert customer.current_balance == running
    assert customer.total_supplied == sum(
        (t.quantity for t in transactions if t.kind == TransactionKind.SUPPLY), Decimal("0")
    )
    assert customer.total_paid == sum(
        (t.amount for t in transactions if t.kind == TransactionKind.PAYMENT), Decimal("0")
    )


@pytest.mark.asyncio
class TestReconcileDay:

    async def test_inserts_supply_and_payment(self, engine, store):
        """
        Given: Empty day
        When: Quantity 10 and payment 600 are reconciled
        Then: One SUPPLY and one PAYMENT exist and the summary is replayed
        """
        # Arrange
        customer = await store.add_customer()

        # Act
        result = await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)

        # Assert
        assert result.changed
        assert len(result.inserted) == 2
        rows = await store.transactions.find_all_by_customer(customer.id)
        supply = next(t for t in rows if t.kind == TransactionKind.SUPPLY)
        pay = next(t for t in rows if t.kind == TransactionKind.PAYMENT)
        assert supply.amount == Decimal("1600.00")
        assert supply.rate == RATE
        assert supply.customer_name == customer.name
        assert supply.balance_after == Decimal("1600.00")
        assert pay.balance_after == Decimal("1000.00")
        assert customer.current_balance == Decimal("1000.00")
        assert result.replay is not None

    async def test_worked_example_correction_ripples(self, engine, store):
        """
        Given: Day 1 supply 10 @ 160, day 2 payment 600
        When: Day 1 is corrected to quantity 8
        Then: Balances become 1280 / 680 and the summary follows
        """
        # Arrange
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), RATE)
        await engine.reconcile_day(customer, DAY2, Decimal("0"), Decimal("600"), RATE)
        assert customer.current_balance == Decimal("1000.00")

        # Act
        result = await engine.reconcile_day(customer, DAY1, Decimal("8"), Decimal("0"), RATE)

        # Assert
        assert len(result.updated) == 1
        rows = canonical_order(await store.transactions.find_all_by_customer(customer.id))
        assert [t.balance_after for t in rows] == [Decimal("1280.00"), Decimal("680.00")]
        assert customer.current_balance == Decimal("680.00")
        assert customer.total_supplied == Decimal("8")
        assert customer.total_paid == Decimal("600")
        assert customer.last_supply_date == DAY1

    async def test_unchanged_day_makes_zero_writes(self, engine, store):
        """
        Given: Day already holds quantity 10 and payment 600
        When: The same values are reconciled again
        Then: No store write happens
        """
        # Arrange
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)
        store.writes.reset()

        # Act
        result = await engine.reconcile_day(customer, DAY1, Decimal("10.000"), Decimal("600.00"), RATE)

        # Assert
        assert not result.changed
        assert result.replay is None
        assert store.writes.total == 0

    async def test_empty_day_with_zeros_makes_zero_writes(self, engine, store):
        customer = await store.add_customer()

        result = await engine.reconcile_day(customer, DAY1, Decimal("0"), Decimal("0"), RATE)

        assert not result.changed
        assert store.writes.total == 0

    async def test_zero_removes_existing_rows(self, engine, store):
        customer = await store.add_customer(opening_balance="100")
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)

        result = await engine.reconcile_day(customer, DAY1, Decimal("0"), Decimal("0"), RATE)

        assert len(result.deleted) == 2
        assert await store.transactions.find_all_by_customer(customer.id) == []
        assert customer.current_balance == Decimal("100")
        assert customer.total_supplied == Decimal("0")
        assert customer.last_supply_date == customer.created_day

    async def test_none_leaves_kind_untouched(self, engine, store):
        """
        Given: Day holds a supply and a payment
        When: Only the payment is reconciled (quantity=None)
        Then: The supply row is not touched
        """
        # Arrange
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)

        # Act
        result = await engine.reconcile_day(customer, DAY1, None, Decimal("700"), Decimal("999"))

        # Assert
        rows = await store.transactions.find_all_by_customer(customer.id)
        supply = next(t for t in rows if t.kind == TransactionKind.SUPPLY)
        assert supply.rate == RATE
        assert supply.quantity == Decimal("10")
        assert len(result.updated) == 1
        assert customer.current_balance == Decimal("900.00")

    async def test_payment_method_and_notes_stored(self, engine, store):
        customer = await store.add_customer()

        await engine.reconcile_day(
            customer, DAY1, None, Decimal("250"), RATE,
            payment_method=PaymentMethod.CHEQUE, notes="cheque #44",
        )

        (pay,) = await store.transactions.find_all_by_customer(customer.id)
        assert pay.payment_method == PaymentMethod.CHEQUE
        assert pay.notes == "cheque #44"

    async def test_rate_change_alone_is_a_no_op(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), RATE)
        store.writes.reset()

        result = await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), Decimal("170"))

        assert not result.changed
        assert store.writes.total == 0

    async def test_quantity_change_rerates_supply(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), RATE)

        await engine.reconcile_day(customer, DAY1, Decimal("5"), Decimal("0"), Decimal("170"))

        (supply,) = await store.transactions.find_all_by_customer(customer.id)
        assert supply.rate == Decimal("170")
        assert supply.amount == Decimal("850.00")

    async def test_duplicates_collapse_to_one_row(self, engine, store):
        """
        Given: Two SUPPLY rows on the same day (legacy data)
        When: The day is reconciled
        Then: The lowest id row is kept and the other is removed
        """
        # Arrange
        customer = await store.add_customer()
        for _ in range(2):
            await store.transactions.insert(
                LedgerTransaction(
                    customer_id=customer.id, day=DAY1, kind=TransactionKind.SUPPLY,
                    quantity=Decimal("4"), rate=RATE, amount=Decimal("640.00"),
                )
            )

        # Act
        result = await engine.reconcile_day(customer, DAY1, Decimal("4"), None, RATE)

        # Assert
        assert result.deleted == [2]
        rows = await store.transactions.find_all_by_customer(customer.id)
        assert [t.id for t in rows] == [1]
        assert customer.current_balance == Decimal("640.00")

    async def test_negative_quantity_rejected_before_writes(self, engine, store):
        customer = await store.add_customer()

        with pytest.raises(LedgerEntryError) as exc:
            await engine.reconcile_day(customer, DAY1, Decimal("-1"), Decimal("0"), RATE)

        assert exc.value.code == "INVALID_QUANTITY"
        assert store.writes.total == 0

    async def test_negative_payment_rejected(self, engine, store):
        customer = await store.add_customer()

        with pytest.raises(LedgerEntryError) as exc:
            await engine.reconcile_day(customer, DAY1, Decimal("0"), Decimal("-5"), RATE)

        assert exc.value.code == "INVALID_AMOUNT"

    async def test_values_stored_at_column_precision(self, engine, store):
        """
        Given: Quantity and payment finer than the stored precision
        When: The day is reconciled twice with the same raw values
        Then: Rows hold rounded values, amount = quantity x rate, second pass writes nothing
        """
        # Arrange
        customer = await store.add_customer()

        # Act
        await engine.reconcile_day(customer, DAY1, Decimal("1.2345"), Decimal("100.005"), RATE)
        store.writes.reset()
        again = await engine.reconcile_day(customer, DAY1, Decimal("1.2345"), Decimal("100.005"), RATE)

        # Assert
        supply, payment = canonical_order(await store.transactions.find_all_by_customer(customer.id))
        assert supply.quantity == Decimal("1.235")
        assert supply.amount == Decimal("197.60")
        assert payment.amount == Decimal("100.01")
        assert customer.current_balance == Decimal("97.59")
        assert not again.changed
        assert store.writes.total == 0
        assert_consistent(customer, [supply, payment])


@pytest.mark.asyncio
class TestReplay:

    async def test_replay_is_idempotent(self, engine, store):
        """
        Given: A consistent ledger
        When: Replay runs again
        Then: Nothing is rewritten
        """
        # Arrange
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), RATE)
        await engine.reconcile_day(customer, DAY2, Decimal("3"), Decimal("600"), RATE)
        store.writes.reset()

        # Act
        replay = await engine.replay(customer)

        # Assert
        assert not replay.wrote_anything
        assert store.writes.total == 0

    async def test_backdated_entry_ripples_forward(self, engine, store):
        """
        Given: Entries on days 2 and 3
        When: A supply is inserted on day 1
        Then: Every later balance increases by its amount
        """
        # Arrange
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY2, Decimal("1"), Decimal("0"), RATE)
        await engine.reconcile_day(customer, DAY3, Decimal("0"), Decimal("100"), RATE)
        before = {t.id: t.balance_after for t in await store.transactions.find_all_by_customer(customer.id)}

        # Act
        await engine.reconcile_day(customer, DAY1, Decimal("2"), Decimal("0"), RATE)

        # Assert
        rows = await store.transactions.find_all_by_customer(customer.id)
        for txn in rows:
            if txn.id in before:
                assert txn.balance_after - before[txn.id] == Decimal("320.00")
        assert_consistent(customer, rows)

    async def test_opening_balance_change_propagates(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)

        await store.customers.update(customer.id, {"opening_balance": Decimal("-200")})
        replay = await engine.replay(customer)

        rows = await store.transactions.find_all_by_customer(customer.id)
        assert replay.transactions_rewritten == 2
        assert "current_balance" in replay.customer_fields_rewritten
        assert customer.current_balance == Decimal("800.00")
        assert_consistent(customer, rows)

    async def test_replay_repairs_stale_values(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)
        (first, second) = canonical_order(await store.transactions.find_all_by_customer(customer.id))
        await store.transactions.update(second.id, {"balance_after": Decimal("1")})
        await store.customers.update(customer.id, {"total_paid": Decimal("0")})

        replay = await engine.replay(customer)

        assert replay.transactions_rewritten == 1
        assert replay.customer_fields_rewritten == ["total_paid"]
        assert_consistent(customer, [first, second])

    async def test_aggregates_agree_after_mixed_edits(self, engine, store):
        customer = await store.add_customer(opening_balance="50")
        await engine.reconcile_day(customer, DAY3, Decimal("2"), Decimal("100"), RATE)
        await engine.reconcile_day(customer, DAY1, Decimal("1.5"), Decimal("0"), RATE)
        await engine.reconcile_day(customer, DAY2, Decimal("0"), Decimal("40"), RATE)
        await engine.reconcile_day(customer, DAY3, Decimal("0"), Decimal("100"), RATE)

        rows = await store.transactions.find_all_by_customer(customer.id)
        assert_consistent(customer, rows)
        assert customer.last_supply_date == DAY1


@pytest.mark.asyncio
class TestVerify:

    async def test_consistent_ledger_has_no_discrepancies(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("600"), RATE)
        store.writes.reset()

        assert await engine.verify(customer) == []
        assert store.writes.total == 0

    async def test_reports_each_stale_value_without_writing(self, engine, store):
        customer = await store.add_customer()
        await engine.reconcile_day(customer, DAY1, Decimal("10"), Decimal("0"), RATE)
        (supply,) = await store.transactions.find_all_by_customer(customer.id)
        supply.balance_after = Decimal("5")
        customer.current_balance = Decimal("5")
        store.writes.reset()

        discrepancies = await engine.verify(customer)

        assert {(d.field, d.transaction_id) for d in discrepancies} == {
            ("balance_after", supply.id),
            ("current_balance", None),
        }
        balance = next(d for d in discrepancies if d.field == "current_balance")
        assert balance.stored == Decimal("5")
        assert balance.expected == Decimal("1600.00")
        assert store.writes.total == 0
