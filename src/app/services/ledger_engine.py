"""Ledger Consistency Engine

Keeps a customer's transactions and summary fields consistent after any
insert, update or delete, including edits to past days.

Flow for one customer/day:
1. Reconcile the day: merge the proposed (quantity, payment) pair into at
   most one SUPPLY and one PAYMENT row, skipping all writes when nothing
   changed
2. Replay: recompute every balance_after and the customer summary from the
   opening balance over the whole history in canonical order, writing only
   values that differ from what is stored

The engine never commits. The calling use case owns the UnitOfWork and
commits once after the engine returns, or rolls back on any error.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.customer import Customer
from src.domain.ledger_replay import ReplayOutcome, replay_ledger
from src.domain.ledger_transaction import (
    LedgerTransaction,
    PaymentMethod,
    TransactionKind,
    compute_supply_amount,
    round_money,
    round_quantity,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class LedgerEntryError(ValueError):
    """Rejected input; raised before any store write"""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class LedgerReplay:
    """Result of replaying one customer"""

    customer_id: int
    outcome: ReplayOutcome
    transactions_rewritten: int = 0
    customer_fields_rewritten: List[str] = field(default_factory=list)

    @property
    def wrote_anything(self) -> bool:
        return bool(self.transactions_rewritten or self.customer_fields_rewritten)


@dataclass
class DayReconciliation:
    """Writes performed while reconciling one customer/day"""

    customer_id: int
    day: date
    inserted: List[int] = field(default_factory=list)
    updated: List[int] = field(default_factory=list)
    deleted: List[int] = field(default_factory=list)
    replay: Optional[LedgerReplay] = None

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)


@dataclass(frozen=True)
class LedgerDiscrepancy:
    """A cached field that disagrees with a fresh replay"""

    customer_id: int
    field: str
    stored: Any
    expected: Any
    transaction_id: Optional[int] = None


class LedgerEngine:
    """
    Day reconciliation and canonical replay for customer ledgers

    Business Rules:
    1. At most one SUPPLY and one PAYMENT per customer per day
    2. A zero proposed value means the kind does not occur that day (no row)
    3. Unchanged day values produce zero store writes
    4. Any write to a customer's history is followed by a full replay
    5. Derived fields are only written by replay
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo

    async def reconcile_day(
        self,
        customer: Customer,
        day: date,
        quantity: Optional[Decimal],
        payment: Optional[Decimal],
        rate: Decimal,
        payment_method: Optional[PaymentMethod] = None,
        notes: Optional[str] = None,
    ) -> DayReconciliation:
        """
        Merge a day's proposed entries into the customer's ledger

        Args:
            customer: Customer whose ledger is edited
            day: Calendar day of the entries
            quantity: Proposed supply quantity (0 = no supply, None = leave supply untouched)
            payment: Proposed payment amount (0 = no payment, None = leave payment untouched)
            rate: Effective per-unit rate for the customer on this day
            payment_method: Optional method stored with the payment
            notes: Optional note stored with the payment

        Returns:
            DayReconciliation describing the writes (replay included when anything changed)

        Raises:
            LedgerEntryError: Negative quantity or payment
        """
        if quantity is not None and quantity < 0:
            raise LedgerEntryError("INVALID_QUANTITY", f"Quantity cannot be negative: {quantity}")
        if payment is not None and payment < 0:
            raise LedgerEntryError("INVALID_AMOUNT", f"Payment cannot be negative: {payment}")

        existing = await self.transaction_repo.find_by_customer_and_day_range(customer.id, day, day)
        supplies = sorted((t for t in existing if t.kind == TransactionKind.SUPPLY), key=lambda t: t.id)
        payments = sorted((t for t in existing if t.kind == TransactionKind.PAYMENT), key=lambda t: t.id)
        old_supply = supplies[0] if supplies else None
        old_payment = payments[0] if payments else None

        old_qty = old_supply.quantity if old_supply else ZERO
        old_pay = old_payment.amount if old_payment else ZERO
        # Compare at the precision the columns store
        new_qty = old_qty if quantity is None else round_quantity(quantity)
        new_pay = old_pay if payment is None else round_money(payment)

        result = DayReconciliation(customer_id=customer.id, day=day)
        duplicates = (supplies[1:] if quantity is not None else []) + (payments[1:] if payment is not None else [])

        if new_qty == old_qty and new_pay == old_pay and not duplicates:
            logger.debug(f"Customer {customer.id} {day}: entries unchanged, skipping")
            return result

        for txn in duplicates:
            logger.warning(
                f"Customer {customer.id} {day}: removing duplicate {txn.kind.value} transaction {txn.id}"
            )
            await self.transaction_repo.delete(txn.id)
            result.deleted.append(txn.id)

        if quantity is not None:
            await self._reconcile_supply(customer, day, new_qty, round_money(rate), old_supply, result)
        if payment is not None:
            await self._reconcile_payment(customer, day, new_pay, payment_method, notes, old_payment, result)

        if result.changed:
            result.replay = await self.replay(customer)

        logger.info(
            f"Customer {customer.id} {day}: inserted={result.inserted} "
            f"updated={result.updated} deleted={result.deleted}"
        )
        return result

    async def _reconcile_supply(
        self,
        customer: Customer,
        day: date,
        quantity: Decimal,
        rate: Decimal,
        old_supply: Optional[LedgerTransaction],
        result: DayReconciliation,
    ) -> None:
        if quantity > 0:
            amount = compute_supply_amount(quantity, rate)
            if old_supply:
                fields = {"quantity": quantity, "rate": rate, "amount": amount}
                changed = {k: v for k, v in fields.items() if getattr(old_supply, k) != v}
                if changed:
                    await self.transaction_repo.update(old_supply.id, changed)
                    result.updated.append(old_supply.id)
            else:
                new_id = await self.transaction_repo.insert(
                    LedgerTransaction(
                        customer_id=customer.id,
                        customer_name=customer.name,
                        day=day,
                        kind=TransactionKind.SUPPLY,
                        quantity=quantity,
                        rate=rate,
                        amount=amount,
                        balance_after=ZERO,
                    )
                )
                result.inserted.append(new_id)
        elif old_supply:
            await self.transaction_repo.delete(old_supply.id)
            result.deleted.append(old_supply.id)

    async def _reconcile_payment(
        self,
        customer: Customer,
        day: date,
        amount: Decimal,
        payment_method: Optional[PaymentMethod],
        notes: Optional[str],
        old_payment: Optional[LedgerTransaction],
        result: DayReconciliation,
    ) -> None:
        if amount > 0:
            if old_payment:
                fields: Dict[str, Any] = {"amount": amount}
                if payment_method is not None:
                    fields["payment_method"] = payment_method
                if notes is not None:
                    fields["notes"] = notes
                changed = {k: v for k, v in fields.items() if getattr(old_payment, k) != v}
                if changed:
                    await self.transaction_repo.update(old_payment.id, changed)
                    result.updated.append(old_payment.id)
            else:
                new_id = await self.transaction_repo.insert(
                    LedgerTransaction(
                        customer_id=customer.id,
                        customer_name=customer.name,
                        day=day,
                        kind=TransactionKind.PAYMENT,
                        amount=amount,
                        payment_method=payment_method,
                        notes=notes,
                        balance_after=ZERO,
                    )
                )
                result.inserted.append(new_id)
        elif old_payment:
            await self.transaction_repo.delete(old_payment.id)
            result.deleted.append(old_payment.id)

    async def replay(self, customer: Customer) -> LedgerReplay:
        """
        Recompute and persist every derived value of a customer's ledger

        Full recompute over the whole history; values equal to what is
        already stored are not written.

        Args:
            customer: Customer to replay (opening_balance must be current)

        Returns:
            LedgerReplay with the outcome and a count of rewritten values
        """
        transactions = await self.transaction_repo.find_all_by_customer(customer.id)
        outcome = replay_ledger(customer.opening_balance, customer.created_day, transactions)
        by_id = {t.id: t for t in transactions}

        replay = LedgerReplay(customer_id=customer.id, outcome=outcome)
        for transaction_id, balance_after in outcome.balances:
            if by_id[transaction_id].balance_after != balance_after:
                await self.transaction_repo.update(transaction_id, {"balance_after": balance_after})
                replay.transactions_rewritten += 1

        changed = {
            name: value
            for name, value in outcome.aggregates.items()
            if getattr(customer, name) != value
        }
        if changed:
            await self.customer_repo.update(customer.id, changed)
            replay.customer_fields_rewritten = sorted(changed)

        logger.debug(
            f"Replayed customer {customer.id}: {len(transactions)} transactions, "
            f"{replay.transactions_rewritten} balances rewritten, "
            f"current_balance={outcome.current_balance}"
        )
        return replay

    async def verify(self, customer: Customer) -> List[LedgerDiscrepancy]:
        """
        Compare cached derived values against a fresh replay (read-only)

        Args:
            customer: Customer to check

        Returns:
            Every disagreeing field; empty when the ledger is consistent
        """
        transactions = await self.transaction_repo.find_all_by_customer(customer.id)
        outcome = replay_ledger(customer.opening_balance, customer.created_day, transactions)
        by_id = {t.id: t for t in transactions}

        discrepancies: List[LedgerDiscrepancy] = []
        for transaction_id, balance_after in outcome.balances:
            stored = by_id[transaction_id].balance_after
            if stored != balance_after:
                discrepancies.append(
                    LedgerDiscrepancy(
                        customer_id=customer.id,
                        field="balance_after",
                        stored=stored,
                        expected=balance_after,
                        transaction_id=transaction_id,
                    )
                )
        for name, value in outcome.aggregates.items():
            stored = getattr(customer, name)
            if stored != value:
                discrepancies.append(
                    LedgerDiscrepancy(customer_id=customer.id, field=name, stored=stored, expected=value)
                )

        if discrepancies:
            logger.warning(f"Customer {customer.id}: {len(discrepancies)} derived values out of date")
        return discrepancies
