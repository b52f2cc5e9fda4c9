"""Canonical ordering and replay of a customer ledger

Pure functions over already-loaded transactions. The ledger engine feeds
these with the store's rows and writes the outcome back.

Canonical order: day ascending, SUPPLY before PAYMENT on the same day,
then id ascending. A day's supply accrues before that day's payment is
applied against it; downstream reports depend on this order.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple
from src.domain.ledger_transaction import LedgerTransaction, TransactionKind

KIND_ORDER = {
    TransactionKind.SUPPLY: 0,
    TransactionKind.PAYMENT: 1,
}


def canonical_sort_key(transaction: LedgerTransaction) -> Tuple[date, int, int]:
    return (transaction.day, KIND_ORDER[transaction.kind], transaction.id)


def canonical_order(transactions: Iterable[LedgerTransaction]) -> List[LedgerTransaction]:
    return sorted(transactions, key=canonical_sort_key)


@dataclass(frozen=True)
class ReplayOutcome:
    """Derived values produced by one forward pass"""

    balances: List[Tuple[int, Decimal]]
    current_balance: Decimal
    total_supplied: Decimal
    total_paid: Decimal
    total_billed: Decimal
    last_supply_date: date
    _by_id: Dict[int, Decimal] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        self._by_id.update(self.balances)

    def balance_after(self, transaction_id: int) -> Decimal:
        return self._by_id[transaction_id]

    @property
    def aggregates(self) -> Dict[str, object]:
        """Customer summary fields keyed by column name"""
        return {
            "current_balance": self.current_balance,
            "total_supplied": self.total_supplied,
            "total_paid": self.total_paid,
            "last_supply_date": self.last_supply_date,
        }


def replay_ledger(
    opening_balance: Decimal,
    fallback_last_supply_date: date,
    transactions: Iterable[LedgerTransaction],
) -> ReplayOutcome:
    """
    Recompute every running balance and the customer summary

    Args:
        opening_balance: Customer balance before any transaction
        fallback_last_supply_date: Used when the customer has no supply (creation day)
        transactions: The customer's complete transaction set, any order

    Returns:
        ReplayOutcome with (transaction_id, balance_after) pairs in canonical order
    """
    running = Decimal(opening_balance)
    total_supplied = Decimal("0")
    total_paid = Decimal("0")
    total_billed = Decimal("0")
    last_supply_date = fallback_last_supply_date
    balances: List[Tuple[int, Decimal]] = []

    for txn in canonical_order(transactions):
        if txn.kind == TransactionKind.SUPPLY:
            running += txn.amount
            total_billed += txn.amount
            total_supplied += txn.quantity or Decimal("0")
            last_supply_date = txn.day
        else:
            running -= txn.amount
            total_paid += txn.amount
        balances.append((txn.id, running))

    return ReplayOutcome(
        balances=balances,
        current_balance=running,
        total_supplied=total_supplied,
        total_paid=total_paid,
        total_billed=total_billed,
        last_supply_date=last_supply_date,
    )
