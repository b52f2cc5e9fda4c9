from .base import BaseModel, utc_now, as_naive_utc
from .customer import Customer
from .ledger_transaction import (
    LedgerTransaction,
    TransactionKind,
    PaymentMethod,
    compute_supply_amount,
    round_money,
    round_quantity,
)
from .ledger_settings import LedgerSettings, GLOBAL_SETTINGS_ID
from .ledger_replay import ReplayOutcome, canonical_order, replay_ledger

__all__ = [
    "BaseModel",
    "utc_now",
    "as_naive_utc",
    "Customer",
    "LedgerTransaction",
    "TransactionKind",
    "PaymentMethod",
    "compute_supply_amount",
    "round_money",
    "round_quantity",
    "LedgerSettings",
    "GLOBAL_SETTINGS_ID",
    "ReplayOutcome",
    "canonical_order",
    "replay_ledger",
]
