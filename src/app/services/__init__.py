from .unit_of_work import UnitOfWork
from .rate_provider import RateProvider, FixedRateProvider
from .ledger_engine import (
    LedgerEngine,
    LedgerEntryError,
    LedgerReplay,
    DayReconciliation,
    LedgerDiscrepancy,
)

__all__ = [
    "UnitOfWork",
    "RateProvider",
    "FixedRateProvider",
    "LedgerEngine",
    "LedgerEntryError",
    "LedgerReplay",
    "DayReconciliation",
    "LedgerDiscrepancy",
]
