from .customer_repository import CustomerRepository
from .ledger_transaction_repository import LedgerTransactionRepository
from .ledger_settings_repository import LedgerSettingsRepository

__all__ = [
    "CustomerRepository",
    "LedgerTransactionRepository",
    "LedgerSettingsRepository",
]
