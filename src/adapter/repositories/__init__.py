from .customer_repository import SqlAlchemyCustomerRepository
from .ledger_transaction_repository import SqlAlchemyLedgerTransactionRepository
from .ledger_settings_repository import SqlAlchemyLedgerSettingsRepository

__all__ = [
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyLedgerTransactionRepository",
    "SqlAlchemyLedgerSettingsRepository",
]
