"""Customer ledger use cases"""
from .create_customer import CreateCustomer
from .update_customer import UpdateCustomer
from .delete_customer import DeleteCustomer
from .list_customers import ListCustomers
from .get_customer_ledger import GetCustomerLedger
from .record_daily_sheet import RecordDailySheet
from .get_daily_sheet import GetDailySheet
from .record_supply import RecordSupply
from .record_payment import RecordPayment
from .delete_transaction import DeleteTransaction
from .reconcile_ledgers import ReconcileLedgers
from .export_backup import ExportBackup
from .restore_backup import RestoreBackup
from .get_period_report import GetPeriodReport
from .get_dashboard import GetDashboard
from .get_settings import GetSettings
from .update_settings import UpdateSettings

__all__ = [
    "CreateCustomer",
    "UpdateCustomer",
    "DeleteCustomer",
    "ListCustomers",
    "GetCustomerLedger",
    "RecordDailySheet",
    "GetDailySheet",
    "RecordSupply",
    "RecordPayment",
    "DeleteTransaction",
    "ReconcileLedgers",
    "ExportBackup",
    "RestoreBackup",
    "GetPeriodReport",
    "GetDashboard",
    "GetSettings",
    "UpdateSettings",
]
