"""Get Customer Ledger Use Case

Customer summary plus full transaction history for display.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_replay import canonical_order
from src.domain.ledger_transaction import TransactionKind
from .dtos import CustomerLedgerDTO, CustomerDTO, TransactionDTO

AVERAGE_WINDOW_DAYS = 30


class GetCustomerLedger:
    """
    Read-only view of one customer's ledger

    History is listed newest first with a day's payment above its supply,
    which is exactly the reverse of replay order, so each row's
    balance_after reads as the state at that point.
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo

    async def execute(self, customer_id: int, today: Optional[date] = None) -> Result[CustomerLedgerDTO]:
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(
                    code="CUSTOMER_NOT_FOUND",
                    message=f"Customer {customer_id} not found",
                )
            )

        transactions = await self.transaction_repo.find_all_by_customer(customer_id)
        history = list(reversed(canonical_order(transactions)))

        since = (today or date.today()) - timedelta(days=AVERAGE_WINDOW_DAYS)
        recent = [t.quantity or Decimal("0") for t in transactions if t.kind == TransactionKind.SUPPLY and t.day >= since]
        average = (sum(recent, Decimal("0")) / len(recent)).quantize(Decimal("0.001")) if recent else Decimal("0")

        return Return.ok(
            CustomerLedgerDTO(
                customer=CustomerDTO.from_entity(customer),
                transactions=[TransactionDTO.from_entity(t) for t in history],
                average_daily_quantity=average,
            )
        )
