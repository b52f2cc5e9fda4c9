"""Get Daily Sheet Use Case

Pre-fills the daily entry sheet with every customer's stored values for a day.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Tuple
from libs.result import Result, Return
from src.app.services.rate_provider import RateProvider
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_transaction import TransactionKind
from .dtos import DailySheetDTO, DailySheetRowDTO


class GetDailySheet:

    def __init__(
        self,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
        rate_provider: RateProvider,
    ):
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.rate_provider = rate_provider

    async def execute(self, day: date) -> Result[DailySheetDTO]:
        """
        Build the sheet for a day

        Args:
            day: Sheet day

        Returns:
            Result[DailySheetDTO] with one row per customer (0 where nothing was recorded)
        """
        farm_rate = await self.rate_provider.get_farm_rate()
        customers = await self.customer_repo.get_all()
        transactions = await self.transaction_repo.find_by_day_range(day, day)

        values: Dict[int, Tuple[Decimal, Decimal]] = {}
        for txn in sorted(transactions, key=lambda t: t.id, reverse=True):
            # Lowest id wins when a day holds duplicates
            quantity, payment = values.get(txn.customer_id, (Decimal("0"), Decimal("0")))
            if txn.kind == TransactionKind.SUPPLY:
                quantity = txn.quantity or Decimal("0")
            else:
                payment = txn.amount
            values[txn.customer_id] = (quantity, payment)

        rows = []
        for customer in customers:
            quantity, payment = values.get(customer.id, (Decimal("0"), Decimal("0")))
            rows.append(
                DailySheetRowDTO(
                    customer_id=customer.id,
                    customer_name=customer.name,
                    quantity=quantity,
                    payment=payment,
                    rate=Decimal(farm_rate) + Decimal(customer.supply_rate or 0),
                    current_balance=customer.current_balance,
                )
            )

        return Return.ok(
            DailySheetDTO(
                day=day,
                farm_rate=farm_rate,
                is_new_record=not transactions,
                rows=rows,
            )
        )
