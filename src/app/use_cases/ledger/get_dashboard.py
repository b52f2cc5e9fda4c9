"""Get Dashboard Use Case

Business overview: outstanding balances, today's supply and weekly trend.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
from libs.result import Result, Return
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_transaction import LedgerTransaction, TransactionKind
from .dtos import DashboardDTO, TransactionDTO

RECENT_LIMIT = 10


def _supplied(transactions: Iterable[LedgerTransaction]) -> Decimal:
    return sum(
        (t.quantity or Decimal("0") for t in transactions if t.kind == TransactionKind.SUPPLY),
        Decimal("0"),
    )


def weekly_growth(this_week: Decimal, last_week: Decimal) -> Decimal:
    """Percent change of supplied quantity week over week"""
    if last_week == 0:
        return Decimal("100") if this_week > 0 else Decimal("0")
    growth = (this_week - last_week) / last_week * 100
    return growth.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class GetDashboard:

    def __init__(
        self,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo

    async def execute(self, today: Optional[date] = None) -> Result[DashboardDTO]:
        """
        Build the dashboard

        Args:
            today: Reference day (defaults to the current date)

        Returns:
            Result[DashboardDTO]

        Note:
            This week is today-6..today, last week today-13..today-7
        """
        today = today or date.today()
        customers = await self.customer_repo.get_all()

        window = await self.transaction_repo.find_by_day_range(today - timedelta(days=13), today)
        this_week_start = today - timedelta(days=6)
        todays = [t for t in window if t.day == today and t.kind == TransactionKind.SUPPLY]
        this_week = _supplied(t for t in window if t.day >= this_week_start)
        last_week = _supplied(t for t in window if t.day < this_week_start)

        recent = await self.transaction_repo.find_recent(RECENT_LIMIT)

        return Return.ok(
            DashboardDTO(
                day=today,
                total_customers=len(customers),
                total_outstanding=sum((c.current_balance for c in customers), Decimal("0")),
                daily_supply_quantity=_supplied(todays),
                daily_supply_amount=sum((t.amount for t in todays), Decimal("0")),
                weekly_growth_percent=weekly_growth(this_week, last_week),
                recent_transactions=[TransactionDTO.from_entity(t) for t in recent],
            )
        )
