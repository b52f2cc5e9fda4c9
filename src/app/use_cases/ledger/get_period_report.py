"""Get Period Report Use Case"""

from datetime import date
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_transaction import TransactionKind
from .dtos import PeriodReportDTO, TransactionDTO


class GetPeriodReport:
    """
    Totals for all customers over an inclusive day range

    total_supplied: sum of supply quantities
    total_billed: sum of supply amounts
    total_paid: sum of payment amounts
    """

    def __init__(self, transaction_repo: LedgerTransactionRepository):
        self.transaction_repo = transaction_repo

    async def execute(self, start_day: date, end_day: date) -> Result[PeriodReportDTO]:
        if start_day > end_day:
            return Return.err(
                Error(
                    code="INVALID_DATE_RANGE",
                    message=f"start_day {start_day} is after end_day {end_day}",
                )
            )

        transactions = await self.transaction_repo.find_by_day_range(start_day, end_day)
        supplies = [t for t in transactions if t.kind == TransactionKind.SUPPLY]
        payments = [t for t in transactions if t.kind == TransactionKind.PAYMENT]

        listed = sorted(transactions, key=lambda t: (t.day, t.id), reverse=True)
        return Return.ok(
            PeriodReportDTO(
                start_day=start_day,
                end_day=end_day,
                total_supplied=sum((t.quantity or Decimal("0") for t in supplies), Decimal("0")),
                total_billed=sum((t.amount for t in supplies), Decimal("0")),
                total_paid=sum((t.amount for t in payments), Decimal("0")),
                transaction_count=len(transactions),
                transactions=[TransactionDTO.from_entity(t) for t in listed],
            )
        )
