"""RecordSupply Use Case

Single-entry supply for one customer/day. Leaves any payment on that day
untouched.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.rate_provider import RateProvider
from src.app.services.ledger_engine import LedgerEngine, LedgerEntryError
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from .dtos import RecordSupplyCommandDTO, EntryResultDTO


class RecordSupply:
    """
    Use Case: Record supply

    Business Rules:
    1. Sets the day's supply quantity (0 removes the supply)
    2. Rate = current farm rate + customer.supply_rate
    3. Same quantity as stored -> no writes
    4. Any change -> replay and commit in one unit of work
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
        rate_provider: RateProvider,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.rate_provider = rate_provider
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, command: RecordSupplyCommandDTO) -> Result[EntryResultDTO]:
        try:
            customer = await self.customer_repo.get_by_id(command.customer_id, for_update=True)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            rate = await self.rate_provider.effective_rate(customer)
            reconciliation = await self.engine.reconcile_day(
                customer, command.day, command.quantity, None, rate
            )
            if reconciliation.changed:
                await self.uow.commit()

            return Return.ok(EntryResultDTO.from_reconciliation(customer, reconciliation))

        except LedgerEntryError as e:
            await self.uow.rollback()
            return Return.err(Error(code=e.code, message=e.message))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RECORD_SUPPLY_FAILED",
                    message="Failed to record supply",
                    reason=str(e),
                )
            )
