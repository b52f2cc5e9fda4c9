"""RecordPayment Use Case

Single-entry payment for one customer/day. Leaves any supply on that day
untouched.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_engine import LedgerEngine, LedgerEntryError
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from .dtos import RecordPaymentCommandDTO, EntryResultDTO


class RecordPayment:
    """
    Use Case: Record payment

    Business Rules:
    1. Sets the day's payment amount (0 removes the payment)
    2. payment_method and notes are stored with the payment row
    3. Same amount as stored -> no writes
    4. Any change -> replay and commit in one unit of work
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, command: RecordPaymentCommandDTO) -> Result[EntryResultDTO]:
        try:
            customer = await self.customer_repo.get_by_id(command.customer_id, for_update=True)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            reconciliation = await self.engine.reconcile_day(
                customer,
                command.day,
                None,
                command.amount,
                customer.supply_rate,
                payment_method=command.payment_method,
                notes=command.notes,
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
                    code="RECORD_PAYMENT_FAILED",
                    message="Failed to record payment",
                    reason=str(e),
                )
            )
