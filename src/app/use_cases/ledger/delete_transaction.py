"""DeleteTransaction Use Case

Removes one transaction and replays its customer so later balances and
the summary reflect the removal.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_engine import LedgerEngine
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from .dtos import DeleteTransactionResponseDTO


class DeleteTransaction:

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, transaction_id: int) -> Result[DeleteTransactionResponseDTO]:
        try:
            txn = await self.transaction_repo.get_by_id(transaction_id)
            if not txn:
                return Return.err(
                    Error(
                        code="TRANSACTION_NOT_FOUND",
                        message=f"Transaction {transaction_id} not found",
                    )
                )

            customer = await self.customer_repo.get_by_id(txn.customer_id, for_update=True)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {txn.customer_id} not found",
                    )
                )

            await self.transaction_repo.delete(transaction_id)
            replay = await self.engine.replay(customer)
            await self.uow.commit()

            return Return.ok(
                DeleteTransactionResponseDTO(
                    transaction_id=transaction_id,
                    customer_id=customer.id,
                    current_balance=replay.outcome.current_balance,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_TRANSACTION_FAILED",
                    message="Failed to delete transaction",
                    reason=str(e),
                )
            )
