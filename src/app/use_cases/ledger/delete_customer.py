"""DeleteCustomer Use Case

Removes a customer together with its whole transaction history.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from .dtos import DeleteCustomerResponseDTO

logger = logging.getLogger(__name__)


class DeleteCustomer:
    """
    Use Case: Delete customer

    Transactions and the customer row are deleted in one unit of work.
    No replay follows since no state remains for the customer.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        transaction_repo: LedgerTransactionRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo

    async def execute(self, customer_id: int) -> Result[DeleteCustomerResponseDTO]:
        try:
            customer = await self.customer_repo.get_by_id(customer_id, for_update=True)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {customer_id} not found",
                    )
                )

            deleted = await self.transaction_repo.delete_by_customer(customer_id)
            await self.customer_repo.delete(customer_id)
            await self.uow.commit()

            logger.info(f"Deleted customer {customer_id} and {deleted} transactions")
            return Return.ok(
                DeleteCustomerResponseDTO(customer_id=customer_id, transactions_deleted=deleted)
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_CUSTOMER_FAILED",
                    message="Failed to delete customer",
                    reason=str(e),
                )
            )
