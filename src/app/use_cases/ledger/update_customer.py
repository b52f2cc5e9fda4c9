"""UpdateCustomer Use Case

Edits a customer's profile. An opening-balance change shifts every running
balance of the customer, so it always triggers a full ledger replay.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_engine import LedgerEngine
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_transaction import round_money
from .dtos import UpdateCustomerCommandDTO, UpdateCustomerResponseDTO, CustomerDTO

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "phone", "supply_rate", "opening_balance")
MONEY_FIELDS = ("supply_rate", "opening_balance")


class UpdateCustomer:
    """
    Use Case: Edit customer

    Business Rules:
    1. Only provided fields are changed
    2. Phone numbers stay unique
    3. opening_balance change -> full replay in the same unit of work
    4. supply_rate change affects future reconciliations only (no replay)
    5. name change refreshes the name snapshot on the customer's transactions
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
        self.engine = LedgerEngine(customer_repo, transaction_repo)

    async def execute(self, command: UpdateCustomerCommandDTO) -> Result[UpdateCustomerResponseDTO]:
        try:
            customer = await self.customer_repo.get_by_id(command.customer_id, for_update=True)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            proposed = {name: getattr(command, name) for name in EDITABLE_FIELDS}
            for name in MONEY_FIELDS:
                if proposed[name] is not None:
                    proposed[name] = round_money(proposed[name])
            changes = {
                name: value
                for name, value in proposed.items()
                if value is not None and value != getattr(customer, name)
            }

            if "phone" in changes:
                other = await self.customer_repo.get_by_phone(changes["phone"])
                if other and other.id != customer.id:
                    return Return.err(
                        Error(
                            code="DUPLICATE_PHONE",
                            message=f"Phone number {changes['phone']} already exists",
                            reason=f"customer_id={other.id}",
                        )
                    )

            replayed = False
            if changes:
                await self.customer_repo.update(customer.id, changes)

                if "name" in changes:
                    for txn in await self.transaction_repo.find_all_by_customer(customer.id):
                        await self.transaction_repo.update(txn.id, {"customer_name": changes["name"]})

                if "opening_balance" in changes:
                    customer = await self.customer_repo.get_by_id(customer.id)
                    await self.engine.replay(customer)
                    replayed = True
                    logger.info(
                        f"Customer {customer.id} opening balance changed to "
                        f"{changes['opening_balance']}, ledger replayed"
                    )

                await self.uow.commit()

            return Return.ok(
                UpdateCustomerResponseDTO(
                    customer=CustomerDTO.from_entity(customer),
                    ledger_replayed=replayed,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_CUSTOMER_FAILED",
                    message="Failed to update customer",
                    reason=str(e),
                )
            )
