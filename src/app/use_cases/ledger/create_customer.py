"""CreateCustomer Use Case

Registers a new customer with an opening balance. The derived summary
starts out equal to the opening balance with no transactions.
"""

from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.customer import Customer
from src.domain.ledger_transaction import round_money
from .dtos import CreateCustomerCommandDTO, CustomerDTO


class CreateCustomer:
    """
    Use Case: Create customer

    Business Rules:
    1. Phone numbers are unique
    2. supply_rate defaults to settings.default_supply_rate (or 0)
    3. current_balance = opening_balance, totals = 0, last_supply_date = creation day
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        settings_repo: LedgerSettingsRepository,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.settings_repo = settings_repo

    async def execute(self, command: CreateCustomerCommandDTO) -> Result[CustomerDTO]:
        try:
            existing = await self.customer_repo.get_by_phone(command.phone)
            if existing:
                return Return.err(
                    Error(
                        code="DUPLICATE_PHONE",
                        message=f"Phone number {command.phone} already exists",
                        reason=f"customer_id={existing.id}",
                    )
                )

            supply_rate = command.supply_rate
            if supply_rate is None:
                settings = await self.settings_repo.get()
                supply_rate = (settings.default_supply_rate if settings else None) or Decimal("0")

            opening_balance = round_money(command.opening_balance)
            customer = Customer(
                name=command.name,
                phone=command.phone,
                supply_rate=round_money(supply_rate),
                opening_balance=opening_balance,
                current_balance=opening_balance,
                total_supplied=Decimal("0"),
                total_paid=Decimal("0"),
            )
            customer.last_supply_date = customer.created_day

            created = await self.customer_repo.create(customer)
            await self.uow.commit()

            return Return.ok(CustomerDTO.from_entity(created))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_CUSTOMER_FAILED",
                    message="Failed to create customer",
                    reason=str(e),
                )
            )
