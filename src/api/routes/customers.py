"""Customer API Routes"""

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.ledger_request import UpdateCustomerRequestSchema
from src.app.use_cases.ledger.dtos import (
    CreateCustomerCommandDTO,
    UpdateCustomerCommandDTO,
    CustomerDTO,
    UpdateCustomerResponseDTO,
    DeleteCustomerResponseDTO,
    CustomerLedgerDTO,
)
from src.app.use_cases.ledger import (
    CreateCustomer,
    UpdateCustomer,
    DeleteCustomer,
    ListCustomers,
    GetCustomerLedger,
)
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyLedgerTransactionRepository,
    SqlAlchemyLedgerSettingsRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError
from libs.result import Error

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post(
    "",
    response_model=CustomerDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Phone number already registered",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "DUPLICATE_PHONE",
                            "message": "Phone number 03001234567 already exists"
                        }
                    }
                }
            }
        }
    }
)
async def create_customer(
    request: CreateCustomerCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """
    Register a customer.

    **Request body:**
    - `name` (required): 2-50 characters
    - `phone` (required): 03XXXXXXXXX, dashes are stripped
    - `supply_rate` (optional): per-unit add-on over the farm rate (0-999)
    - `opening_balance` (optional): balance before any transaction
    """
    use_case = CreateCustomer(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerSettingsRepository(session),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("", response_model=List[CustomerDTO])
async def list_customers(
    search: str = Query(default="", description="Name or phone fragment"),
    session: AsyncSession = Depends(get_session)
):
    result = await ListCustomers(SqlAlchemyCustomerRepository(session)).execute(search)
    return result.value


@router.get("/{customer_id}", response_model=CustomerDTO)
async def get_customer(customer_id: int, session: AsyncSession = Depends(get_session)):
    customer = await SqlAlchemyCustomerRepository(session).get_by_id(customer_id)
    if not customer:
        raise ClientError(
            Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
        )
    return CustomerDTO.from_entity(customer)


@router.patch("/{customer_id}", response_model=UpdateCustomerResponseDTO)
async def update_customer(
    customer_id: int,
    request: UpdateCustomerRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Edit a customer.

    Changing `opening_balance` recomputes every running balance of the
    customer before the response is returned. Changing `supply_rate` only
    affects entries reconciled afterwards.
    """
    command = UpdateCustomerCommandDTO(customer_id=customer_id, **request.model_dump())

    use_case = UpdateCustomer(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete("/{customer_id}", response_model=DeleteCustomerResponseDTO)
async def delete_customer(customer_id: int, session: AsyncSession = Depends(get_session)):
    """Delete a customer and all of its transactions."""
    use_case = DeleteCustomer(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(customer_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{customer_id}/ledger", response_model=CustomerLedgerDTO)
async def get_customer_ledger(customer_id: int, session: AsyncSession = Depends(get_session)):
    """
    Customer summary plus transaction history, newest first.

    Each transaction carries `balance_after`, the running balance right after
    it in chronological order.
    """
    use_case = GetCustomerLedger(
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyLedgerTransactionRepository(session),
    )
    result = await use_case.execute(customer_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
