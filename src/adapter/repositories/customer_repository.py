"""SQLAlchemy implementation of CustomerRepository

Provides persistence for Customer entities with pessimistic locking support
so a reconciliation and its replay work on one consistent customer row.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import delete, func, text
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.base import utc_now
from src.domain.customer import Customer


class SqlAlchemyCustomerRepository(CustomerRepository):
    """
    SQLAlchemy implementation of CustomerRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Field-level updates (only the given columns are touched)
    - ID-preserving bulk insert for backup restore
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, customer_id: int, for_update: bool = False) -> Optional[Customer]:
        """
        Retrieve customer by ID with optional row-level locking

        Args:
            customer_id: Customer ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Customer if found, None otherwise
        """
        stmt = select(Customer).where(Customer.id == customer_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.phone == phone)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> List[Customer]:
        stmt = select(Customer).order_by(Customer.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, customer: Customer) -> Customer:
        """
        Create a new customer

        Args:
            customer: Customer entity to persist

        Returns:
            Created Customer with generated ID
        """
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer

    async def update(self, customer_id: int, fields: Dict[str, Any]) -> None:
        """
        Overwrite the given fields and bump updated_at

        Args:
            customer_id: Customer ID
            fields: Column name -> new value

        Note:
            Should be called within a transaction with the customer already locked
        """
        customer = await self.get_by_id(customer_id)
        if customer:
            for name, value in fields.items():
                setattr(customer, name, value)
            customer.updated_at = utc_now()
            self.session.add(customer)
            await self.session.flush()

    async def delete(self, customer_id: int) -> None:
        customer = await self.get_by_id(customer_id)
        if customer:
            await self.session.delete(customer)
            await self.session.flush()

    async def delete_all(self) -> None:
        await self.session.execute(delete(Customer))
        await self.session.flush()

    async def bulk_insert(self, customers: List[Customer]) -> None:
        """
        Insert customers keeping their IDs

        Args:
            customers: Customers with explicit IDs

        Note:
            On PostgreSQL the ID sequence is moved past the restored IDs
        """
        self.session.add_all(customers)
        await self.session.flush()

        if customers and self.session.get_bind().dialect.name == "postgresql":
            max_id = (await self.session.execute(select(func.max(Customer.id)))).scalar_one()
            await self.session.execute(
                text("SELECT setval(pg_get_serial_sequence('customers', 'id'), :max_id)"),
                {"max_id": max_id},
            )
