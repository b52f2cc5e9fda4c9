"""SQLAlchemy implementation of LedgerTransactionRepository

The transaction store behind the ledger engine. Every method is one query or
one single-record write inside the caller's session; nothing here commits.
"""

from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy import delete, func, text
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_transaction_repository import LedgerTransactionRepository
from src.domain.ledger_transaction import LedgerTransaction


class SqlAlchemyLedgerTransactionRepository(LedgerTransactionRepository):
    """
    SQLAlchemy implementation of LedgerTransactionRepository

    Features:
    - Day-range lookups backed by (customer_id, day) and (day) indexes
    - Field-level point updates
    - ID-preserving bulk insert for backup restore
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, transaction_id: int) -> Optional[LedgerTransaction]:
        stmt = select(LedgerTransaction).where(LedgerTransaction.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_customer_and_day_range(
        self, customer_id: int, start_day: date, end_day: date
    ) -> List[LedgerTransaction]:
        """
        Retrieve a customer's transactions within an inclusive day range

        Args:
            customer_id: Owning customer
            start_day: First day (inclusive)
            end_day: Last day (inclusive)

        Returns:
            List of transactions
        """
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.customer_id == customer_id)
            .where(LedgerTransaction.day >= start_day)
            .where(LedgerTransaction.day <= end_day)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_all_by_customer(self, customer_id: int) -> List[LedgerTransaction]:
        stmt = select(LedgerTransaction).where(LedgerTransaction.customer_id == customer_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_day_range(self, start_day: date, end_day: date) -> List[LedgerTransaction]:
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.day >= start_day)
            .where(LedgerTransaction.day <= end_day)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_recent(self, limit: int = 10) -> List[LedgerTransaction]:
        stmt = (
            select(LedgerTransaction)
            .order_by(LedgerTransaction.day.desc(), LedgerTransaction.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_all(self) -> List[LedgerTransaction]:
        stmt = select(LedgerTransaction).order_by(LedgerTransaction.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def insert(self, transaction: LedgerTransaction) -> int:
        """
        Persist a new transaction

        Args:
            transaction: LedgerTransaction without ID

        Returns:
            Generated transaction ID
        """
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction.id

    async def update(self, transaction_id: int, fields: Dict[str, Any]) -> None:
        transaction = await self.get_by_id(transaction_id)
        if transaction:
            for name, value in fields.items():
                setattr(transaction, name, value)
            self.session.add(transaction)
            await self.session.flush()

    async def delete(self, transaction_id: int) -> None:
        transaction = await self.get_by_id(transaction_id)
        if transaction:
            await self.session.delete(transaction)
            await self.session.flush()

    async def delete_by_customer(self, customer_id: int) -> int:
        result = await self.session.execute(
            delete(LedgerTransaction).where(LedgerTransaction.customer_id == customer_id)
        )
        await self.session.flush()
        return result.rowcount

    async def delete_all(self) -> None:
        await self.session.execute(delete(LedgerTransaction))
        await self.session.flush()

    async def bulk_insert(self, transactions: List[LedgerTransaction]) -> None:
        """
        Insert transactions keeping their IDs

        IDs are the final ordering tie-break, so restored rows must keep them.

        Args:
            transactions: Transactions with explicit IDs
        """
        self.session.add_all(transactions)
        await self.session.flush()

        if transactions and self.session.get_bind().dialect.name == "postgresql":
            max_id = (await self.session.execute(select(func.max(LedgerTransaction.id)))).scalar_one()
            await self.session.execute(
                text("SELECT setval(pg_get_serial_sequence('ledger_transactions', 'id'), :max_id)"),
                {"max_id": max_id},
            )
