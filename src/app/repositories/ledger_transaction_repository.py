"""Ledger Transaction Repository Interface

The transaction store consumed by the ledger engine. Each method is a single
read or a single-record write; sequencing several writes into one unit is the
caller's job (see UnitOfWork).
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional
from src.domain.ledger_transaction import LedgerTransaction


class LedgerTransactionRepository(ABC):
    """
    Repository interface for LedgerTransaction persistence

    Lookups return transactions in no particular order; the engine imposes
    canonical order itself.
    """

    @abstractmethod
    async def get_by_id(self, transaction_id: int) -> Optional[LedgerTransaction]:
        """
        Retrieve transaction by ID

        Args:
            transaction_id: Transaction ID

        Returns:
            LedgerTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_customer_and_day_range(
        self, customer_id: int, start_day: date, end_day: date
    ) -> List[LedgerTransaction]:
        """
        Retrieve a customer's transactions with start_day <= day <= end_day

        Args:
            customer_id: Owning customer
            start_day: First day (inclusive)
            end_day: Last day (inclusive)

        Returns:
            List of transactions, order unspecified
        """
        pass

    @abstractmethod
    async def find_all_by_customer(self, customer_id: int) -> List[LedgerTransaction]:
        """
        Retrieve every transaction of a customer

        Args:
            customer_id: Owning customer

        Returns:
            List of transactions, order unspecified
        """
        pass

    @abstractmethod
    async def find_by_day_range(self, start_day: date, end_day: date) -> List[LedgerTransaction]:
        """
        Retrieve all customers' transactions in an inclusive day range

        Args:
            start_day: First day (inclusive)
            end_day: Last day (inclusive)

        Returns:
            List of transactions, order unspecified
        """
        pass

    @abstractmethod
    async def find_recent(self, limit: int = 10) -> List[LedgerTransaction]:
        """
        Retrieve the latest transactions by day (newest first)

        Args:
            limit: Maximum number of rows

        Returns:
            List of transactions
        """
        pass

    @abstractmethod
    async def insert(self, transaction: LedgerTransaction) -> int:
        """
        Persist a new transaction

        Args:
            transaction: Transaction without ID

        Returns:
            Generated transaction ID
        """
        pass

    @abstractmethod
    async def update(self, transaction_id: int, fields: Dict[str, Any]) -> None:
        """
        Overwrite the given fields of one transaction

        Args:
            transaction_id: Transaction ID
            fields: Column name -> new value
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: int) -> None:
        """
        Delete one transaction

        Args:
            transaction_id: Transaction ID
        """
        pass

    @abstractmethod
    async def delete_by_customer(self, customer_id: int) -> int:
        """
        Delete every transaction of a customer

        Args:
            customer_id: Owning customer

        Returns:
            Number of deleted rows
        """
        pass

    @abstractmethod
    async def delete_all(self) -> None:
        """Delete every transaction (backup restore)"""
        pass

    @abstractmethod
    async def bulk_insert(self, transactions: List[LedgerTransaction]) -> None:
        """
        Insert transactions keeping their IDs (backup restore)

        Args:
            transactions: Transactions with explicit IDs
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[LedgerTransaction]:
        """Retrieve every transaction (backup export)"""
        pass
