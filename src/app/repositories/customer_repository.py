"""Customer Repository Interface

Defines the contract for customer persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from src.domain.customer import Customer


class CustomerRepository(ABC):
    """
    Repository interface for Customer persistence

    get_by_id(for_update=True) locks the row (SELECT FOR UPDATE) so that a
    reconciliation and its replay see one consistent customer state.
    """

    @abstractmethod
    async def get_by_id(self, customer_id: int, for_update: bool = False) -> Optional[Customer]:
        """
        Retrieve customer by ID

        Args:
            customer_id: Customer ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Customer if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        """
        Retrieve customer by phone number

        Args:
            phone: Normalized phone number

        Returns:
            Customer if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[Customer]:
        """
        Retrieve all customers ordered by ID

        Returns:
            List of customers
        """
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        """
        Create a new customer

        Args:
            customer: Customer entity to persist

        Returns:
            Created Customer with generated ID
        """
        pass

    @abstractmethod
    async def update(self, customer_id: int, fields: Dict[str, Any]) -> None:
        """
        Overwrite the given fields of one customer

        Args:
            customer_id: Customer ID
            fields: Column name -> new value
        """
        pass

    @abstractmethod
    async def delete(self, customer_id: int) -> None:
        """
        Delete a customer row

        Args:
            customer_id: Customer ID
        """
        pass

    @abstractmethod
    async def delete_all(self) -> None:
        """Delete every customer (backup restore)"""
        pass

    @abstractmethod
    async def bulk_insert(self, customers: List[Customer]) -> None:
        """
        Insert customers keeping their IDs (backup restore)

        Args:
            customers: Customers with explicit IDs
        """
        pass
