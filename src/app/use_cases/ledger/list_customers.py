"""List Customers Use Case"""

from typing import List
from libs.result import Result, Return
from src.app.repositories.customer_repository import CustomerRepository
from .dtos import CustomerDTO


class ListCustomers:

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    async def execute(self, search: str = "") -> Result[List[CustomerDTO]]:
        """
        List customers, optionally filtered by name or phone substring

        Args:
            search: Case-insensitive name fragment or phone fragment

        Returns:
            Result[List[CustomerDTO]]
        """
        customers = await self.customer_repo.get_all()
        term = search.strip().lower()
        if term:
            customers = [c for c in customers if term in c.name.lower() or term in c.phone]
        return Return.ok([CustomerDTO.from_entity(c) for c in customers])
