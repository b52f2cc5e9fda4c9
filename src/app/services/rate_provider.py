"""Rate Provider Interface

Supplies the global farm rate. A customer's effective rate for a day is the
farm rate plus the customer's own supply_rate add-on.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from src.domain.customer import Customer
from src.domain.ledger_transaction import round_money


class RateProvider(ABC):

    @abstractmethod
    async def get_farm_rate(self) -> Decimal:
        """
        Current global base rate per unit

        Returns:
            Farm rate
        """
        pass

    async def effective_rate(self, customer: Customer) -> Decimal:
        farm_rate = await self.get_farm_rate()
        return round_money(Decimal(farm_rate) + Decimal(customer.supply_rate or 0))


class FixedRateProvider(RateProvider):
    """Rate provider pinned to one farm rate (e.g. the rate entered on a daily sheet)"""

    def __init__(self, farm_rate: Decimal):
        self.farm_rate = Decimal(farm_rate)

    async def get_farm_rate(self) -> Decimal:
        return self.farm_rate
