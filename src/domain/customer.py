"""Customer Domain Entity

A customer of the supply business. The summary fields (current balance,
totals, last supply date) are derived from the opening balance and the
customer's full transaction history and are only written by ledger replay.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date, DateTime
from src.domain.base import BaseModel, IdType, utc_now


class Customer(BaseModel, table=True):
    """
    Customer - Ledger owner with derived balance summary

    Domain Rules:
    - phone is unique across customers
    - opening_balance is the balance before any transaction (editable)
    - current_balance, total_supplied, total_paid and last_supply_date are
      derived by replaying the transaction history; never set them directly
    - Positive balance means the customer owes the business
    - Effective rate for a day = farm rate + supply_rate
    """

    __tablename__ = "customers"
    __table_args__ = (
        Index('ix_customers_name', 'name'),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique customer identifier (auto-increment)"
    )

    name: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Customer display name"
    )

    phone: str = Field(
        sa_column=Column(String(20), nullable=False, unique=True),
        description="Mobile number (unique, 03XXXXXXXXX)"
    )

    supply_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Per-unit add-on over the farm rate"
    )

    opening_balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Balance before the first transaction"
    )

    current_balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Derived: balance after the last transaction"
    )

    total_supplied: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 3), nullable=False, default=0),
        description="Derived: sum of supplied quantity"
    )

    total_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Derived: sum of payment amounts"
    )

    last_supply_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Derived: day of the chronologically latest supply"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=False), nullable=False),
        description="Customer creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=False), nullable=False),
        description="Last update timestamp"
    )

    @property
    def created_day(self) -> date:
        return self.created_at.date()

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "name": "Bismillah Chicken Shop",
                "phone": "03001234567",
                "supply_rate": "10.00",
                "opening_balance": "0.00",
                "current_balance": "680.00",
                "total_supplied": "8.000",
                "total_paid": "600.00",
                "last_supply_date": "2024-01-01",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-02T00:00:00Z"
            }
        }
