"""Ledger Transaction Domain Entity

One supply or one payment for a customer on a calendar day.
balance_after is a cached replay result, rewritten on every replay.
"""

from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String, Text, Date, DateTime
from src.domain.base import BaseModel, IdType, utc_now

MONEY_QUANTUM = Decimal("0.01")
QUANTITY_QUANTUM = Decimal("0.001")


class TransactionKind(str, Enum):
    """Ledger transaction kinds"""
    SUPPLY = "SUPPLY"      # Goods supplied, adds quantity x rate to the balance
    PAYMENT = "PAYMENT"    # Cash received, subtracts amount from the balance


class PaymentMethod(str, Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"


def round_money(value) -> Decimal:
    """Round half-up to the cents stored in money columns"""
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def round_quantity(value) -> Decimal:
    return Decimal(value).quantize(QUANTITY_QUANTUM, rounding=ROUND_HALF_UP)


def compute_supply_amount(quantity: Decimal, rate: Decimal) -> Decimal:
    """Billed amount for a supply, rounded half-up to cents"""
    return round_money(Decimal(quantity) * Decimal(rate))


class LedgerTransaction(BaseModel, table=True):
    """
    Ledger Transaction - Supply or payment on one day

    Domain Rules:
    - kind and customer_id never change after creation
    - At most one SUPPLY and one PAYMENT per (customer_id, day), enforced by
      day reconciliation rather than a database constraint
    - SUPPLY: amount = quantity * rate, quantity > 0
    - PAYMENT: amount > 0, quantity and rate are empty
    - No zero-amount rows: a kind absent on a day has no row
    - id is strictly increasing and is the final ordering tie-break
    """

    __tablename__ = "ledger_transactions"
    __table_args__ = (
        Index('ix_ledger_transactions_customer_day', 'customer_id', 'day'),
        Index('ix_ledger_transactions_day', 'day'),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    customer_id: int = Field(
        sa_column=Column(IdType, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False),
        description="Owning customer"
    )

    customer_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Customer name snapshot for reports"
    )

    day: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Calendar day of the entry"
    )

    kind: TransactionKind = Field(
        description="SUPPLY or PAYMENT"
    )

    quantity: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 3), nullable=True),
        description="Supplied quantity (SUPPLY only)"
    )

    rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Effective per-unit rate on the day (SUPPLY only)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Billed amount (SUPPLY) or amount received (PAYMENT)"
    )

    payment_method: Optional[PaymentMethod] = Field(
        default=None,
        description="How the payment was made (PAYMENT only)"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-text note (PAYMENT only)"
    )

    balance_after: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Derived: running balance after this entry in canonical order"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=False), nullable=False),
        description="Row creation timestamp"
    )

    @property
    def is_supply(self) -> bool:
        return self.kind == TransactionKind.SUPPLY

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "customer_id": 1,
                "customer_name": "Bismillah Chicken Shop",
                "day": "2024-01-01",
                "kind": "SUPPLY",
                "quantity": "10.000",
                "rate": "160.00",
                "amount": "1600.00",
                "payment_method": None,
                "notes": None,
                "balance_after": "1600.00",
                "created_at": "2024-01-01T08:00:00Z"
            }
        }
