"""Request schemas for Ledger API

Bodies whose shape differs from the use-case command DTOs.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class UpdateCustomerRequestSchema(BaseModel):
    """
    Request schema for editing a customer

    Used for PATCH /customers/{customer_id}. Omitted fields keep their value.
    """

    name: Optional[str] = Field(default=None, description="New display name")

    phone: Optional[str] = Field(default=None, description="New mobile number")

    supply_rate: Optional[Decimal] = Field(default=None, description="New per-unit add-on")

    opening_balance: Optional[Decimal] = Field(
        default=None,
        description="New opening balance (replays the customer's ledger)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "opening_balance": "500.00"
            }
        }


class ReconcileRequestSchema(BaseModel):
    """Request schema for POST /ledger/reconcile"""

    repair: bool = Field(
        default=False,
        description="Rewrite derived values of inconsistent customers"
    )
