"""Ledger Settings Domain Entity

Single-row table holding the global farm rate.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String, DateTime
from src.domain.base import BaseModel, utc_now

GLOBAL_SETTINGS_ID = "global"


class LedgerSettings(BaseModel, table=True):
    """
    Ledger Settings - Global pricing and backup bookkeeping

    Domain Rules:
    - Exactly one row, id = "global"
    - farm_rate is the base per-unit rate shared by all customers
    """

    __tablename__ = "ledger_settings"

    id: str = Field(
        default=GLOBAL_SETTINGS_ID,
        sa_column=Column(String(20), primary_key=True),
        description="Settings row key"
    )

    farm_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Global base rate per unit"
    )

    default_supply_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Suggested supply_rate for new customers"
    )

    last_backup: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=False), nullable=True),
        description="When the last backup export was taken"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=False), nullable=False),
        description="Last update timestamp"
    )
