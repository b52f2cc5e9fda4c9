"""Data Transfer Objects for Ledger Use Cases

Pydantic models for command inputs and response outputs.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from src.domain.base import as_naive_utc
from src.domain.customer import Customer
from src.domain.ledger_settings import LedgerSettings
from src.domain.ledger_transaction import (
    LedgerTransaction,
    PaymentMethod,
    TransactionKind,
    round_money,
    round_quantity,
)

PHONE_PATTERN = re.compile(r"^03\d{9}$")


def normalize_phone(value: str) -> str:
    """Strip dashes and spaces; raise ValueError unless it is 03XXXXXXXXX"""
    phone = value.replace("-", "").replace(" ", "").strip()
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Invalid format: 03XXXXXXXXX (11 digits)")
    return phone


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class CreateCustomerCommandDTO(BaseModel):
    """
    Command DTO for creating a customer

    Used as input to CreateCustomer use case.
    """

    name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Customer name (2-50 characters)"
    )

    phone: str = Field(
        ...,
        description="Mobile number, 03XXXXXXXXX (dashes allowed)"
    )

    supply_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=999,
        decimal_places=2,
        description="Per-unit add-on over the farm rate (defaults to settings.default_supply_rate)"
    )

    opening_balance: Decimal = Field(
        default=Decimal("0"),
        decimal_places=2,
        description="Balance before any transaction (negative = advance paid)"
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be 2-50 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Bismillah Chicken Shop",
                "phone": "0300-1234567",
                "supply_rate": "10.00",
                "opening_balance": "0.00"
            }
        }


class UpdateCustomerCommandDTO(BaseModel):
    """
    Command DTO for editing a customer

    Only the provided fields change. Changing opening_balance replays the
    whole ledger of the customer.
    """

    customer_id: int = Field(..., description="Customer ID")

    name: Optional[str] = Field(default=None, min_length=2, max_length=50)

    phone: Optional[str] = Field(default=None)

    supply_rate: Optional[Decimal] = Field(default=None, ge=0, le=999, decimal_places=2)

    opening_balance: Optional[Decimal] = Field(default=None, decimal_places=2)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be 2-50 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v) if v is not None else v


class CustomerDTO(BaseModel):
    """Customer with its derived balance summary"""

    id: int
    name: str
    phone: str
    supply_rate: Decimal
    opening_balance: Decimal
    current_balance: Decimal
    total_supplied: Decimal
    total_paid: Decimal
    last_supply_date: Optional[date] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerDTO":
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            supply_rate=customer.supply_rate,
            opening_balance=customer.opening_balance,
            current_balance=customer.current_balance,
            total_supplied=customer.total_supplied,
            total_paid=customer.total_paid,
            last_supply_date=customer.last_supply_date,
            created_at=customer.created_at,
        )


class UpdateCustomerResponseDTO(BaseModel):
    customer: CustomerDTO
    ledger_replayed: bool = Field(
        ...,
        description="True when the opening balance changed and every balance was recomputed"
    )


class DeleteCustomerResponseDTO(BaseModel):
    customer_id: int
    transactions_deleted: int


# ---------------------------------------------------------------------------
# Transactions and ledger views
# ---------------------------------------------------------------------------


class TransactionDTO(BaseModel):
    """Ledger transaction as shown in history lists"""

    id: int
    customer_id: int
    customer_name: Optional[str] = None
    day: date
    kind: TransactionKind
    quantity: Optional[Decimal] = None
    rate: Optional[Decimal] = None
    amount: Decimal
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    balance_after: Decimal

    @classmethod
    def from_entity(cls, txn: LedgerTransaction) -> "TransactionDTO":
        return cls(
            id=txn.id,
            customer_id=txn.customer_id,
            customer_name=txn.customer_name,
            day=txn.day,
            kind=txn.kind,
            quantity=txn.quantity,
            rate=txn.rate,
            amount=txn.amount,
            payment_method=txn.payment_method,
            notes=txn.notes,
            balance_after=txn.balance_after,
        )


class CustomerLedgerDTO(BaseModel):
    """
    Response DTO for a customer's ledger

    transactions are newest first; on the same day the payment is listed
    above the supply (the reverse of replay order).
    """

    customer: CustomerDTO
    transactions: List[TransactionDTO]
    average_daily_quantity: Decimal = Field(
        ...,
        description="Average supplied quantity per supply day over the last 30 days"
    )


class RecordSupplyCommandDTO(BaseModel):
    """
    Command DTO for a single supply entry

    quantity 0 removes the day's supply. The day's payment is not touched.
    """

    customer_id: int = Field(..., description="Customer ID")

    day: date = Field(..., description="Supply day")

    quantity: Decimal = Field(
        ...,
        ge=0,
        decimal_places=3,
        description="Supplied quantity (0 removes the day's supply)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "day": "2024-01-01",
                "quantity": "10.000"
            }
        }


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for a single payment entry

    amount 0 removes the day's payment. The day's supply is not touched.
    """

    customer_id: int = Field(..., description="Customer ID")

    day: date = Field(..., description="Payment day")

    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount received (0 removes the day's payment)"
    )

    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)

    notes: Optional[str] = Field(default=None, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "day": "2024-01-02",
                "amount": "600.00",
                "payment_method": "Cash",
                "notes": "Paid at shop"
            }
        }


class EntryResultDTO(BaseModel):
    """Outcome of reconciling one customer/day"""

    customer_id: int
    day: date
    changed: bool = Field(..., description="False when the submitted values matched what was stored")
    inserted_ids: List[int] = Field(default_factory=list)
    updated_ids: List[int] = Field(default_factory=list)
    deleted_ids: List[int] = Field(default_factory=list)
    current_balance: Decimal
    total_supplied: Decimal
    total_paid: Decimal

    @classmethod
    def from_reconciliation(cls, customer: Customer, reconciliation) -> "EntryResultDTO":
        # Summary comes from the replay when one ran, else the stored customer row
        source = reconciliation.replay.outcome if reconciliation.replay else customer
        return cls(
            customer_id=customer.id,
            day=reconciliation.day,
            changed=reconciliation.changed,
            inserted_ids=reconciliation.inserted,
            updated_ids=reconciliation.updated,
            deleted_ids=reconciliation.deleted,
            current_balance=source.current_balance,
            total_supplied=source.total_supplied,
            total_paid=source.total_paid,
        )


class DeleteTransactionResponseDTO(BaseModel):
    transaction_id: int
    customer_id: int
    current_balance: Decimal


# ---------------------------------------------------------------------------
# Daily sheet
# ---------------------------------------------------------------------------


class DailySheetEntryDTO(BaseModel):
    """One customer's row on the daily sheet (0 = nothing that day)"""

    customer_id: int
    quantity: Decimal = Field(
        default=Decimal("0"), decimal_places=3, description="Rejected per customer when negative"
    )
    payment: Decimal = Field(
        default=Decimal("0"), decimal_places=2, description="Rejected per customer when negative"
    )


class RecordDailySheetCommandDTO(BaseModel):
    """
    Command DTO for saving the daily sheet

    When farm_rate is given it becomes the new global farm rate before any
    entry is reconciled. Customers missing from entries are not touched.
    """

    day: date = Field(..., description="Sheet day")

    farm_rate: Optional[Decimal] = Field(
        default=None,
        gt=0,
        decimal_places=2,
        description="Farm rate for the day (persisted as the global rate)"
    )

    entries: List[DailySheetEntryDTO] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_customers(self):
        ids = [e.customer_id for e in self.entries]
        if len(ids) != len(set(ids)):
            raise ValueError("Each customer may appear only once on a daily sheet")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "day": "2024-01-01",
                "farm_rate": "150.00",
                "entries": [
                    {"customer_id": 1, "quantity": "10", "payment": "0"},
                    {"customer_id": 2, "quantity": "4.5", "payment": "1200"}
                ]
            }
        }


class DailySheetCustomerResultDTO(BaseModel):
    customer_id: int
    status: str = Field(..., description="updated, unchanged or failed")
    current_balance: Optional[Decimal] = None
    error_code: Optional[str] = None
    reason: Optional[str] = None


class DailySheetResultDTO(BaseModel):
    """Response DTO for RecordDailySheet (one unit of work per customer)"""

    day: date
    farm_rate: Decimal
    customers_updated: int
    customers_unchanged: int
    customers_failed: int
    results: List[DailySheetCustomerResultDTO]


class DailySheetRowDTO(BaseModel):
    customer_id: int
    customer_name: str
    quantity: Decimal
    payment: Decimal
    rate: Decimal = Field(..., description="Effective rate (farm rate + supply rate)")
    current_balance: Decimal


class DailySheetDTO(BaseModel):
    """Stored values of a day for every customer"""

    day: date
    farm_rate: Decimal
    is_new_record: bool = Field(..., description="True when no customer has an entry on this day")
    rows: List[DailySheetRowDTO]


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


class LedgerDiscrepancyDTO(BaseModel):
    """A cached derived value that disagrees with a fresh replay"""

    customer_id: int
    field: str
    transaction_id: Optional[int] = None
    stored: Optional[str] = None
    expected: Optional[str] = None


class ReconciliationResultDTO(BaseModel):
    total_customers_checked: int
    customers_inconsistent: int
    discrepancies_found: int
    discrepancies: List[LedgerDiscrepancyDTO]
    customers_repaired: int
    reconciliation_time: datetime
    execution_time_ms: int


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class PeriodReportDTO(BaseModel):
    start_day: date
    end_day: date
    total_supplied: Decimal
    total_billed: Decimal
    total_paid: Decimal
    transaction_count: int
    transactions: List[TransactionDTO]


class DashboardDTO(BaseModel):
    day: date
    total_customers: int
    total_outstanding: Decimal
    daily_supply_quantity: Decimal
    daily_supply_amount: Decimal
    weekly_growth_percent: Decimal = Field(
        ...,
        description="Supplied quantity of the last 7 days vs the 7 days before, in percent"
    )
    recent_transactions: List[TransactionDTO]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SettingsDTO(BaseModel):
    farm_rate: Decimal
    default_supply_rate: Optional[Decimal] = None
    last_backup: Optional[datetime] = None


class UpdateSettingsCommandDTO(BaseModel):
    farm_rate: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    default_supply_rate: Optional[Decimal] = Field(default=None, ge=0, le=999, decimal_places=2)


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


def _to_day(value):
    """Browser-app backups store days as ISO timestamps"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


BackupDay = Annotated[date, BeforeValidator(_to_day)]


class BackupCustomerDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    phone: str
    supply_rate: Decimal = Decimal("0")
    opening_balance: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    total_supplied: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    last_supply_date: Optional[BackupDay] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, customer: Customer) -> "BackupCustomerDTO":
        return cls(**CustomerDTO.from_entity(customer).model_dump())

    def to_entity(self) -> Customer:
        fields = self.model_dump()
        for name in ("supply_rate", "opening_balance", "current_balance", "total_paid"):
            fields[name] = round_money(fields[name])
        fields["total_supplied"] = round_quantity(fields["total_supplied"])
        if fields["created_at"] is None:
            fields.pop("created_at")
        else:
            fields["created_at"] = as_naive_utc(fields["created_at"])
        return Customer(**fields)


class BackupTransactionDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    customer_id: int
    customer_name: Optional[str] = None
    day: BackupDay = Field(validation_alias=AliasChoices("day", "date"))
    kind: TransactionKind = Field(validation_alias=AliasChoices("kind", "type"))
    quantity: Optional[Decimal] = None
    rate: Optional[Decimal] = None
    amount: Decimal = Field(..., gt=0)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    balance_after: Optional[Decimal] = None

    @field_validator("payment_method", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return None if v == "" else v

    @model_validator(mode="after")
    def supply_has_quantity(self):
        if self.kind == TransactionKind.SUPPLY and not (self.quantity and self.quantity > 0):
            raise ValueError(f"Supply transaction {self.id} must have a positive quantity")
        return self

    @classmethod
    def from_entity(cls, txn: LedgerTransaction) -> "BackupTransactionDTO":
        return cls(**TransactionDTO.from_entity(txn).model_dump())

    def to_entity(self) -> LedgerTransaction:
        fields = self.model_dump()
        if fields["balance_after"] is None:
            fields["balance_after"] = Decimal("0")
        # Column precision
        for name in ("rate", "amount", "balance_after"):
            if fields[name] is not None:
                fields[name] = round_money(fields[name])
        if fields["quantity"] is not None:
            fields["quantity"] = round_quantity(fields["quantity"])
        return LedgerTransaction(**fields)


class BackupSettingsDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    farm_rate: Decimal = Field(..., gt=0)
    default_supply_rate: Optional[Decimal] = None
    last_backup: Optional[datetime] = None

    @classmethod
    def from_entity(cls, settings: LedgerSettings) -> "BackupSettingsDTO":
        return cls(
            farm_rate=settings.farm_rate,
            default_supply_rate=settings.default_supply_rate,
            last_backup=settings.last_backup,
        )


class BackupDocumentDTO(BaseModel):
    """
    Full data snapshot

    Produced by ExportBackup (snake_case) and accepted by RestoreBackup in
    either snake_case or the camelCase layout of the browser app.
    """

    customers: List[BackupCustomerDTO] = Field(default_factory=list)
    transactions: List[BackupTransactionDTO] = Field(default_factory=list)
    settings: List[BackupSettingsDTO] = Field(default_factory=list)
    timestamp: Optional[datetime] = None


class RestoreResultDTO(BaseModel):
    customers_restored: int
    transactions_restored: int
    customers_replayed: int
    balances_corrected: int = Field(
        ...,
        description="Imported balance_after/summary values that the replay had to rewrite"
    )
