from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    RIDE = "ride"
    FUEL = "fuel"
    MAINTENANCE = "maintenance"
    FOOD = "food"
    PARKING = "parking"
    CAR_WASH = "car-wash"
    OTHER = "other"


class TransactionCreate(BaseModel):
    """Form payload for a new ledger entry; the id is assigned on commit."""

    type: TransactionType
    category: Category
    description: str | None = None
    amount: Decimal = Field(..., gt=0, description="Positive amount; the sign comes from `type`.")
    date: dt.date

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class Transaction(BaseModel):
    id: str = Field(..., description="Timestamp id assigned when the entry was created.")
    type: TransactionType
    category: Category
    description: str | None = None
    amount: Decimal = Field(..., ge=0)
    date: dt.date


class Totals(BaseModel):
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


class LedgerEntry(BaseModel):
    id: str
    type: TransactionType
    category: Category
    category_label: str
    description: str
    date: str
    amount: str
    value: Decimal


class LedgerView(BaseModel):
    totals: Totals
    formatted_totals: dict[str, str]
    balance_status: str
    entries: list[LedgerEntry]
    empty: bool


class RemoteConfig(BaseModel):
    endpoint: str
    key: str

    @field_validator("endpoint", "key")
    @classmethod
    def _require_value(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Both endpoint and key are required.")
        return value


class RemoteConfigStatus(BaseModel):
    configured: bool
    endpoint: str | None = None
    collection: str
