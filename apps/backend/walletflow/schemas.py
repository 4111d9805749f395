from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import ALLOWED_FILE_EXTENSIONS, CyclePeriod, SourceKind, TransactionKind


def _check_file_reference(value: Optional[str]) -> Optional[str]:
    if value and not value.lower().endswith(ALLOWED_FILE_EXTENSIONS):
        raise ValueError("File must be PDF, JPG, or PNG format")
    return value or None


# --- Wallets -------------------------------------------------------------------

class WalletBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False


class WalletCreate(WalletBase):
    initial_amount: Decimal = Field(default=Decimal("0"), ge=0)


class WalletUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    is_default: Optional[bool] = None


class WalletOut(WalletBase):
    id: int
    user_id: int
    initial_amount: Decimal
    balance: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Financial sources ---------------------------------------------------------

class SourceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Decimal = Field(..., gt=0)


class SourceDraft(SourceBase):
    """Source body without the kind; the ``/incomes`` and ``/expenses`` routes supply it."""

    wallet_id: int = Field(..., ge=1)
    is_fixed: bool = True
    cycle_day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    cycle_period: Optional[CyclePeriod] = None
    entry_date: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @model_validator(mode="after")
    def _check_schedule_shape(self) -> "SourceDraft":
        if self.is_fixed:
            if self.cycle_day_of_month is None or self.cycle_period is None:
                raise ValueError("fixed sources require cycle_day_of_month and cycle_period")
            if self.entry_date is not None:
                raise ValueError("fixed sources cannot carry entry_date")
        elif self.cycle_day_of_month is not None or self.cycle_period is not None:
            raise ValueError("spontaneous sources cannot carry a cycle")
        return self

    def with_kind(self, kind: SourceKind) -> "SourceCreate":
        return SourceCreate(kind=kind, **self.model_dump())


class SourceCreate(SourceDraft):
    kind: SourceKind


class SourceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    is_fixed: Optional[bool] = None
    cycle_day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    cycle_period: Optional[CyclePeriod] = None
    entry_date: Optional[datetime] = None


class SourceOut(SourceBase):
    id: int
    user_id: int
    wallet_id: int
    kind: SourceKind
    is_fixed: bool
    cycle_day_of_month: Optional[int] = None
    cycle_period: Optional[CyclePeriod] = None
    next_due_date: Optional[date] = None
    last_processed_on: Optional[date] = None
    entry_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Transactions --------------------------------------------------------------

class TransactionCreate(BaseModel):
    wallet_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Decimal = Field(..., gt=0)
    kind: TransactionKind
    occurred_at: Optional[datetime] = None
    file: Optional[str] = None

    @field_validator("file")
    @classmethod
    def _check_file(cls, v: Optional[str]) -> Optional[str]:
        return _check_file_reference(v)


class TransactionOut(BaseModel):
    id: int
    wallet_id: int
    user_id: int
    source_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    file: Optional[str] = None
    amount: Decimal
    kind: TransactionKind
    occurred_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionSummaryOut(BaseModel):
    total_credit: Decimal
    total_debit: Decimal
    net_amount: Decimal
    count: int

    model_config = ConfigDict(from_attributes=True)


# --- Daily run -----------------------------------------------------------------

class RunStatsOut(BaseModel):
    total: int
    processed_count: int
    skipped_count: int
    failed_count: int
    insufficient_funds_count: int

    model_config = ConfigDict(from_attributes=True)


class RunReportOut(BaseModel):
    reference_date: date
    total: int
    processed_count: int
    skipped_count: int
    failed_count: int
    insufficient_funds_count: int
    income: RunStatsOut
    expense: RunStatsOut
