from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.config import settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(getattr(settings, "TIMEZONE", "UTC"))
except Exception:
    LOCAL_ZONE = ZoneInfo("UTC")


def now_local_naive() -> datetime:
    """Return naive datetime normalized to configured local timezone."""
    return datetime.now(LOCAL_ZONE).replace(tzinfo=None)


def today_local() -> date:
    return now_local_naive().date()


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class SoftDeleteMixin:
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime)

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.deleted_at = now_local_naive()


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    wallets: Mapped[list["Wallet"]] = relationship(back_populates="user")


class Wallet(Base, TimestampMixin, SoftDeleteMixin):
    """A user's pot of money. ``balance`` is written only by the ledger."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    initial_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    user: Mapped[User] = relationship(back_populates="wallets")

    __table_args__ = (
        CheckConstraint("initial_amount >= 0", name="ck_wallet_initial_non_negative"),
        Index("ix_wallet_user_deleted", "user_id", "is_deleted"),
    )


class SourceKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def transaction_kind(self) -> "TransactionKind":
        return TransactionKind.CREDIT if self is SourceKind.INCOME else TransactionKind.DEBIT


class CyclePeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class FinancialSource(Base, TimestampMixin, SoftDeleteMixin):
    """Declared income or expense, either recurring (fixed) or one-shot (spontaneous)."""

    __tablename__ = "financial_source"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallet.id"), nullable=False)
    kind: Mapped[SourceKind] = mapped_column(SAEnum(SourceKind, name="source_kind"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_fixed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # fixed sources
    cycle_day_of_month: Mapped[int | None] = mapped_column(Integer)  # 1-28 recommended
    cycle_period: Mapped[CyclePeriod | None] = mapped_column(SAEnum(CyclePeriod, name="cycle_period"))
    next_due_date: Mapped[date | None] = mapped_column(Date)
    last_processed_on: Mapped[date | None] = mapped_column(Date)

    # spontaneous sources
    entry_date: Mapped[datetime | None] = mapped_column(DateTime)

    wallet: Mapped[Wallet] = relationship()

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_source_amount_positive"),
        CheckConstraint(
            "(is_fixed = 1 AND cycle_day_of_month IS NOT NULL AND cycle_period IS NOT NULL AND entry_date IS NULL)"
            " OR (is_fixed = 0 AND entry_date IS NOT NULL AND cycle_day_of_month IS NULL AND cycle_period IS NULL)",
            name="ck_source_schedule_shape",
        ),
        CheckConstraint(
            "cycle_day_of_month IS NULL OR (cycle_day_of_month BETWEEN 1 AND 31)",
            name="ck_source_cycle_day_range",
        ),
        Index("ix_source_user_deleted", "user_id", "is_deleted"),
        Index("ix_source_kind_fixed", "kind", "is_fixed", "is_deleted"),
        Index("ix_source_wallet", "wallet_id"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        kind = getattr(self.kind, "value", self.kind)
        return (
            f"<FinancialSource id={self.id!r} kind={kind!r} name={self.name!r} "
            f"amount={self.amount!r} fixed={self.is_fixed!r} next_due={self.next_due_date!r}>"
        )


class TransactionKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


ALLOWED_FILE_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")


class Transaction(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallet.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    source_id: Mapped[int | None] = mapped_column(ForeignKey("financial_source.id", ondelete="SET NULL"))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    file: Mapped[str | None] = mapped_column(Text)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    kind: Mapped[TransactionKind] = mapped_column(SAEnum(TransactionKind, name="txn_kind"), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    wallet: Mapped[Wallet] = relationship()

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_txn_amount_positive"),
        Index("ix_txn_user_deleted", "user_id", "is_deleted"),
        Index("ix_txn_wallet", "wallet_id"),
        Index("ix_txn_occurred_at", "occurred_at"),
    )
