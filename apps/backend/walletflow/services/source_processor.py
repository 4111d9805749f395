from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from walletflow import models
from walletflow.services import cycle_calculator
from walletflow.services.errors import InsufficientBalance, WalletNotFound
from walletflow.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    NOT_DUE = "not-due"
    INSUFFICIENT_FUNDS = "insufficient-funds"
    WALLET_MISSING = "wallet-missing"


@dataclass
class Outcome:
    status: OutcomeStatus
    transaction: Optional[models.Transaction] = None
    reason: Optional[SkipReason] = None
    error: Optional[BaseException] = None

    @classmethod
    def processed(cls, transaction: models.Transaction) -> "Outcome":
        return cls(OutcomeStatus.PROCESSED, transaction=transaction)

    @classmethod
    def skipped(cls, reason: SkipReason) -> "Outcome":
        return cls(OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: BaseException) -> "Outcome":
        return cls(OutcomeStatus.FAILED, error=error)


def format_title_date(value: date) -> str:
    # "October 5, 2026"
    return f"{value:%B} {value.day}, {value.year}"


def scheduled_title(source: models.FinancialSource, reference_date: date) -> str:
    kind = models.SourceKind(source.kind)
    return f"Added {kind.label} for {source.name} on {format_title_date(reference_date)}"


def spontaneous_title(source: models.FinancialSource) -> str:
    return f"{models.SourceKind(source.kind).label}: {source.name}"


class SourceProcessor:
    """Turn one source occurrence into a ledger entry.

    Fixed sources go through ``process`` (gated by the cycle calculator and
    committed as their own unit of work). Spontaneous sources go through
    ``realize`` once, at creation time, inside the creator's unit of work.
    """

    def __init__(self, db: Session, ledger: LedgerService | None = None) -> None:
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def process(self, source: models.FinancialSource, reference_date: date) -> Outcome:
        source_id = source.id
        source_name = source.name
        kind = models.SourceKind(source.kind)
        try:
            if source.is_deleted or not source.is_fixed:
                return Outcome.skipped(SkipReason.NOT_DUE)
            if not cycle_calculator.is_due(source, reference_date):
                return Outcome.skipped(SkipReason.NOT_DUE)

            txn = self.ledger.apply(
                wallet_id=source.wallet_id,
                user_id=source.user_id,
                amount=source.amount,
                kind=kind.transaction_kind,
                title=scheduled_title(source, reference_date),
                description=source.description,
                occurred_at=datetime.combine(reference_date, time.min),
                source_id=source.id,
            )
            source.next_due_date = cycle_calculator.next_occurrence(source, reference_date)
            source.last_processed_on = reference_date
            self.db.commit()
        except InsufficientBalance as exc:
            self.db.rollback()
            logger.warning(
                "Insufficient balance for %s source %s (%s): current %s, required %s",
                kind.value,
                source_id,
                source_name,
                exc.balance,
                exc.required,
            )
            return Outcome.skipped(SkipReason.INSUFFICIENT_FUNDS)
        except WalletNotFound:
            self.db.rollback()
            logger.warning("Wallet not found for source %s (%s)", source_id, source_name)
            return Outcome.skipped(SkipReason.WALLET_MISSING)
        except Exception as exc:
            self.db.rollback()
            logger.exception("Error processing source %s (%s)", source_id, source_name)
            return Outcome.failed(exc)

        logger.info(
            "Processed %s source %s (%s): amount %s, transaction %s, next due %s",
            kind.value,
            source_id,
            source_name,
            txn.amount,
            txn.id,
            source.next_due_date,
        )
        return Outcome.processed(txn)

    def realize(self, source: models.FinancialSource) -> models.Transaction:
        """Book a spontaneous source immediately.

        ``InsufficientBalance`` and ``WalletNotFound`` propagate so the caller
        can reject the creation. Nothing is committed here.
        """
        kind = models.SourceKind(source.kind)
        if source.entry_date is None:
            source.entry_date = models.now_local_naive()
        return self.ledger.apply(
            wallet_id=source.wallet_id,
            user_id=source.user_id,
            amount=source.amount,
            kind=kind.transaction_kind,
            title=spontaneous_title(source),
            description=source.description or f"Spontaneous {kind.value} for {source.name}",
            occurred_at=source.entry_date,
            source_id=source.id,
        )
