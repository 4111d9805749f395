from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from walletflow import models
from walletflow.core.config import settings
from walletflow.services.errors import LedgerError, TransactionNotFound, WalletNotFound
from walletflow.services.ledger_service import LedgerService


@dataclass
class TransactionSummary:
    total_credit: Decimal
    total_debit: Decimal
    count: int

    @property
    def net_amount(self) -> Decimal:
        return self.total_credit - self.total_debit


class TransactionService:
    """Read side of the ledger plus manual entries.

    Manual entries are booked through :class:`LedgerService`, the only code
    path that writes wallet balances.
    """

    def __init__(self, db: Session, ledger: LedgerService | None = None) -> None:
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def _require_owned_wallet(self, user_id: int, wallet_id: int) -> None:
        owned = (
            self.db.query(models.Wallet.id)
            .filter(
                models.Wallet.id == wallet_id,
                models.Wallet.user_id == user_id,
                models.Wallet.is_deleted.is_(False),
            )
            .first()
        )
        if owned is None:
            raise WalletNotFound(wallet_id)

    def _filtered(
        self,
        *,
        user_id: int,
        wallet_id: Optional[int] = None,
        kind: Optional[models.TransactionKind] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Query:
        q = self.db.query(models.Transaction).filter(
            models.Transaction.user_id == user_id,
            models.Transaction.is_deleted.is_(False),
        )
        if wallet_id is not None:
            self._require_owned_wallet(user_id, wallet_id)
            q = q.filter(models.Transaction.wallet_id == wallet_id)
        if kind is not None:
            q = q.filter(models.Transaction.kind == kind)
        if start is not None:
            q = q.filter(models.Transaction.occurred_at >= datetime.combine(start, time.min))
        if end is not None:
            # inclusive end date
            q = q.filter(models.Transaction.occurred_at < datetime.combine(end + timedelta(days=1), time.min))
        return q

    def get_all(
        self,
        *,
        user_id: int,
        wallet_id: Optional[int] = None,
        kind: Optional[models.TransactionKind] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> tuple[list[models.Transaction], int]:
        q = self._filtered(user_id=user_id, wallet_id=wallet_id, kind=kind, start=start, end=end)
        total = q.count()
        rows = (
            q.order_by(models.Transaction.occurred_at.desc(), models.Transaction.id.desc())
            .limit(limit or settings.TRANSACTION_LIST_LIMIT)
            .all()
        )
        return rows, total

    def summary(
        self,
        *,
        user_id: int,
        wallet_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> TransactionSummary:
        q = self._filtered(user_id=user_id, wallet_id=wallet_id, start=start, end=end)
        rows = (
            q.with_entities(
                models.Transaction.kind,
                func.coalesce(func.sum(models.Transaction.amount), 0),
                func.count(models.Transaction.id),
            )
            .group_by(models.Transaction.kind)
            .all()
        )
        totals = {models.TransactionKind(k): Decimal(str(s)) for k, s, _ in rows}
        return TransactionSummary(
            total_credit=totals.get(models.TransactionKind.CREDIT, Decimal("0")),
            total_debit=totals.get(models.TransactionKind.DEBIT, Decimal("0")),
            count=sum(int(c) for _, _, c in rows),
        )

    def get_by_id(self, user_id: int, txn_id: int) -> models.Transaction | None:
        return (
            self.db.query(models.Transaction)
            .filter(
                models.Transaction.id == txn_id,
                models.Transaction.user_id == user_id,
                models.Transaction.is_deleted.is_(False),
            )
            .first()
        )

    def require(self, user_id: int, txn_id: int) -> models.Transaction:
        row = self.get_by_id(user_id, txn_id)
        if row is None:
            raise TransactionNotFound(txn_id)
        return row

    def create(self, payload: dict, *, user_id: int) -> models.Transaction:
        wallet_id = payload["wallet_id"]
        self._require_owned_wallet(user_id, wallet_id)
        try:
            txn = self.ledger.apply(
                wallet_id=wallet_id,
                user_id=user_id,
                amount=payload["amount"],
                kind=payload["kind"],
                title=payload["title"].strip(),
                description=payload.get("description"),
                file=payload.get("file"),
                occurred_at=payload.get("occurred_at") or models.now_local_naive(),
            )
            self.db.commit()
        except LedgerError:
            self.db.rollback()
            raise
        self.db.refresh(txn)
        return txn

    def delete(self, row: models.Transaction) -> None:
        # soft delete only; the wallet balance is left as is
        row.soft_delete()
        self.db.commit()
