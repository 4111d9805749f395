from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from walletflow import models
from walletflow.services.errors import LedgerError, SourceNotFound, ValidationFailure, WalletNotFound
from walletflow.services.source_processor import SourceProcessor

logger = logging.getLogger(__name__)

_SCHEDULE_FIELDS = ("cycle_day_of_month", "cycle_period")
_UPDATABLE_FIELDS = {"name", "description", "amount", "entry_date", *_SCHEDULE_FIELDS}


def _validate_schedule(is_fixed: bool, data: dict) -> None:
    if is_fixed:
        day = data.get("cycle_day_of_month")
        if day is None or data.get("cycle_period") is None:
            raise ValidationFailure("Fixed sources require cycle_day_of_month and cycle_period")
        if not 1 <= int(day) <= 31:
            raise ValidationFailure("Cycle day must be between 1 and 31")
    elif any(data.get(f) is not None for f in _SCHEDULE_FIELDS):
        raise ValidationFailure("Spontaneous sources cannot carry a cycle")


class SourceService:
    """Owner-facing CRUD for income and expense sources."""

    def __init__(self, db: Session, processor: SourceProcessor | None = None) -> None:
        self.db = db
        self.processor = processor or SourceProcessor(db)

    def get_all(
        self,
        *,
        user_id: int,
        kind: Optional[models.SourceKind] = None,
        is_fixed: Optional[bool] = None,
    ) -> list[models.FinancialSource]:
        q = self.db.query(models.FinancialSource).filter(
            models.FinancialSource.user_id == user_id,
            models.FinancialSource.is_deleted.is_(False),
        )
        if kind is not None:
            q = q.filter(models.FinancialSource.kind == kind)
        if is_fixed is not None:
            q = q.filter(models.FinancialSource.is_fixed.is_(bool(is_fixed)))
        return q.order_by(models.FinancialSource.created_at.desc(), models.FinancialSource.id.desc()).all()

    def get_by_id(self, user_id: int, source_id: int) -> models.FinancialSource | None:
        return (
            self.db.query(models.FinancialSource)
            .filter(
                models.FinancialSource.user_id == user_id,
                models.FinancialSource.id == source_id,
                models.FinancialSource.is_deleted.is_(False),
            )
            .first()
        )

    def require(self, user_id: int, source_id: int) -> models.FinancialSource:
        row = self.get_by_id(user_id, source_id)
        if row is None:
            raise SourceNotFound(source_id)
        return row

    def create(self, payload: dict, *, user_id: int) -> models.FinancialSource:
        """Persist a source. Spontaneous sources are booked immediately.

        When booking a spontaneous source fails (e.g. ``InsufficientBalance``)
        nothing is persisted and the error propagates to the caller.
        """
        wallet = (
            self.db.query(models.Wallet)
            .filter(
                models.Wallet.id == payload.get("wallet_id"),
                models.Wallet.user_id == user_id,
                models.Wallet.is_deleted.is_(False),
            )
            .first()
        )
        if wallet is None:
            raise WalletNotFound(payload.get("wallet_id"))

        data = dict(payload)
        data["user_id"] = user_id
        data["name"] = (data.get("name") or "").strip()
        if not data["name"]:
            raise ValidationFailure("Source name is required")
        data["amount"] = Decimal(str(data["amount"]))
        if data["amount"] <= 0:
            raise ValidationFailure("Amount must be a positive number")

        is_fixed = bool(data.get("is_fixed", True))
        data["is_fixed"] = is_fixed
        _validate_schedule(is_fixed, data)
        if is_fixed:
            data["entry_date"] = None
            data["next_due_date"] = None
        else:
            data["entry_date"] = data.get("entry_date") or models.now_local_naive()

        row = models.FinancialSource(**data)
        self.db.add(row)
        try:
            self.db.flush()
            if not is_fixed:
                self.processor.realize(row)
            self.db.commit()
        except LedgerError:
            self.db.rollback()
            raise
        self.db.refresh(row)
        logger.info(
            "Created %s %s source %s (%s) on wallet %s",
            "fixed" if is_fixed else "spontaneous",
            row.kind.value,
            row.id,
            row.name,
            row.wallet_id,
        )
        return row

    def update(self, row: models.FinancialSource, patch: dict) -> models.FinancialSource:
        """Apply owner edits. Existing transactions are never touched."""
        patch = dict(patch)
        # null is_fixed means "leave as is"
        is_fixed = patch.pop("is_fixed", None)
        if is_fixed is not None and bool(is_fixed) != row.is_fixed:
            raise ValidationFailure("A source cannot switch between fixed and spontaneous")
        if not patch:
            return row
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailure(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "amount" in patch:
            if patch["amount"] is None:
                raise ValidationFailure("Amount must be a positive number")
            patch["amount"] = Decimal(str(patch["amount"]))
            if patch["amount"] <= 0:
                raise ValidationFailure("Amount must be a positive number")
        if "name" in patch:
            patch["name"] = (patch["name"] or "").strip()
            if not patch["name"]:
                raise ValidationFailure("Source name cannot be empty")

        merged = {f: patch.get(f, getattr(row, f)) for f in _SCHEDULE_FIELDS}
        _validate_schedule(row.is_fixed, merged)
        if not row.is_fixed and patch.get("entry_date", row.entry_date) is None:
            raise ValidationFailure("Spontaneous sources require an entry date")
        if row.is_fixed and "entry_date" in patch and patch["entry_date"] is not None:
            raise ValidationFailure("Fixed sources cannot carry an entry date")

        schedule_changed = any(f in patch and patch[f] != getattr(row, f) for f in _SCHEDULE_FIELDS)
        for key, value in patch.items():
            setattr(row, key, value)
        if schedule_changed:
            # re-derive from the new cycle on the next run
            row.next_due_date = None
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, row: models.FinancialSource) -> None:
        row.soft_delete()
        self.db.commit()
        logger.info("Soft-deleted source %s (%s)", row.id, row.name)
