from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from walletflow import models
from walletflow.services.errors import InsufficientBalance, ValidationFailure, WalletNotFound

logger = logging.getLogger(__name__)


def _to_amount(value: Decimal | int | float | str) -> Decimal:
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailure("amount must be a positive number")
    return amount


def validate_file_reference(file: Optional[str]) -> Optional[str]:
    if not file:
        return None
    if not file.lower().endswith(models.ALLOWED_FILE_EXTENSIONS):
        raise ValidationFailure("File must be PDF, JPG, or PNG format")
    return file


class LedgerService:
    """Create a transaction and move the wallet balance as one unit of work.

    The service flushes but never commits. Callers commit (or roll back) the
    transaction row, the balance change and anything else they changed in the
    same session together.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def apply(
        self,
        *,
        wallet_id: int,
        user_id: int,
        amount: Decimal | int | float | str,
        kind: models.TransactionKind,
        title: str,
        occurred_at: datetime,
        description: Optional[str] = None,
        file: Optional[str] = None,
        source_id: Optional[int] = None,
    ) -> models.Transaction:
        magnitude = _to_amount(amount)
        kind = models.TransactionKind(kind)
        file = validate_file_reference(file)

        wallet = self._get_wallet(wallet_id)
        if kind is models.TransactionKind.DEBIT:
            # Re-read on every call; balances are never cached between debits.
            self.db.refresh(wallet, ["balance"])
            current = Decimal(wallet.balance or 0)
            if current < magnitude:
                raise InsufficientBalance(wallet_id, current, magnitude)

        txn = models.Transaction(
            wallet_id=wallet_id,
            user_id=user_id,
            source_id=source_id,
            title=title,
            description=description,
            file=file,
            amount=magnitude,
            kind=kind,
            occurred_at=occurred_at,
        )
        self.db.add(txn)
        self.db.flush()

        if kind is models.TransactionKind.CREDIT:
            self._apply_delta(wallet, magnitude)
        elif not self._apply_guarded_debit(wallet, magnitude):
            # Another writer drained the wallet between the check and the update.
            self.db.delete(txn)
            self.db.flush()
            self.db.refresh(wallet, ["balance"])
            raise InsufficientBalance(wallet_id, Decimal(wallet.balance or 0), magnitude)

        logger.debug(
            "Ledger %s of %s applied to wallet %s (transaction %s)",
            kind.value,
            magnitude,
            wallet_id,
            txn.id,
        )
        return txn

    def credit(self, **kwargs) -> models.Transaction:
        return self.apply(kind=models.TransactionKind.CREDIT, **kwargs)

    def debit(self, **kwargs) -> models.Transaction:
        return self.apply(kind=models.TransactionKind.DEBIT, **kwargs)

    def _get_wallet(self, wallet_id: int) -> models.Wallet:
        wallet = (
            self.db.query(models.Wallet)
            .filter(models.Wallet.id == wallet_id, models.Wallet.is_deleted.is_(False))
            .first()
        )
        if not wallet:
            raise WalletNotFound(wallet_id)
        return wallet

    def _apply_delta(self, wallet: models.Wallet, delta: Decimal) -> None:
        self.db.query(models.Wallet).filter(models.Wallet.id == wallet.id).update(
            {models.Wallet.balance: models.Wallet.balance + delta}, synchronize_session=False
        )
        self.db.expire(wallet, ["balance"])

    def _apply_guarded_debit(self, wallet: models.Wallet, amount: Decimal) -> bool:
        updated = (
            self.db.query(models.Wallet)
            .filter(models.Wallet.id == wallet.id, models.Wallet.balance >= amount)
            .update({models.Wallet.balance: models.Wallet.balance - amount}, synchronize_session=False)
        )
        self.db.expire(wallet, ["balance"])
        return bool(updated)
