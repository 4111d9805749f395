from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from walletflow import models
from walletflow.services.errors import ValidationFailure, WalletNotFound


class WalletService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_all(self, *, user_id: int) -> list[models.Wallet]:
        return (
            self.db.query(models.Wallet)
            .filter(models.Wallet.user_id == user_id, models.Wallet.is_deleted.is_(False))
            .order_by(models.Wallet.is_default.desc(), models.Wallet.created_at.desc(), models.Wallet.id.desc())
            .all()
        )

    def get_by_id(self, user_id: int, wallet_id: int) -> models.Wallet | None:
        return (
            self.db.query(models.Wallet)
            .filter(
                models.Wallet.user_id == user_id,
                models.Wallet.id == wallet_id,
                models.Wallet.is_deleted.is_(False),
            )
            .first()
        )

    def require(self, user_id: int, wallet_id: int) -> models.Wallet:
        wallet = self.get_by_id(user_id, wallet_id)
        if wallet is None:
            raise WalletNotFound(wallet_id)
        return wallet

    def _add(self, payload: dict, user_id: int) -> models.Wallet:
        initial = Decimal(str(payload.get("initial_amount") or 0))
        if initial < 0:
            raise ValidationFailure("Initial amount cannot be negative")
        payload["user_id"] = user_id
        payload["initial_amount"] = initial
        # a new wallet starts at its initial amount
        payload["balance"] = initial
        row = models.Wallet(**payload)
        self.db.add(row)
        self.db.flush()
        if row.is_default:
            self._clear_other_defaults(row)
        return row

    def create(self, payload: dict, *, user_id: int) -> models.Wallet:
        return self.create_many([payload], user_id=user_id)[0]

    def create_many(self, payloads: list[dict], *, user_id: int) -> list[models.Wallet]:
        """Create all wallets or none."""
        try:
            rows = [self._add(dict(p), user_id) for p in payloads]
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for row in rows:
            self.db.refresh(row)
        return rows

    def update(self, row: models.Wallet, patch: dict) -> models.Wallet:
        # balance is owned by the ledger
        patch = {k: v for k, v in patch.items() if v is not None and k not in ("balance", "initial_amount")}
        if not patch:
            return row
        for key, value in patch.items():
            setattr(row, key, value)
        if patch.get("is_default"):
            self._clear_other_defaults(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, row: models.Wallet) -> None:
        row.soft_delete()
        row.is_default = False
        self.db.commit()

    def _clear_other_defaults(self, row: models.Wallet) -> None:
        self.db.query(models.Wallet).filter(
            models.Wallet.user_id == row.user_id,
            models.Wallet.id != row.id,
            models.Wallet.is_default.is_(True),
        ).update({models.Wallet.is_default: False}, synchronize_session=False)
