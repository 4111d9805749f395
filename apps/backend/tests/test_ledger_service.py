from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from walletflow import models
from walletflow.services import LedgerService
from walletflow.services.errors import InsufficientBalance, ValidationFailure, WalletNotFound


WHEN = datetime(2026, 3, 5, 0, 0)


def _count_txns(db_session) -> int:
    return db_session.query(models.Transaction).count()


def test_credit_creates_transaction_and_raises_balance(db_session, user, make_wallet, balance_of):
    wallet = make_wallet("10000")
    ledger = LedgerService(db_session)

    txn = ledger.credit(wallet_id=wallet.id, user_id=user.id, amount="3000", title="Pay", occurred_at=WHEN)
    db_session.commit()

    assert txn.id is not None
    assert txn.kind == models.TransactionKind.CREDIT
    assert Decimal(str(txn.amount)) == Decimal("3000")
    assert balance_of(wallet.id) == Decimal("13000")


def test_debit_lowers_balance(db_session, user, make_wallet, balance_of):
    wallet = make_wallet("500")
    LedgerService(db_session).debit(wallet_id=wallet.id, user_id=user.id, amount=200, title="Food", occurred_at=WHEN)
    db_session.commit()
    assert balance_of(wallet.id) == Decimal("300")


def test_debit_of_whole_balance_is_allowed(db_session, user, make_wallet, balance_of):
    wallet = make_wallet("200")
    LedgerService(db_session).debit(wallet_id=wallet.id, user_id=user.id, amount=200, title="All", occurred_at=WHEN)
    db_session.commit()
    assert balance_of(wallet.id) == Decimal("0")


def test_insufficient_debit_leaves_no_trace(db_session, user, make_wallet, balance_of):
    wallet = make_wallet("1000")

    with pytest.raises(InsufficientBalance) as exc_info:
        LedgerService(db_session).debit(
            wallet_id=wallet.id, user_id=user.id, amount="5000", title="Rent", occurred_at=WHEN
        )
    db_session.rollback()

    assert exc_info.value.required == Decimal("5000")
    assert exc_info.value.balance == Decimal("1000")
    assert _count_txns(db_session) == 0
    assert balance_of(wallet.id) == Decimal("1000")


def test_guarded_debit_compensates_when_balance_drained_underneath(
    db_session, user, make_wallet, balance_of, monkeypatch
):
    wallet = make_wallet("1000")
    ledger = LedgerService(db_session)
    original = ledger._apply_guarded_debit

    def _drained(target, amount):
        # another writer empties the wallet after the pre-check
        db_session.query(models.Wallet).filter(models.Wallet.id == target.id).update(
            {models.Wallet.balance: Decimal("100")}, synchronize_session=False
        )
        return original(target, amount)

    monkeypatch.setattr(ledger, "_apply_guarded_debit", _drained)

    with pytest.raises(InsufficientBalance):
        ledger.debit(wallet_id=wallet.id, user_id=user.id, amount="600", title="Rent", occurred_at=WHEN)

    assert _count_txns(db_session) == 0
    assert balance_of(wallet.id) == Decimal("100")


def test_missing_or_deleted_wallet(db_session, user, make_wallet):
    ledger = LedgerService(db_session)
    with pytest.raises(WalletNotFound):
        ledger.credit(wallet_id=9999, user_id=user.id, amount=1, title="x", occurred_at=WHEN)

    wallet = make_wallet("100")
    wallet.soft_delete()
    db_session.commit()
    with pytest.raises(WalletNotFound):
        ledger.debit(wallet_id=wallet.id, user_id=user.id, amount=1, title="x", occurred_at=WHEN)
    assert _count_txns(db_session) == 0


@pytest.mark.parametrize("amount", [0, -5, "0.00"])
def test_non_positive_amount_rejected(db_session, user, make_wallet, amount):
    wallet = make_wallet("100")
    with pytest.raises(ValidationFailure):
        LedgerService(db_session).credit(wallet_id=wallet.id, user_id=user.id, amount=amount, title="x", occurred_at=WHEN)
    assert _count_txns(db_session) == 0


def test_file_reference_extension_checked(db_session, user, make_wallet):
    wallet = make_wallet("100")
    ledger = LedgerService(db_session)
    with pytest.raises(ValidationFailure):
        ledger.credit(wallet_id=wallet.id, user_id=user.id, amount=1, title="x", occurred_at=WHEN, file="receipt.exe")

    txn = ledger.credit(
        wallet_id=wallet.id, user_id=user.id, amount=1, title="x", occurred_at=WHEN, file="uploads/Receipt.PNG"
    )
    assert txn.file == "uploads/Receipt.PNG"
