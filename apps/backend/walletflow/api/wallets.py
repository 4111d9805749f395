from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from walletflow import models
from walletflow.api.errors import to_http
from walletflow.core.database import get_db
from walletflow.core.deps import get_current_user
from walletflow.schemas import WalletCreate, WalletOut, WalletUpdate
from walletflow.services import WalletService
from walletflow.services.errors import LedgerError


router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get("", response_model=list[WalletOut])
def list_wallets(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return WalletService(db).get_all(user_id=current_user.id)


@router.post("", response_model=WalletOut, status_code=201)
def create_wallet(payload: WalletCreate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        return WalletService(db).create(payload.model_dump(), user_id=current_user.id)
    except LedgerError as exc:
        raise to_http(exc)


@router.post("/bulk", response_model=list[WalletOut], status_code=201)
def create_wallets(
    payload: list[WalletCreate],
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if not payload:
        raise HTTPException(status_code=400, detail="Wallets must be a non-empty array")
    try:
        return WalletService(db).create_many([p.model_dump() for p in payload], user_id=current_user.id)
    except LedgerError as exc:
        raise to_http(exc)


@router.get("/{wallet_id}", response_model=WalletOut)
def get_wallet(wallet_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    row = WalletService(db).get_by_id(current_user.id, wallet_id)
    if not row:
        raise HTTPException(status_code=404, detail="Wallet not found")
    return row


@router.patch("/{wallet_id}", response_model=WalletOut)
def update_wallet(
    wallet_id: int,
    payload: WalletUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    svc = WalletService(db)
    row = svc.get_by_id(current_user.id, wallet_id)
    if not row:
        raise HTTPException(status_code=404, detail="Wallet not found")
    return svc.update(row, payload.model_dump(exclude_unset=True))


@router.delete("/{wallet_id}", status_code=204)
def delete_wallet(wallet_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    svc = WalletService(db)
    row = svc.get_by_id(current_user.id, wallet_id)
    if not row:
        raise HTTPException(status_code=404, detail="Wallet not found")
    svc.delete(row)
    return None
