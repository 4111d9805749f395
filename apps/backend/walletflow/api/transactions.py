from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from walletflow import models
from walletflow.api.errors import to_http
from walletflow.core.database import get_db
from walletflow.core.deps import get_current_user
from walletflow.schemas import TransactionCreate, TransactionOut, TransactionSummaryOut
from walletflow.services import TransactionService
from walletflow.services.errors import LedgerError


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionOut, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        return TransactionService(db).create(payload.model_dump(), user_id=current_user.id)
    except LedgerError as exc:
        raise to_http(exc)


@router.get("", response_model=list[TransactionOut])
def list_transactions(
    response: Response,
    wallet_id: Optional[int] = Query(None, ge=1),
    kind: Optional[models.TransactionKind] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    try:
        rows, total = TransactionService(db).get_all(
            user_id=current_user.id, wallet_id=wallet_id, kind=kind, start=start, end=end, limit=limit
        )
    except LedgerError as exc:
        raise to_http(exc)
    response.headers["X-Total-Count"] = str(total)
    return rows


@router.get("/summary", response_model=TransactionSummaryOut)
def transaction_summary(
    wallet_id: Optional[int] = Query(None, ge=1),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        summary = TransactionService(db).summary(user_id=current_user.id, wallet_id=wallet_id, start=start, end=end)
    except LedgerError as exc:
        raise to_http(exc)
    return TransactionSummaryOut.model_validate(summary)


@router.get("/{txn_id}", response_model=TransactionOut)
def get_transaction(txn_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    row = TransactionService(db).get_by_id(current_user.id, txn_id)
    if not row:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return row


@router.delete("/{txn_id}", status_code=204)
def delete_transaction(txn_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    svc = TransactionService(db)
    row = svc.get_by_id(current_user.id, txn_id)
    if not row:
        raise HTTPException(status_code=404, detail="Transaction not found")
    svc.delete(row)
    return None
