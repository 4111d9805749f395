from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from walletflow import models
from walletflow.api.errors import to_http
from walletflow.core.database import get_db
from walletflow.core.deps import get_current_user
from walletflow.schemas import SourceCreate, SourceDraft, SourceOut, SourceUpdate
from walletflow.services import SourceService
from walletflow.services.errors import LedgerError


router = APIRouter(prefix="/sources", tags=["sources"])


def _create(payload: SourceCreate, db: Session, user: models.User) -> models.FinancialSource:
    try:
        return SourceService(db).create(payload.model_dump(), user_id=user.id)
    except LedgerError as exc:
        raise to_http(exc)


@router.post("", response_model=SourceOut, status_code=201)
def create_source(payload: SourceCreate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return _create(payload, db, current_user)


@router.get("", response_model=list[SourceOut])
def list_sources(
    kind: Optional[models.SourceKind] = Query(None),
    is_fixed: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return SourceService(db).get_all(user_id=current_user.id, kind=kind, is_fixed=is_fixed)


@router.get("/{source_id}", response_model=SourceOut)
def get_source(source_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    row = SourceService(db).get_by_id(current_user.id, source_id)
    if not row:
        raise HTTPException(status_code=404, detail="Source not found")
    return row


@router.patch("/{source_id}", response_model=SourceOut)
def update_source(
    source_id: int,
    payload: SourceUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    svc = SourceService(db)
    row = svc.get_by_id(current_user.id, source_id)
    if not row:
        raise HTTPException(status_code=404, detail="Source not found")
    try:
        return svc.update(row, payload.model_dump(exclude_unset=True))
    except LedgerError as exc:
        raise to_http(exc)


@router.delete("/{source_id}", status_code=204)
def delete_source(source_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    svc = SourceService(db)
    row = svc.get_by_id(current_user.id, source_id)
    if not row:
        raise HTTPException(status_code=404, detail="Source not found")
    svc.delete(row)
    return None


def _kind_router(kind: models.SourceKind) -> APIRouter:
    """``/incomes`` and ``/expenses``: same sources, kind taken from the path."""
    kind_router = APIRouter(prefix=f"/{kind.value}s", tags=["sources"])

    @kind_router.post("", response_model=SourceOut, status_code=201)
    def create_kind_source(
        payload: SourceDraft,
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user),
    ):
        return _create(payload.with_kind(kind), db, current_user)

    @kind_router.get("", response_model=list[SourceOut])
    def list_kind_sources(
        is_fixed: Optional[bool] = Query(None),
        db: Session = Depends(get_db),
        current_user: models.User = Depends(get_current_user),
    ):
        return SourceService(db).get_all(user_id=current_user.id, kind=kind, is_fixed=is_fixed)

    return kind_router


incomes_router = _kind_router(models.SourceKind.INCOME)
expenses_router = _kind_router(models.SourceKind.EXPENSE)
