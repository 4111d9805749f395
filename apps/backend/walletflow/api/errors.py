from __future__ import annotations

from fastapi import HTTPException

from walletflow.services.errors import InsufficientBalance, LedgerError, NotFound


def to_http(exc: LedgerError) -> HTTPException:
    """Translate a service error into the response the client sees."""
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InsufficientBalance):
        return HTTPException(status_code=400, detail="Insufficient wallet balance")
    return HTTPException(status_code=400, detail=str(exc))
