from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from walletflow.core.database import get_db
from walletflow import models


def get_current_user(db: Session = Depends(get_db)) -> models.User:
    """Very lightweight current user resolver.

    Token validation lives in front of this service; here we return the first
    user (creating a demo one if none exists). Tests override this dependency
    to act as different users.
    """
    user = db.query(models.User).order_by(models.User.id).first()
    if not user:
        user = models.User(email="demo@example.com", display_name="Demo", is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
    return user
