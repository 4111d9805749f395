from __future__ import annotations

import os
import tempfile
from decimal import Decimal
from typing import Generator, Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from walletflow.core.database import Base, get_db
from walletflow.main import app
from walletflow import models


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # temp-file SQLite so the developer database is never touched
    fd, path = tempfile.mkstemp(prefix="walletflow_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def db_session(engine, session_factory) -> Generator[Any, Any, Any]:
    session = session_factory()
    # seed: demo user(1)
    session.add(models.User(email="demo@example.com", display_name="Demo", is_active=True))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user(db_session) -> models.User:
    return db_session.query(models.User).filter_by(email="demo@example.com").one()


@pytest.fixture()
def make_wallet(db_session, user):
    def _make(balance: str | int = "0", *, name: str = "Main", is_default: bool = False) -> models.Wallet:
        amount = Decimal(str(balance))
        wallet = models.Wallet(
            user_id=user.id,
            name=name,
            initial_amount=amount,
            balance=amount,
            is_default=is_default,
        )
        db_session.add(wallet)
        db_session.commit()
        db_session.refresh(wallet)
        return wallet

    return _make


@pytest.fixture()
def make_fixed_source(db_session, user):
    def _make(
        wallet: models.Wallet,
        *,
        kind: models.SourceKind = models.SourceKind.INCOME,
        amount: str | int = "100",
        day: int = 1,
        period: models.CyclePeriod = models.CyclePeriod.MONTHLY,
        name: str = "Salary",
        description: str | None = None,
    ) -> models.FinancialSource:
        source = models.FinancialSource(
            user_id=user.id,
            wallet_id=wallet.id,
            kind=kind,
            name=name,
            description=description,
            amount=Decimal(str(amount)),
            is_fixed=True,
            cycle_day_of_month=day,
            cycle_period=period,
        )
        db_session.add(source)
        db_session.commit()
        db_session.refresh(source)
        return source

    return _make


@pytest.fixture()
def balance_of(db_session):
    def _balance(wallet_id: int) -> Decimal:
        wallet = db_session.get(models.Wallet, wallet_id)
        db_session.refresh(wallet)
        return Decimal(str(wallet.balance))

    return _balance
