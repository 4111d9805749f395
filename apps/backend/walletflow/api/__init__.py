"""Router aggregation for the HTTP surface."""

from fastapi import FastAPI

from . import jobs, sources, transactions, wallets


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    app.include_router(wallets.router, prefix="/api")
    app.include_router(sources.router, prefix="/api")
    app.include_router(sources.incomes_router, prefix="/api")
    app.include_router(sources.expenses_router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(jobs.router, prefix="/api")
