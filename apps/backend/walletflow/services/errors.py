"""Domain errors raised by the ledger services.

The HTTP layer maps these onto status codes; the batch path turns them into
outcomes. None of them carry FastAPI types.
"""

from __future__ import annotations

from decimal import Decimal


class LedgerError(Exception):
    """Base class for expected business failures."""


class ValidationFailure(LedgerError):
    pass


class NotFound(LedgerError):
    entity = "Resource"

    def __init__(self, entity_id: int | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found")


class WalletNotFound(NotFound):
    entity = "Wallet"


class SourceNotFound(NotFound):
    entity = "Source"


class TransactionNotFound(NotFound):
    entity = "Transaction"


class InsufficientBalance(LedgerError):
    def __init__(self, wallet_id: int, balance: Decimal, required: Decimal) -> None:
        self.wallet_id = wallet_id
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient balance in wallet {wallet_id}: current {balance}, required {required}"
        )
