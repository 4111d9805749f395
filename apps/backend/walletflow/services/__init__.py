"""
Services package

Business logic for wallets, sources and the ledger.
"""

from .batch_driver import BatchDriver, RunReport, RunStats
from .ledger_service import LedgerService
from .source_processor import Outcome, OutcomeStatus, SkipReason, SourceProcessor
from .source_service import SourceService
from .transaction_service import TransactionService, TransactionSummary
from .wallet_service import WalletService

__all__ = [
    "BatchDriver",
    "RunReport",
    "RunStats",
    "LedgerService",
    "Outcome",
    "OutcomeStatus",
    "SkipReason",
    "SourceProcessor",
    "SourceService",
    "TransactionService",
    "TransactionSummary",
    "WalletService",
]
