from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from walletflow import models
from walletflow.services.source_processor import Outcome, OutcomeStatus, SkipReason, SourceProcessor

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    total: int = 0
    processed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    insufficient_funds_count: int = 0

    def record(self, outcome: Outcome) -> None:
        self.total += 1
        if outcome.status is OutcomeStatus.PROCESSED:
            self.processed_count += 1
        elif outcome.status is OutcomeStatus.FAILED:
            self.failed_count += 1
        elif outcome.reason is SkipReason.INSUFFICIENT_FUNDS:
            self.insufficient_funds_count += 1
        else:
            self.skipped_count += 1


@dataclass
class RunReport:
    reference_date: date
    by_kind: dict[models.SourceKind, RunStats] = field(default_factory=dict)

    def _sum(self, attr: str) -> int:
        return sum(getattr(stats, attr) for stats in self.by_kind.values())

    @property
    def total(self) -> int:
        return self._sum("total")

    @property
    def processed_count(self) -> int:
        return self._sum("processed_count")

    @property
    def skipped_count(self) -> int:
        return self._sum("skipped_count")

    @property
    def failed_count(self) -> int:
        return self._sum("failed_count")

    @property
    def insufficient_funds_count(self) -> int:
        return self._sum("insufficient_funds_count")


class BatchDriver:
    """Walk every active fixed source once for a given day.

    Income and expense sources run as two independent sub-runs. Each source is
    its own unit of work, so a failure on one never undoes or blocks another.
    """

    def __init__(self, db: Session, processor: SourceProcessor | None = None) -> None:
        self.db = db
        self.processor = processor or SourceProcessor(db)

    def run_daily(self, reference_date: date) -> RunReport:
        report = RunReport(reference_date=reference_date)
        for kind in (models.SourceKind.INCOME, models.SourceKind.EXPENSE):
            report.by_kind[kind] = self._run_kind(kind, reference_date)
        return report

    def _active_source_ids(self, kind: models.SourceKind) -> list[int]:
        rows = (
            self.db.query(models.FinancialSource.id)
            .filter(
                models.FinancialSource.kind == kind,
                models.FinancialSource.is_fixed.is_(True),
                models.FinancialSource.is_deleted.is_(False),
            )
            .order_by(models.FinancialSource.id)
            .all()
        )
        return [row[0] for row in rows]

    def _run_kind(self, kind: models.SourceKind, reference_date: date) -> RunStats:
        stats = RunStats()
        logger.info("[%s run] Checking %s sources for %s", kind.label, kind.value, reference_date.isoformat())

        completed = False
        try:
            for source_id in self._active_source_ids(kind):
                try:
                    source = self.db.get(models.FinancialSource, source_id)
                    if source is None or source.is_deleted:
                        # deleted between selection and processing
                        outcome = Outcome.skipped(SkipReason.NOT_DUE)
                    else:
                        outcome = self.processor.process(source, reference_date)
                except Exception as exc:
                    self.db.rollback()
                    logger.exception("[%s run] Error processing source %s", kind.label, source_id)
                    outcome = Outcome.failed(exc)
                except BaseException as exc:
                    # cancelled mid-source: undo it, count it, stop the run
                    self.db.rollback()
                    stats.record(Outcome.failed(exc))
                    raise
                stats.record(outcome)
            completed = True
        finally:
            logger.log(
                logging.INFO if completed else logging.WARNING,
                "[%s run] %s. Processed: %d, Insufficient funds: %d, Skipped: %d, Failed: %d, Total: %d",
                kind.label,
                "Completed" if completed else "Interrupted",
                stats.processed_count,
                stats.insufficient_funds_count,
                stats.skipped_count,
                stats.failed_count,
                stats.total,
            )
        return stats
