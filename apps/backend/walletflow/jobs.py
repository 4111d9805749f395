"""Entry point for the external daily trigger (cron, systemd timer, ...).

    python -m walletflow.jobs            # today in the configured timezone
    python -m walletflow.jobs 2026-10-05 # explicit reference date / backfill
"""

from __future__ import annotations

import logging
import sys
from datetime import date

from sqlalchemy.orm import Session

from .core.database import session_scope
from .core.logging import configure_logging
from .models import today_local
from .services import BatchDriver, RunReport

logger = logging.getLogger(__name__)


def run_daily_job(reference_date: date | None = None, *, db: Session | None = None) -> RunReport:
    reference_date = reference_date or today_local()
    if db is not None:
        return BatchDriver(db).run_daily(reference_date)
    with session_scope() as session:
        return BatchDriver(session).run_daily(reference_date)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        reference_date = date.fromisoformat(args[0]) if args else None
    except ValueError:
        logger.error("Invalid reference date %r, expected YYYY-MM-DD", args[0])
        return 2
    report = run_daily_job(reference_date)
    return 1 if report.failed_count else 0


if __name__ == "__main__":
    sys.exit(main())
