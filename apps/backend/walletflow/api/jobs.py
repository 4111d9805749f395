from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from walletflow import models
from walletflow.core.database import get_db
from walletflow.jobs import run_daily_job
from walletflow.schemas import RunReportOut, RunStatsOut


router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/run-daily", response_model=RunReportOut)
def run_daily(
    reference_date: Optional[date] = Query(None, description="Defaults to today in the configured timezone"),
    db: Session = Depends(get_db),
):
    report = run_daily_job(reference_date, db=db)
    return RunReportOut(
        reference_date=report.reference_date,
        total=report.total,
        processed_count=report.processed_count,
        skipped_count=report.skipped_count,
        failed_count=report.failed_count,
        insufficient_funds_count=report.insufficient_funds_count,
        income=RunStatsOut.model_validate(report.by_kind[models.SourceKind.INCOME]),
        expense=RunStatsOut.model_validate(report.by_kind[models.SourceKind.EXPENSE]),
    )
