"""Worked-hours report endpoints."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from trackrecord.api.dependencies import get_today
from trackrecord.db.dependencies import get_db_session
from trackrecord.reporting import Granularity, RangeSelection
from trackrecord.services.report_service import ReportRequestData, ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


class ReportRequestPayload(BaseModel):
    task_ids: list[UUID] = Field(default_factory=list)
    user_ids: list[UUID] = Field(default_factory=list)
    granularity: Granularity | None = None
    # Free-form range inputs; unusable values fall back to the data range.
    range_start: str | None = None
    range_end: str | None = None
    range_week_start: str | None = None
    range_week_end: str | None = None
    range_month_start: str | None = None
    range_month_end: str | None = None

    def to_request_data(self) -> ReportRequestData:
        return ReportRequestData(
            task_ids=self.task_ids,
            user_ids=self.user_ids,
            granularity=self.granularity,
            selection=RangeSelection(
                range_start=self.range_start,
                range_end=self.range_end,
                range_week_start=self.range_week_start,
                range_week_end=self.range_week_end,
                range_month_start=self.range_month_start,
                range_month_end=self.range_month_end,
            ),
        )


def _service(db: Session) -> ReportService:
    return ReportService(db)


@router.get("/granularities")
def list_granularities() -> list[dict[str, object]]:
    return ReportService.list_granularities()


@router.get("/options")
def report_options(db: Session = Depends(get_db_session)) -> dict[str, object]:
    """Tasks, users and granularities to choose from when building a report."""

    return _service(db).report_options()


@router.post("")
def compile_report(
    payload: ReportRequestPayload,
    today: date = Depends(get_today),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.report_payload(payload.to_request_data(), today=today)
