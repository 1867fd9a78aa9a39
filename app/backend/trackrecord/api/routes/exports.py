"""Export endpoint for compiled reports."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from trackrecord.api.dependencies import get_today
from trackrecord.api.routes.reports import ReportRequestPayload
from trackrecord.db.dependencies import get_db_session
from trackrecord.services.report_service import ReportService

router = APIRouter(prefix="/exports", tags=["exports"])


def _service(db: Session) -> ReportService:
    return ReportService(db)


@router.post("/report")
def export_report(
    payload: ReportRequestPayload,
    format: str = Query(default="xlsx"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    exported = service.export_report(payload.to_request_data(), format_name=format, today=today)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
