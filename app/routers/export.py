"""Report export endpoints (PNG / PDF)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.core.cache import apply_no_store
from app.domain.payloads import AnalyticsReportIn, DailyReportIn
from app.infra.renderer import RenderMode
from app.services.dependencies import get_export_service
from app.services.export_service import ExportedFile, ExportService


router = APIRouter(prefix="/api/export", tags=["export"])

_ERROR_RESPONSES = {
    422: {"description": "Malformed request body"},
    500: {"description": "Markup generation or rasterization failed"},
}


def _attachment(exported: ExportedFile) -> Response:
    response = Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f"attachment; filename={exported.filename}"},
    )
    return apply_no_store(response)


# -----------------------------------------------------------------------------
# Single-day report
# -----------------------------------------------------------------------------


@router.post("/png", responses=_ERROR_RESPONSES, response_class=Response)
def export_daily_png(body: DailyReportIn, service: ExportService = Depends(get_export_service)):
    day = body.current_date.isoformat()
    return _attachment(service.export_daily(day, body.records(), RenderMode.PNG))


@router.post("/pdf", responses=_ERROR_RESPONSES, response_class=Response)
def export_daily_pdf(body: DailyReportIn, service: ExportService = Depends(get_export_service)):
    day = body.current_date.isoformat()
    return _attachment(service.export_daily(day, body.records(), RenderMode.PDF))


# -----------------------------------------------------------------------------
# Multi-day analytics report
# -----------------------------------------------------------------------------


@router.post("/analytics-png", responses=_ERROR_RESPONSES, response_class=Response)
def export_analytics_png(body: AnalyticsReportIn, service: ExportService = Depends(get_export_service)):
    return _attachment(
        service.export_analytics(body.selected_period, body.daily_summaries(), body.rollups(), RenderMode.PNG)
    )


@router.post("/analytics-pdf", responses=_ERROR_RESPONSES, response_class=Response)
def export_analytics_pdf(body: AnalyticsReportIn, service: ExportService = Depends(get_export_service)):
    return _attachment(
        service.export_analytics(body.selected_period, body.daily_summaries(), body.rollups(), RenderMode.PDF)
    )
