"""Export service: report markup -> renderer -> downloadable file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from app.core.errors import RenderError
from app.core.logging import export_logger
from app.domain.models import DailySummary, ProductRollup, ProductSaleRecord
from app.infra.renderer import RenderMode, Renderer
from app.services.report_builder import build_analytics_report_html, build_sales_report_html

MEDIA_TYPES = {
    RenderMode.PNG: "image/png",
    RenderMode.PDF: "application/pdf",
}


@dataclass
class ExportedFile:
    content: bytes
    media_type: str
    filename: str


def daily_report_filename(current_date: str, mode: RenderMode) -> str:
    return f"Sales-Report-{current_date}.{mode.value}"


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def analytics_report_filename(selected_period: str, mode: RenderMode, today: str) -> str:
    if mode is RenderMode.PNG:
        period = _UNSAFE_FILENAME_CHARS.sub("-", selected_period).strip("-") or "all"
        return f"analytics-{period}-{today}.png"
    return f"Analytics-Report-{today}.pdf"


class ExportService:
    """Builds report markup and hands it to the renderer, one render per call."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer

    def _render(self, build_markup: Callable[[], str], mode: RenderMode, filename: str) -> ExportedFile:
        try:
            markup = build_markup()
            content = self.renderer.render(markup, mode)
        except RenderError as exc:
            export_logger.error("Report rendering failed", exc=exc, filename=filename)
            raise
        except Exception as exc:
            export_logger.error("Report rendering failed", exc=exc, filename=filename)
            raise RenderError(f"Failed to generate {mode.value.upper()}", {"error": str(exc)}) from exc

        if not content:
            raise RenderError(f"Failed to generate {mode.value.upper()}", {"error": "renderer returned no data"})

        export_logger.info("Report exported", filename=filename, bytes=len(content))
        return ExportedFile(content=content, media_type=MEDIA_TYPES[mode], filename=filename)

    def export_daily(
        self,
        current_date: str,
        products: Sequence[ProductSaleRecord],
        mode: RenderMode,
        *,
        now: Optional[datetime] = None,
    ) -> ExportedFile:
        mode = RenderMode(mode)
        return self._render(
            lambda: build_sales_report_html(current_date, products, generated_at=now),
            mode,
            daily_report_filename(current_date, mode),
        )

    def export_analytics(
        self,
        selected_period: str,
        summaries: Sequence[DailySummary],
        top_products: Sequence[ProductRollup],
        mode: RenderMode,
        *,
        now: Optional[datetime] = None,
    ) -> ExportedFile:
        mode = RenderMode(mode)
        now = now or datetime.now()
        return self._render(
            lambda: build_analytics_report_html(selected_period, summaries, top_products, generated_at=now),
            mode,
            analytics_report_filename(selected_period, mode, now.date().isoformat()),
        )
