"""Error taxonomy shared by the ledger, analytics and export layers."""

from __future__ import annotations

from typing import Optional


class SalesTrackerError(RuntimeError):
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RecordValidationError(SalesTrackerError):
    """User input for a sale record was rejected before touching the ledger."""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


class RecordNotFoundError(SalesTrackerError):
    status_code = 404


class PersistenceError(SalesTrackerError):
    """The sales store could not be read or written."""

    status_code = 503


class RenderError(SalesTrackerError):
    """Markup generation or rasterization failed for an export request."""

    status_code = 500
