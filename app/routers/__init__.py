"""API routers module."""

from . import analytics, export, health, sales

__all__ = [
    "analytics",
    "export",
    "health",
    "sales",
]
