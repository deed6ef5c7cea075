"""
Shared fixtures: an in-memory ledger, a fake renderer and a TestClient wired
to both through FastAPI dependency overrides.
"""

import os

# settings are read at import time
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("CURRENCY_SYMBOL", "₦")

import pytest
from fastapi.testclient import TestClient

from app.domain.models import ProductSaleRecord
from app.infra.renderer import RenderMode
from app.main import app
from app.repositories.kv_store import InMemoryStore
from app.repositories.ledger_repository import LedgerRepository
from app.services.dependencies import get_ledger_service, get_renderer
from app.services.ledger_service import LedgerService

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PDF_BYTES = b"%PDF-1.4\nfake-document"


class FakeRenderer:
    """Records every markup it receives and returns canned bytes."""

    def __init__(self):
        self.calls = []

    def render(self, markup, mode):
        mode = RenderMode(mode)
        self.calls.append((markup, mode))
        return PNG_BYTES if mode is RenderMode.PNG else PDF_BYTES


class FailingRenderer:
    def render(self, markup, mode):
        raise RuntimeError("browser crashed")


def make_record(name, initial, sold, price, record_id=None):
    return ProductSaleRecord(
        id=record_id or f"{name}-{initial}-{sold}",
        product_name=name,
        initial_qty=initial,
        qty_sold=sold,
        price_per_unit=price,
    )


@pytest.fixture
def two_day_ledger():
    """Product A sold on two consecutive days (revenue 400 then 500)."""
    return {
        "2024-01-01": [make_record("A", 10, 4, 100, "a1")],
        "2024-01-02": [make_record("A", 5, 5, 100, "a2")],
    }


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def ledger_service(store):
    return LedgerService(LedgerRepository(store, "dailySalesData"))


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def client(ledger_service, renderer):
    app.dependency_overrides[get_ledger_service] = lambda: ledger_service
    app.dependency_overrides[get_renderer] = lambda: renderer
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
