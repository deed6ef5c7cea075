"""FastAPI dependency providers for the service layer."""

from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.infra.renderer import ChromeRenderer, Renderer
from app.repositories.kv_store import FileStore, InMemoryStore
from app.repositories.ledger_repository import LedgerRepository
from app.repositories.protocols import KeyValueStore
from app.services.export_service import ExportService
from app.services.ledger_service import LedgerService


@lru_cache(maxsize=1)
def get_store() -> KeyValueStore:
    if settings.STORE_BACKEND == "memory":
        return InMemoryStore()
    return FileStore(settings.STORE_PATH)


@lru_cache(maxsize=1)
def get_ledger_service() -> LedgerService:
    # one service per process so the in-memory ledger outlives a failed save
    return LedgerService(LedgerRepository(get_store(), settings.LEDGER_KEY))


def get_renderer() -> Renderer:
    return ChromeRenderer.from_settings()


def get_export_service(renderer: Renderer = Depends(get_renderer)) -> ExportService:
    return ExportService(renderer)
