from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import PersistenceError
from app.repositories.protocols import KeyValueStore
from app.services.dependencies import get_store

router = APIRouter(tags=["health"])

@router.get("/healthz")
def healthz():
    return {"status": "ok"}

@router.get("/readyz")
def readyz(store: KeyValueStore = Depends(get_store)):
    try:
        store.get(settings.LEDGER_KEY)
    except PersistenceError as exc:
        return JSONResponse(status_code=503, content={"status": "not ready", "error": exc.message})
    return {"status": "ready", "store": settings.STORE_BACKEND}
