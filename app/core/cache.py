"""
HTTP caching for the analytics JSON endpoints and the export downloads.

Analytics answers are derived from the ledger on every request, so they carry
a content ETag and short revalidation window; a client sending the ETag back
gets 304 until the ledger changes. Rendered PNG/PDF files are never cached.
"""

from __future__ import annotations
import hashlib
import json
from typing import Any, Iterable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from app.core.config import settings

# ---------------------------------------------------------------------------
# ETag helpers
# ---------------------------------------------------------------------------

def make_etag_from_bytes(body: bytes) -> str:
    """Strong ETag (quoted) over the serialized payload."""
    return f'"{hashlib.md5(body).hexdigest()}"'


def _if_none_match_tags(header: str) -> Iterable[str]:
    for tag in header.split(","):
        tag = tag.strip()
        # weak comparison: W/"x" matches "x"
        yield tag[2:] if tag.startswith("W/") else tag


def dumps_deterministic(obj: Any) -> bytes:
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
    ).encode("utf-8")


# ---------------------------------------------------------------------------
# Header helpers (Cache-Control, ETag)
# ---------------------------------------------------------------------------

NO_STORE = "no-store"


def _cache_control_value(max_age: Optional[int], swr: Optional[int]) -> str:

    max_age = settings.CACHE_MAX_AGE if max_age is None else max_age
    swr = settings.CACHE_SWR if swr is None else swr
    return f"max-age={int(max_age)}, stale-while-revalidate={int(swr)}"


def apply_cache_headers(
    response: Response,
    etag: str,
    *,
    max_age: Optional[int] = None,
    swr: Optional[int] = None,
) -> None:
    """
    Sets ETag and Cache-Control on the response.
    """
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = _cache_control_value(max_age, swr)


def apply_no_store(response: Response) -> Response:
    """Binary exports are generated per request and must never be cached."""
    response.headers["Cache-Control"] = NO_STORE
    return response


# ---------------------------------------------------------------------------
# JSON response with ETag (+ 304 when If-None-Match matches)
# ---------------------------------------------------------------------------

def etag_json(
    request: Request,
    payload: Any,
    *,
    status_code: int = 200,
    max_age: Optional[int] = None,
    swr: Optional[int] = None,
) -> Response:

    body = dumps_deterministic(payload)
    etag = make_etag_from_bytes(body)

    inm = request.headers.get("If-None-Match")
    if inm and (inm.strip() == "*" or etag in _if_none_match_tags(inm)):
        resp = Response(status_code=304)
        apply_cache_headers(resp, etag, max_age=max_age, swr=swr)
        return resp

    resp = JSONResponse(status_code=status_code, content=payload)
    apply_cache_headers(resp, etag, max_age=max_age, swr=swr)
    return resp
