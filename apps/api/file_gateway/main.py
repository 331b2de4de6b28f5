from __future__ import annotations

import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.observability import emit, err_envelope, new_request_id, now_iso
from .core.storage import storage_health
from .modules.files.router import router as files_router

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

app = FastAPI(title="File Gateway API", version=APP_VERSION)

_last_error: Optional[Dict[str, Any]] = None


def _cors_origins() -> list:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
)


@app.middleware("http")
async def _request_id_mw(request: Request, call_next):
    rid = request.headers.get("X-Request-Id") or new_request_id()
    request.state.request_id = rid
    emit("info", "http.request.start", f"{request.method} {request.url.path}", rid, __name__)
    try:
        resp = await call_next(request)
    except Exception as e:
        emit("error", "http.request.exception", str(e), rid, __name__)
        raise
    resp.headers["X-Request-Id"] = rid
    emit("info", "http.request.end", f"{request.method} {request.url.path} -> {getattr(resp,'status_code',None)}", rid, __name__)
    return resp


@app.exception_handler(StarletteHTTPException)
async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
    rid = getattr(request.state, "request_id", None)
    return err_envelope("http_error", str(exc.detail), rid, {"status_code": exc.status_code}, exc.status_code)


@app.exception_handler(RequestValidationError)
async def _validation_exc_handler(request: Request, exc: RequestValidationError):
    rid = getattr(request.state, "request_id", None)
    return err_envelope("validation_error", "request validation failed", rid, {"errors": jsonable_errors(exc)}, 422)


@app.exception_handler(Exception)
async def _unhandled_exc_handler(request: Request, exc: Exception):
    global _last_error
    rid = getattr(request.state, "request_id", None)
    _last_error = {"ts": now_iso(), "type": type(exc).__name__, "request_id": rid}
    return err_envelope("internal_error", "internal server error", rid, {"type": type(exc).__name__}, 500)


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic errors may carry non-JSON values under "ctx"/"input" (e.g. raw bytes)
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]


app.include_router(files_router)


@app.get("/health")
def health():
    storage = storage_health()
    return {
        "status": "ok" if storage["status"] == "ok" else "degraded",
        "version": APP_VERSION,
        "storage": storage,
        "last_error_summary": _last_error,
    }
