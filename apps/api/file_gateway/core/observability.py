# Contract locks:
# - /health keys: status, version, storage, last_error_summary
# - X-Request-Id in/out (missing -> generated; always echoed back; also on errors)
# - Error envelope keys: error, message, request_id, details
# - Log lines: one JSON object per line on stdout
from __future__ import annotations

import datetime
import json
import logging
import os
import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

_log = logging.getLogger("file_gateway")
if not _log.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))


def now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def new_request_id() -> str:
    return uuid.uuid4().hex.upper()


def get_request_id(request: Request) -> Optional[str]:
    return (
        getattr(getattr(request, "state", None), "request_id", None)
        or request.headers.get("X-Request-Id")
    )


def emit(level: str, event: str, message: str, request_id: Optional[str], module: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "ts": now_iso(),
        "level": level.lower(),
        "message": message,
        "request_id": request_id,
        "event": event,
        "module": module,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False), flush=True)


def err_envelope(error: str, message: str, request_id: Optional[str], details: Any, status_code: int) -> JSONResponse:
    headers = {}
    if request_id:
        headers["X-Request-Id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id,
            "details": details,
        },
        headers=headers,
    )
