# portal/core/errors.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from portal.core.exceptions import InvitationError

log = logging.getLogger("portal.errors")


def _ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace_id for this request: request.state first, then the
    inbound correlation headers, else a fresh one stored on request.state.
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)

    for h in ("x-request-id", "x-correlation-id", "x-trace-id"):
        v = request.headers.get(h)
        if v:
            request.state.trace_id = v
            return v

    new_id = uuid.uuid4().hex
    request.state.trace_id = new_id
    return new_id


def _payload(
    *,
    message: str,
    typ: str,
    status: int,
    trace_id: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {
        "type": typ,
        "message": message,
        "status": status,
        "trace_id": trace_id,
    }
    if code is not None:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return {"ok": False, "error": error}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Registers consistent JSON error handlers.
    Also ensures X-Request-ID header is present on error responses.
    """

    @app.exception_handler(InvitationError)
    async def invitation_exc_handler(request: Request, exc: InvitationError):
        trace_id = _ensure_trace_id(request)
        log.warning(
            "InvitationError %s %s -> %s %s | trace_id=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            trace_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            headers={"X-Request-ID": trace_id},
            content=_payload(
                message=exc.message,
                typ="invitation_error",
                status=exc.status_code,
                trace_id=trace_id,
                code=exc.code,
                details=exc.details,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        trace_id = _ensure_trace_id(request)
        status_code = int(exc.status_code)
        # detail can be str, dict, or other; keep a safe message
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None

        headers = dict(exc.headers or {})
        headers["X-Request-ID"] = trace_id

        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | trace_id=%s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            trace_id,
            exc.detail,
        )

        return JSONResponse(
            status_code=status_code,
            headers=headers,
            content=_payload(
                message=message,
                typ="http_error",
                status=status_code,
                trace_id=trace_id,
                details=details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        trace_id = _ensure_trace_id(request)
        errors = jsonable_errors(exc)
        log.warning(
            "ValidationError %s %s -> 422 | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            trace_id,
            errors,
        )
        return JSONResponse(
            status_code=422,
            headers={"X-Request-ID": trace_id},
            content=_payload(
                message="Validation failed.",
                typ="validation_error",
                status=422,
                trace_id=trace_id,
                details=errors,
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        trace_id = _ensure_trace_id(request)
        # Full traceback to server logs; generic message to client
        log.exception(
            "Unhandled exception %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            trace_id,
        )
        return JSONResponse(
            status_code=500,
            headers={"X-Request-ID": trace_id},
            content=_payload(
                message="Internal server error.",
                typ="internal_error",
                status=500,
                trace_id=trace_id,
            ),
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may put raw exceptions into ctx; keep the envelope serializable
    out = []
    for err in exc.errors():
        err = dict(err)
        ctx = err.get("ctx")
        if isinstance(ctx, dict):
            err["ctx"] = {k: str(v) for k, v in ctx.items()}
        err.pop("input", None)
        out.append(err)
    return out
