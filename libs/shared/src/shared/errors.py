from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse


def _serialize_detail(detail: str | dict | None) -> str | None:
    if detail is None:
        return None
    return str(detail)


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_response(status_code: int, error: str, detail: str | dict | None, request_id: str | None) -> JSONResponse:
    payload = ErrorResponse(error=error, detail=_serialize_detail(detail), request_id=request_id)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        error=str(exc.detail) if exc.detail else exc.__class__.__name__,
        detail=exc.detail,
        request_id=request_id_of(request),
    )

