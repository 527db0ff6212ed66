"""Error taxonomy for the portfolio service.

Fine-grained failures raised by the store, the Blockfrost client and the
service layer are mapped by :func:`classify` onto the coarse outcomes callers
see. Upstream transport/status failures and undecodable responses stay
distinct internally (for logs and metrics) but share one external outcome.
"""

from __future__ import annotations

from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from shared.errors import error_response, http_exception_handler, request_id_of
from starlette.exceptions import HTTPException as StarletteHTTPException


class Outcome(str, Enum):
    invalid_request = "invalid_request"
    not_found = "not_found"
    conflict = "conflict"
    upstream_unavailable = "upstream_unavailable"
    internal = "internal"


OUTCOME_STATUS: dict[Outcome, int] = {
    Outcome.invalid_request: status.HTTP_422_UNPROCESSABLE_ENTITY,
    Outcome.not_found: status.HTTP_404_NOT_FOUND,
    Outcome.conflict: status.HTTP_409_CONFLICT,
    Outcome.upstream_unavailable: status.HTTP_502_BAD_GATEWAY,
    Outcome.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class PortfolioError(Exception):
    """Base class for every failure the service classifies."""

    message = "Portfolio service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(PortfolioError):
    """A required caller-supplied field is missing or blank."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} is required")


class NotFoundError(PortfolioError):
    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")


class ForeignKeyViolation(PortfolioError):
    def __init__(self, entity: str, parent: str, parent_id: object) -> None:
        self.entity = entity
        self.parent = parent
        self.parent_id = parent_id
        super().__init__(f"cannot create {entity}: {parent} {parent_id!r} does not exist")


class StorageError(PortfolioError):
    message = "Storage failure"


class AccountLookupError(PortfolioError):
    """Base for failures of a single Blockfrost account lookup."""

    kind = "lookup_error"

    def __init__(self, stake_key: str, message: str) -> None:
        self.stake_key = stake_key
        super().__init__(message)


class UpstreamError(AccountLookupError):
    """Non-success status or transport failure talking to Blockfrost."""

    kind = "upstream_error"

    def __init__(self, stake_key: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"account lookup returned HTTP {status_code}"
        else:
            message = f"account lookup transport failure: {reason}"
        super().__init__(stake_key, message)


class ParseError(AccountLookupError):
    """Blockfrost answered, but the body is not an account snapshot."""

    kind = "parse_error"

    def __init__(self, stake_key: str, reason: str) -> None:
        self.reason = reason
        super().__init__(stake_key, f"undecodable account response: {reason}")


class UpstreamUnavailable(PortfolioError):
    """The account data source could not serve this request."""

    message = "Account data is temporarily unavailable"


def classify(exc: BaseException) -> Outcome:
    if isinstance(exc, ValidationError):
        return Outcome.invalid_request
    if isinstance(exc, NotFoundError):
        return Outcome.not_found
    if isinstance(exc, ForeignKeyViolation):
        return Outcome.conflict
    if isinstance(exc, (AccountLookupError, UpstreamUnavailable)):
        return Outcome.upstream_unavailable
    return Outcome.internal


async def portfolio_exception_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    outcome = classify(exc)
    request_id = request_id_of(request)
    if outcome is Outcome.internal:
        logger.bind(request_id=request_id).opt(exception=exc).error("portfolio.internal_error")
        return error_response(OUTCOME_STATUS[outcome], error=outcome.value, detail=None, request_id=request_id)
    if outcome is Outcome.upstream_unavailable:
        # The underlying lookup failure is kept for logs only.
        return error_response(
            OUTCOME_STATUS[outcome],
            error=outcome.value,
            detail=UpstreamUnavailable.message,
            request_id=request_id,
        )
    return error_response(OUTCOME_STATUS[outcome], error=outcome.value, detail=exc.detail, request_id=request_id)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Anything unclassified is reported like a StorageError, without the underlying message.
    request_id = request_id_of(request)
    logger.bind(request_id=request_id).opt(exception=exc).error("portfolio.unhandled_error")
    outcome = Outcome.internal
    return error_response(OUTCOME_STATUS[outcome], error=outcome.value, detail=None, request_id=request_id)


def _describe_invalid_fields(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body") or "<body>"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed or missing request fields share the envelope of service-level validation.
    outcome = Outcome.invalid_request
    return error_response(
        OUTCOME_STATUS[outcome],
        error=outcome.value,
        detail=_describe_invalid_fields(exc),
        request_id=request_id_of(request),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortfolioError, portfolio_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
