"""API middleware for the catalog search service.

Every response carries an ``X-Request-ID`` header, and every error body
uses the same envelope: ``{error_code, message, details, request_id}``.
"""

import time
from typing import Any, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[Any] | dict[str, Any] | None = None,
) -> JSONResponse:
    """Build an error response in the service's envelope.

    Args:
        request: Request being answered; its request id is echoed.
        status_code: HTTP status.
        error_code: Machine-readable code, e.g. "STORES_API_ERROR".
        message: Human-readable message.
        details: Extra context, an empty list when there is none.

    Returns:
        JSON error response.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details if details is not None else [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


# ============================================================================
# Request Correlation
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs one line per request.

    The id is taken from the incoming header when the caller sent one. It
    is bound into the structlog context, so every log event of a search
    (facet load, variant backfill) can be traced back to its request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Catalog request served",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status_code=response.status_code if response is not None else 500,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# Last-Resort Error Handling
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions no handler claimed into a 500 envelope."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
            )


def setup_middleware(app: FastAPI) -> None:
    """Install the catalog middleware.

    The last middleware added runs first: request ids are assigned before
    the error handler runs, so 500 responses still carry one.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
