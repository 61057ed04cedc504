"""Catalog search API application.

Exposes the facets and product pages of storefront catalog views. Search
state travels in the query string, so every page URL is shareable.

Run with:
    uvicorn catalog_search.main:app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_search.api import health_router, products_router
from catalog_search.api.middleware import error_response, setup_middleware
from catalog_search.domain.exceptions import DomainError
from catalog_search.infrastructure.config import settings
from catalog_search.infrastructure.logging_config import configure_logging
from catalog_search.infrastructure.stores_client import StoresClientError, close_stores_client

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; close the stores client on shutdown."""
    configure_logging(settings.log_level)
    logger.info(
        "Catalog search API starting",
        version=settings.api_version,
        debug=settings.debug,
        stores_api_url=settings.stores_api_url,
        default_page_size=settings.default_page_size,
    )

    yield

    logger.info("Catalog search API stopping")
    await close_stores_client()


app = FastAPI(
    title="Catalog Search API",
    description="Faceted product search for storefront catalog views",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Storefronts call the API straight from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(products_router)


# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing and validation HTTP errors in the error envelope."""
    detail = exc.detail
    if isinstance(detail, dict):
        return error_response(
            request,
            exc.status_code,
            detail.get("error_code", "ERROR"),
            detail.get("message", str(detail)),
            detail.get("details", []),
        )
    return error_response(request, exc.status_code, "ERROR", str(detail))


@app.exception_handler(StoresClientError)
async def stores_client_error_handler(request: Request, exc: StoresClientError) -> JSONResponse:
    """A failed product search is the stores backend's fault: 502."""
    logger.error(
        "Stores backend error",
        path=request.url.path,
        error=exc.message,
        upstream_status=exc.status_code,
    )
    return error_response(
        request,
        status.HTTP_502_BAD_GATEWAY,
        "STORES_API_ERROR",
        exc.message,
        {"upstream_status": exc.status_code},
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Invalid search state in the request: 400 named after the error."""
    logger.info("Rejected search request", error_code=type(exc).__name__, error=exc.message)
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        type(exc).__name__,
        exc.message,
        dict(exc.details),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
