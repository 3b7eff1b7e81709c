"""HTTP middleware for the storefront API.

Provides:
- Request ID generation and propagation (X-Request-ID)
- Request timing and lifecycle logging
- CORS for the client-rendered storefront and back-office

Usage:
    from libs.common.middleware import configure_middleware

    app = FastAPI()
    configure_middleware(app)
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.config import get_settings
from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

_QUIET_PATHS = {"/health"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to the logging context and log each request once."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in _QUIET_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={"extra_fields": {
                    "error": str(e),
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                }},
            )
            raise
        else:
            if not quiet:
                level = "warning" if response.status_code >= 400 else "info"
                getattr(logger, level)(
                    f"{request.method} {request.url.path} -> {response.status_code}",
                    extra={"extra_fields": {
                        "status_code": response.status_code,
                        "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    }},
                )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


def configure_middleware(app: FastAPI) -> None:
    """
    Configure logging, then attach CORS and request-context middleware.
    """
    settings = get_settings()
    configure_logging()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Session-ID"],
    )
    app.add_middleware(RequestContextMiddleware)
