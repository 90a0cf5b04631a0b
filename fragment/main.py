"""Entry-point for the Fragment ingestion API (ASGI app).

This module constructs the FastAPI instance, wires global middleware,
registers one route per trigger of the REST source, and exposes the
`app` variable ASGI servers look for (e.g. ``uvicorn fragment.main:app``).
"""

from __future__ import annotations

import os
import logging
import traceback
from contextvars import ContextVar
from time import perf_counter
from typing import Callable, Awaitable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from fragment import APP_ENV
from fragment.models import Options
from fragment.settings import RATE_LIMIT, load_options
from fragment.utils.errors import FragmentError
from fragment.utils.logger import configure_logging, logger
from fragment.utils.triggers import build_triggers

# Rate limiter (IP-based by default)
limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT])


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach request-level context vars for structured logging."""

    _request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:  # type: ignore[override]
        start = perf_counter()
        request_id = request.headers.get("X-Request-Id", os.urandom(4).hex())
        token = self._request_id_ctx.set(request_id)
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = request_id
        finally:
            duration_ms = (perf_counter() - start) * 1000
            logger.info(
                "request.complete",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                    "request_id": request_id,
                },
            )
            self._request_id_ctx.reset(token)
        return response


def create_app(options: Optional[Options] = None) -> FastAPI:
    """Build the application. Invalid options raise ConfigError before any route exists."""
    configure_logging()
    options = load_options(options)

    app = FastAPI(
        title="Fragment Ingestion API",
        version="0.1.0",
        docs_url="/docs" if APP_ENV != "production" else None,
        redoc_url=None,
        openapi_url="/openapi.json" if APP_ENV != "production" else None,
    )
    app.state.options = options

    # Global middleware
    app.add_middleware(RequestContextMiddleware)
    # Rate limiting middleware (SlowAPI expects limiter via app.state)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    # Register default handler for 429 responses from SlowAPI
    from slowapi.errors import RateLimitExceeded  # noqa: WPS433  (runtime import)
    from slowapi import _rate_limit_exceeded_handler

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Decode / validation / encode failures → structured 400 body
    @app.exception_handler(FragmentError)
    async def render_fragment_error(request: Request, exc: FragmentError):
        logger.warning(
            "request.rejected",
            extra={
                "path": request.url.path,
                "error": type(exc).__name__,
                "validations": [v.model_dump() for v in exc.validations],
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response().model_dump(by_alias=True),
        )

    # Global exception handler - logs full tracebacks for any unhandled 500s
    @app.exception_handler(Exception)
    async def log_unhandled_exceptions(request: Request, exc: Exception):
        """Log full traceback for any unhandled exception that would become a 500."""
        error_logger = logging.getLogger("uvicorn.error")
        error_logger.error(
            "UNHANDLED %s at %s %s\n%s",
            type(exc).__name__,
            request.method,
            request.url.path,
            "".join(traceback.format_tb(exc.__traceback__))
        )
        # Re-raise so the server still answers with a 500
        raise exc

    # Health check
    @app.get("/")
    async def root() -> Dict[str, str]:  # pylint: disable=unused-variable
        return {"status": "ok"}

    # Expose OpenAPI YAML next to /openapi.json outside production
    if APP_ENV != "production":
        from fragment.openapi import install_openapi_route  # noqa: WPS433 (runtime import)

        install_openapi_route(app)

    # Routers imported here so settings are validated before routes are built
    from fragment.routers import events_routes

    triggers = build_triggers(options)
    app.state.triggers = triggers
    app.include_router(events_routes.build_router(triggers))

    return app


# The object ASGI servers import
app = create_app()
