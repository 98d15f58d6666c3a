"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
See quickorder.core.lifespan and quickorder.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from quickorder.api.v1 import api_router
from quickorder.core.config import get_settings
from quickorder.core.exception_handlers import register_exception_handlers
from quickorder.core.lifespan import create_lifespan
from quickorder.core.limiter import limiter
from quickorder.middleware import RequestIDMiddleware
from quickorder.shared.telemetry import instrument_app, setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Middleware: first added = innermost. Request ID wraps CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")
    if settings.telemetry_enabled:
        instrument_app(app)

    return app


app = create_app()
