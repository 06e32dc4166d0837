"""minuscule — FastAPI application factory and server entry point.

Invariants:
    - Routes registered explicitly through the Minuscule adapter (no auto-discovery)
    - WebError / RequestValidationError from plain FastAPI routes share the adapter's reporter
    - Logging configured on startup via the lifespan context manager

Design Decisions:
    - Factory over module-level app: tests build isolated apps with their own settings
    - Lifespan over @app.on_event: FastAPI recommended pattern
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from minuscule.api.error_reporter import ErrorReporter, register_error_handlers
from minuscule.api.router_adapter import Minuscule
from minuscule.api.routes import health
from minuscule.config import Settings, get_settings
from minuscule.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> tuple[FastAPI, Minuscule]:
    """Build the app and its adapter; callers register their own routes on the adapter."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format, settings.production)
        logger.info(f"minuscule started (env={settings.env})")
        yield
        logger.info("minuscule shutting down")

    app = FastAPI(title="minuscule", version="1.0.0", lifespan=lifespan)
    reporter = ErrorReporter(production=settings.production)
    register_error_handlers(app, reporter)

    m = Minuscule(app, reporter=reporter, settings=settings)
    health.register(m)
    return app, m


def run() -> None:
    """Serve a bare app (health probe only) with uvicorn."""
    settings = get_settings()
    app, _ = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
