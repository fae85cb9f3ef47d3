"""
Health check HTTP application.

``create_app()`` builds the FastAPI instance served by uvicorn on the main
thread while the collector runs on its own thread.

Endpoints
---------
``GET /``  200 with a diagnostic body while polls are fresh, 500 otherwise.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from prestowatch import __version__
from prestowatch.core.health import HealthReporter
from prestowatch.framework.logging import get_logger

logger = get_logger(__name__)


def create_app(reporter: HealthReporter) -> FastAPI:
    """Create the health app bound to ``reporter``."""
    app = FastAPI(title="prestowatch", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.reporter = reporter

    @app.get("/", response_class=PlainTextResponse)
    def health() -> PlainTextResponse:
        report = reporter.check()
        logger.debug("health_check", healthy=report.healthy, seconds_since_poll=report.seconds_since_poll)
        return PlainTextResponse(report.body, status_code=report.status_code)

    return app


__all__ = ["create_app"]
