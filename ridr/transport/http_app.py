# ridr/transport/http_app.py
"""
FastAPI webhook transport.

``create_http_app(app)`` exposes a RIDR app as a single webhook endpoint:

    POST {settings.webhook_path}   platform payload in, platform response out
    GET  /health                   liveness probe

The RIDR app is initialized in the FastAPI lifespan. A request for which
the app produces no response gets ``204 No Content``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from ridr.config import settings, warn_on_risky_config
from ridr.infra.logging_config import get_logger, setup_logging
from ridr.transport.middleware import (
    ErrorHandlingMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
)
from ridr.transport.server import Server

if TYPE_CHECKING:
    from ridr.core.app import App

logger = get_logger(__name__)


class FastAPIServer(Server):
    """Server adapter over one FastAPI request with an already-parsed JSON body."""

    def __init__(self, request: Request, payload: Any):
        self.request = request
        self.payload = payload
        self.request_id = getattr(request.state, "request_id", None)
        self.response: Any = None

    def get_request_object(self) -> Any:
        return self.payload

    def set_response(self, response: Any) -> None:
        self.response = response

    def get_request_headers(self) -> dict[str, str]:
        return dict(self.request.headers)

    def get_query_params(self) -> dict[str, str]:
        return dict(self.request.query_params)


def create_http_app(ridr_app: "App", webhook_path: Optional[str] = None) -> FastAPI:
    webhook_path = webhook_path or settings.webhook_path

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        setup_logging(level=settings.log_level, use_json=settings.use_json_logs)
        for warning in warn_on_risky_config(settings):
            logger.warning(f"Config warning: {warning}")

        logger.info(f"Starting RIDR app: env={settings.app_env}, webhook={webhook_path}")
        await ridr_app.initialize()
        fastapi_app.state.ridr_app = ridr_app
        logger.info("Application startup complete")

        yield

        logger.info("Application shutdown complete")

    http_app = FastAPI(
        title="RIDR",
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url=None if settings.is_production else "/openapi.json",
    )

    http_app.add_middleware(ErrorHandlingMiddleware)
    http_app.add_middleware(RequestLoggingMiddleware, enabled=settings.enable_request_logging)
    http_app.add_middleware(RequestIDMiddleware)

    @http_app.get("/health")
    def health():
        return {"status": "healthy"}

    @http_app.post(webhook_path)
    async def webhook(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

        server = FastAPIServer(request, payload)
        await ridr_app.handle(server)

        if server.response is None:
            return Response(status_code=204)
        return JSONResponse(content=server.response)

    return http_app
