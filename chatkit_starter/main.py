"""ChatKit starter FastAPI application.

Usage:
    uvicorn chatkit_starter.main:app --reload --port 8000
"""

from __future__ import annotations

import importlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatkit_starter import __version__
from chatkit_starter.api.middleware import (
    ContentSecurityPolicyMiddleware,
    RequestLoggingMiddleware,
)
from chatkit_starter.broker.errors import BrokerError
from chatkit_starter.config.settings import settings

logger = logging.getLogger("chatkit_starter.api")

_route_modules = [
    "chatkit_starter.api.routes.health",
    "chatkit_starter.api.routes.session",
    "chatkit_starter.api.routes.pages",
]


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="ChatKit Starter",
        description="Host page and session broker for an embedded ChatKit widget",
        version=__version__,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["POST"],
        allow_headers=["*"],
    )
    # Outermost, so every response (including CORS preflights) carries the policy.
    app.add_middleware(ContentSecurityPolicyMiddleware)

    for mod_path in _route_modules:
        module = importlib.import_module(mod_path)
        app.include_router(module.router)

    # --- Exception handlers ---

    @app.exception_handler(BrokerError)
    async def broker_error_handler(request: Request, exc: BrokerError) -> JSONResponse:
        logger.warning(
            "%s on %s: %s", type(exc).__name__, request.url.path, exc.message
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Unexpected error"})

    return app


app = create_app()
