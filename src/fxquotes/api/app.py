"""FastAPI application factory with structured JSON error handling."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fxquotes.api import routes
from fxquotes.api.serializers import error_body


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors in the same {error, message, timestamp} shape."""
    if exc.status_code == 404:
        body = error_body("Not Found", f"Route {request.method} {request.url.path} not found")
    else:
        body = error_body(str(exc.detail), f"{request.method} {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application. The caller must set
        app.state.quotes_service before serving requests.
    """
    app = FastAPI(
        title="BRL Quotes API",
        lifespan=lifespan,
    )

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.include_router(routes.router)

    return app
