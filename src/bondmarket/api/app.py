"""FastAPI application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from bondmarket.api import routes


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the API application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to open and close the chain reader.

    Returns:
        FastAPI application with the JSON routes mounted under /api.
        Callers must set app.state.settings and app.state.market_service.
    """
    app = FastAPI(
        title="Bond Default Markets API",
        lifespan=lifespan,
    )
    app.include_router(routes.router, prefix="/api")
    return app
