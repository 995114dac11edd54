# sculpture_guide/main.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — FastAPI application entrypoint
------------------------------------------------------
This file wires everything together:

- Sets up central logging.
- Creates the FastAPI app.
- Adds middleware (CORS for dev).
- Optionally preloads the sculpture dataset at startup.
- Mounts routers:
    * /realtime      (WebSocket) → browser <-> realtime model relay
    * /status/data   (HTTP)      → dataset status
- Exposes an ASGI `app` object for uvicorn.

Typical run command (dev):

    uvicorn sculpture_guide.main:app --host 0.0.0.0 --port 8080 --reload

"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sculpture_guide.core.config import settings
from sculpture_guide.core.entity_store import get_entity_store
from sculpture_guide.routers.status import router as status_router
from sculpture_guide.routers.ws import router as ws_router
from sculpture_guide.utils import get_logger, setup_logging

setup_logging(debug=settings.debug)
logger = get_logger(__name__)
logger.info(
    "Sculpture guide relay starting (env=%s, backend=%s, data=%s)",
    settings.environment,
    settings.backend,
    settings.sculpture_data_path,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.preload_data:
        store = get_entity_store()
        if not store.loaded:
            logger.warning("Sculpture data not available at startup; enrichment disabled until it loads")
    yield


def create_app() -> FastAPI:
    """
    Application factory.

    Returns a configured FastAPI instance ready for uvicorn.
    """
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Browsers connect from a separately served frontend during development.
    if settings.environment != "production":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(ws_router)
    app.include_router(status_router)

    @app.get("/", tags=["meta"])
    async def root():
        """Quick liveness check."""
        return {
            "name": settings.app_name,
            "environment": settings.environment,
            "message": "Sculpture guide relay is running.",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        return {
            "status": "ok",
            "environment": settings.environment,
            "debug": settings.debug,
            "backend": settings.backend,
        }

    logger.info("FastAPI app created (env=%s)", settings.environment)
    return app


# ASGI app for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sculpture_guide.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=(settings.environment != "production"),
    )
