"""
FastAPI application for the demo deployer.

Serves the REST API under /api and the live event stream at /ws. Start it
with ``python -m deployer_api.run`` or ``deployer serve``.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .routers import deploy_router, state_router
from .services.deploy.orchestrator import DeployOrchestrator
from .websocket.handlers import events_websocket

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("deployer_api").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the orchestrator on startup unless one was injected; drain it on shutdown."""
    if app.state.orchestrator is None:
        settings = get_settings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        app.state.orchestrator = DeployOrchestrator.from_settings(settings)
    logger.info(f"Deployer API {__version__} ready")

    yield

    orchestrator: DeployOrchestrator = app.state.orchestrator
    await orchestrator.wait_idle()
    orchestrator.store.persist()
    logger.info("Deployer API stopped")


def create_app(orchestrator: Optional[DeployOrchestrator] = None) -> FastAPI:
    """
    Assemble the application.

    Tests pass their own ``orchestrator``; the server leaves it ``None`` so
    the lifespan builds one from the settings and restores the snapshot.
    """
    settings = get_settings()
    app = FastAPI(
        title="Demo Deployer API",
        description="Deploy demo components to OpenShift and follow them live",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.orchestrator = orchestrator

    # The UI dev server runs on another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(state_router, prefix="/api", tags=["State"])
    app.include_router(deploy_router, prefix="/api", tags=["Deploy"])

    @app.websocket("/ws")
    async def event_stream(websocket: WebSocket):
        await events_websocket(websocket, app.state.orchestrator)

    return app


app = create_app()
