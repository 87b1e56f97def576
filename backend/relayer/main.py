"""Main application entry point.

Runs the status server and, inside its lifespan, the relayer scheduler as a
background task.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("web3").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

# Try to use uvloop for better performance (Unix only)
try:
    import uvloop
    uvloop.install()
    _UVLOOP_ENABLED = True
except ImportError:
    _UVLOOP_ENABLED = False

from relayer import __version__
from relayer.api import install_cors, router
from relayer.config import Settings, get_settings
from relayer.runtime import build_relayer, build_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the scheduler with the server, stop it on shutdown."""
    settings: Settings = app.state.settings
    if not app.state.run_scheduler:
        yield
        return

    relayer = build_relayer(settings)
    app.state.store = relayer.store

    logger.info("Auto-finalize daemon starting...")
    logger.info(f"Event loop: {'uvloop' if _UVLOOP_ENABLED else 'asyncio'}")
    logger.info(f"Source RPC: {settings.source_rpc_url}")
    logger.info(f"Destination RPC: {settings.destination_rpc_url}")
    logger.info(f"Executor: {relayer.scanner.executor_address}")
    logger.info(f"Check interval: {settings.poll_interval:.0f}s")
    logger.info(f"State directory: {settings.data_dir.resolve()}")
    logger.info(f"Status endpoint: http://{settings.status_host}:{settings.status_port}/status")

    task = asyncio.create_task(relayer.scheduler.run_forever(), name="relayer-scheduler")
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await relayer.aclose()
        logger.info("Shutdown complete")


def create_app(settings: Settings | None = None, *, run_scheduler: bool = True) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="L2 to L1 Relayer",
        description="Cross-layer message finalization relayer",
        version=__version__,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.state.settings = settings
    app.state.run_scheduler = run_scheduler
    app.state.store = build_store(settings)

    install_cors(app, settings.status_allowed_origin)
    app.include_router(router)
    return app


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    uvicorn.run(
        create_app(settings),
        host=settings.status_host,
        port=settings.status_port,
    )


if __name__ == "__main__":
    main()
