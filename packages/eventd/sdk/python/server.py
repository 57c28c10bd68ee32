"""
HTTP host for the eventd SDK.
Boots the eventd client in the background and reports its state on /health.
"""

import asyncio
import os
import signal
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uvicorn
from colorama import Fore, Style
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from eventd_debug_tools import err, info, info_str, set_level

from . import __version__, starter
from .app import HostApplication
from .client import get_global_client, set_global_client
from .config import Settings
from .errors import EventdNkeyError, EventdOptionsError

FATAL_ERRORS = (EventdNkeyError, EventdOptionsError)


def terminate_process(error: BaseException) -> None:
    """Stop the host after a fatal startup error."""
    err(f"eventd misconfiguration is fatal, stopping: {error}")
    os.kill(os.getpid(), signal.SIGTERM)


def startup_error(task: Optional[asyncio.Task]) -> Optional[BaseException]:
    """Exception the startup task ended with, if any."""
    if task is None or not task.done() or task.cancelled():
        return None
    return task.exception()


def create_app(
    host: Optional[HostApplication] = None,
    on_fatal: Callable[[BaseException], None] = terminate_process,
) -> FastAPI:
    """Create the FastAPI app; a HostApplication is built from Settings when omitted."""
    settings = Settings()
    if host is None:
        set_level(settings.LOG_LEVEL)
        host = HostApplication(is_run_in_cli=settings.APP_RUN_IN_CLI)

    def startup_done(task: asyncio.Task) -> None:
        error = startup_error(task)
        if error is None:
            return
        err(f"eventd startup action failed: {error}")
        if isinstance(error, FATAL_ERRORS):
            on_fatal(error)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - handles startup and shutdown."""
        info_str([Fore.MAGENTA, "=== ", Fore.CYAN, f"{settings.SERVICE_NAME} starting ", Fore.MAGENTA, "===", Style.RESET_ALL])

        starter.register(host)
        # Runs until connected; must not block request handling
        startup_task = asyncio.create_task(host.run_startup_actions())
        startup_task.add_done_callback(startup_done)
        app.state.host = host
        app.state.startup_task = startup_task

        yield

        info(f"Shutting down {settings.SERVICE_NAME}...")
        host.request_shutdown()
        # Failures were reported by startup_done
        await asyncio.wait([startup_task])

        eventd_client = get_global_client()
        if eventd_client is not None:
            await eventd_client.close()
            set_global_client(None)
        info("Shutdown complete")

    app = FastAPI(
        title="eventd SDK",
        description="Host service for the eventd client",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        error = startup_error(getattr(app.state, "startup_task", None))
        if error is not None:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "service": settings.SERVICE_NAME,
                    "version": __version__,
                    "error": str(error),
                },
            )

        eventd_client = get_global_client()
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "service": settings.SERVICE_NAME,
                "version": __version__,
                "eventd": {
                    "disabled": host.options.disabled,
                    "connected": eventd_client is not None and eventd_client.is_connected(),
                    "server": str(host.options),
                },
            },
        )

    return app


def main() -> None:
    uvicorn.run(
        "eventd_sdk.server:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )


if __name__ == "__main__":
    main()
