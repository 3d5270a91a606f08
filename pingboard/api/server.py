"""FastAPI server for the endpoint monitor."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from pingboard.api.routes import monitor_router
from pingboard.config import settings
from pingboard.monitor.checker import CheckCoordinator
from pingboard.monitor.prober import Prober
from pingboard.monitor.scheduler import MonitorScheduler
from pingboard.monitor.seed import load_endpoints
from pingboard.monitor.store import MonitorStore

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the monitor on startup, stop the scheduler on shutdown."""
    store = MonitorStore(
        history_window=timedelta(hours=settings.history_window_hours),
        max_recent_downtime=settings.max_recent_downtime,
        close_downtime_on_recovery=settings.close_downtime_on_recovery,
    )
    app.state.monitor_store = store

    for endpoint in load_endpoints(Path(settings.endpoints_file)):
        store.register(endpoint)

    coordinator = CheckCoordinator(store, Prober(timeout=settings.probe_timeout_seconds))
    scheduler = MonitorScheduler(
        store,
        coordinator,
        interval=settings.check_interval_seconds,
        max_workers=settings.check_workers,
    )
    app.state.monitor_scheduler = scheduler

    try:
        await scheduler.start()
    except Exception:
        logger.exception("Monitor scheduler failed to start")

    yield

    # Shutdown
    await scheduler.stop()


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app() -> FastAPI:
    app = FastAPI(
        title="pingboard - Endpoint Monitor",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(RequestValidationError, _bad_request)

    app.include_router(monitor_router, prefix="/api")

    @app.get("/")
    async def dashboard():
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    return app


app = create_app()
