"""FastAPI application wiring for the exercise tracker."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import register_error_handlers
from .api.routes import router as api_router
from .config import get_settings
from .domain.service import TrackerService
from .logging_config import setup_logging
from .repository import TrackerRepository

PACKAGE_DIR = Path(__file__).resolve().parent

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    pool.open()
    repository = TrackerRepository(pool)
    repository.ensure_schema()
    app.state.pool = pool
    app.state.tracker_service = TrackerService(
        repository,
        echo_unparsed_bounds=settings.echo_unparsed_log_bounds,
    )
    try:
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

register_error_handlers(app)

app.mount("/public", StaticFiles(directory=PACKAGE_DIR / "static"), name="public")


@app.get("/", include_in_schema=False)
def index() -> FileResponse:
    """Serve the landing page with the user and exercise forms."""
    return FileResponse(PACKAGE_DIR / "templates" / "index.html")


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(api_router)
