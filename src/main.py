"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bk_common.database import engine
from src.bk_common.errors import AppError, PersistenceError
from src.bk_common.response import error_response
from src.bk_csv.api.router import router as csv_router
from src.bk_gateway.middleware.request_log import RequestLogMiddleware
from src.bk_ledger.api.router import router as ledger_router
from src.bk_ledger.application.service import LedgerStore
from src.bk_metrics.api.router import router as metrics_router
from src.bk_metrics.infrastructure.persistence import GoalRepository
from src.bk_selection.api.router import router as selection_router
from src.bk_selection.infrastructure.preferences import RedisPreferenceStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: load the ledger into memory. Shutdown: dispose."""
    preferences = RedisPreferenceStore()
    store = LedgerStore(preferences=preferences)
    await store.load()
    app.state.ledger_store = store
    app.state.goal_repository = GoalRepository()
    yield
    await preferences.close()
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    if isinstance(exc, PersistenceError) and (exc.total or exc.report):
        resp.data = {"succeeded": exc.succeeded, "total": exc.total, **exc.report}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(ledger_router, prefix="/api/v1")
app.include_router(csv_router, prefix="/api/v1")
app.include_router(selection_router, prefix="/api/v1")
app.include_router(metrics_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
