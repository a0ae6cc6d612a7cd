"""FastAPI entrypoint for the restaurant point-of-sale API."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from restopos.api.v1.api import api_router
from restopos.core.config import settings
from restopos.db.base import Base
from restopos.db.session import engine
from restopos.services.bill_reaper import run_bill_reaper_forever

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")

_reaper_task: asyncio.Task | None = None


@app.on_event("startup")
async def startup() -> None:
    global _reaper_task

    if not os.getenv("JWT_SECRET_KEY"):
        logger.warning("JWT_SECRET_KEY not set; using development fallback secret.")
    Base.metadata.create_all(bind=engine)
    if settings.bill_reaper_enabled:
        _reaper_task = asyncio.create_task(run_bill_reaper_forever())
        logger.info("[BOOTSTRAP] Bill reaper scheduled at minute %s of every hour", settings.bill_reaper_minute)


@app.on_event("shutdown")
async def shutdown() -> None:
    global _reaper_task

    if _reaper_task is not None:
        _reaper_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _reaper_task
        _reaper_task = None


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}
