"""petquest - pet progression and task engine."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core import db_client
from src.core.config import settings
from src.core.engine import build_engine, start_engine
from src.core.errors import EngineError, ErrorCategory, classify_error_with_response
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.pet_router import router as pet_router


logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY = {
    ErrorCategory.INVALID_INPUT: 400,
    ErrorCategory.INVALID_TRANSITION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.STORAGE: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so startup logs are captured
    configure_logfire()

    engine = build_engine(settings)
    await start_engine(engine, settings)
    app.state.engine = engine
    logger.info("Engine started", extra={"storage_backend": settings.storage_backend})

    yield

    if settings.storage_backend == "sqlite":
        await db_client.close_connection(db_path=settings.sqlite_db_path)


app = FastAPI(
    title="petquest",
    description="Pet progression and task engine",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(pet_router)


@app.exception_handler(EngineError)
async def engine_error_handler(_request: Request, exc: EngineError) -> JSONResponse:
    """Report engine errors as structured, recoverable responses."""
    status_code = _STATUS_BY_CATEGORY.get(exc.category, 500)
    if status_code >= 500:
        logger.error("engine_fault", extra={"code": exc.code, "error": exc.message})
    else:
        logger.info("engine_rejected_request", extra={"code": exc.code, "error": exc.message})

    response = classify_error_with_response(exc)
    return JSONResponse(content=response.model_dump(mode="json"), status_code=status_code)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
