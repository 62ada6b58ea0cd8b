"""Main FastAPI application."""
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from osce_admin.config import logging_settings, settings
from osce_admin.core.logging_config import setup_logging
from osce_admin.dependencies.database import get_sessionmanager, initialize_db
from osce_admin.routers import administrations, feedback, participants, stations, tracks
from osce_admin.services.collections.base import CollectionError, StorageUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context for application startup and shutdown."""
    # Configure logging FIRST
    setup_logging()

    if settings.collection_backend != "sql":
        yield
        return

    # Startup: Initialize database
    sessionmanager = get_sessionmanager()
    async with initialize_db(sessionmanager):
        yield


app = FastAPI(title="OSCE Administration API", lifespan=lifespan)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its status and duration. Health checks are not logged."""

    quiet_paths = frozenset({"/health"})

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = logging.getLogger("http")

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.quiet_paths:
            return await call_next(request)

        started = time.monotonic()
        fields = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception as exc:
            fields["duration_ms"] = round((time.monotonic() - started) * 1000, 2)
            self.logger.error("request failed", exc_info=exc, extra=fields)
            # Let the traceback reach the server in dev
            if logging_settings.ENV == "dev":
                raise
            return PlainTextResponse("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        fields["status_code"] = response.status_code
        fields["duration_ms"] = round((time.monotonic() - started) * 1000, 2)
        self.logger.info("request completed", extra=fields)
        return response


app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageUnavailableError)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
    logger.error("Storage unavailable", extra={"path": request.url.path})
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(CollectionError)
async def collection_error_handler(request: Request, exc: CollectionError) -> JSONResponse:
    logger.error("Collection operation failed", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


# Include routers
app.include_router(administrations.router)
app.include_router(tracks.router)
app.include_router(stations.router)
app.include_router(participants.examiner_router)
app.include_router(participants.examinee_router)
app.include_router(participants.client_router)
app.include_router(feedback.router)


@app.get("/health", status_code=status.HTTP_200_OK)
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/", status_code=status.HTTP_200_OK)
def root() -> dict[str, Any]:
    return {"success": True}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
