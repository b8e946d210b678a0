import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from opensdr.linkedin.errors import (
    NavigationExhaustedError,
    NavigationTransientError,
    ProfileNotFoundError,
    ReconciliationError,
    SessionMissingError,
)
from opensdr.logging_config import setup_logging
from opensdr.routers import linkedin

logger = logging.getLogger("opensdr")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    setup_logging()
    yield

    # Shutdown: close the operator's browser if a draft left it open
    if linkedin._prospector is not None:
        await linkedin._prospector.close()
    logger.info("Shutting down.")


app = FastAPI(title="OpenSDR", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(linkedin.router, prefix="/api/linkedin", tags=["linkedin"])

ERROR_STATUS = {
    SessionMissingError: 401,
    ProfileNotFoundError: 404,
    NavigationTransientError: 502,
    NavigationExhaustedError: 502,
    ReconciliationError: 502,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


for exc_class, status_code in ERROR_STATUS.items():
    app.add_exception_handler(exc_class, _error_handler(status_code))


@app.get("/api/ping", response_class=PlainTextResponse)
async def ping():
    return "pong"


@app.get("/api/health")
async def health():
    return {"status": "ok"}
