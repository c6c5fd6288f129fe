"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from messageboard.api import admin, messages
from messageboard.config import get_settings
from messageboard.logging_setup import configure_logging
from messageboard.services.errors import BoardError, InternalError

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    configure_logging(settings)
    Path(settings.asset_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"Starting message board, environment {settings.environment}")
    yield
    logger.info("Message board stopped")


app = FastAPI(
    title="Message Board API",
    description="Moderated message board with animated avatars",
    version="1.0.0",
    lifespan=lifespan,
    openapi_url="/spec/raw.json",
    docs_url="/spec",
    redoc_url=None,
)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None):
    """Build the ``{status, message}`` body shared by every error."""
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "message": message},
        headers=headers,
    )


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError):
    """Translate service errors into their status and message."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"[{exc.status_code}] {exc.message} {request.method} {request.url.path}")
    else:
        logger.info(f"[{exc.status_code}] {exc.message} {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers or None,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep framework errors (unknown route, bad method) in the same shape."""
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as 400 naming the offending fields."""
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures; only development responses carry the detail."""
    logger.exception(f"[500] {request.method} {request.url.path}: {exc}")
    error = InternalError(str(exc) if settings.is_development else None)
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
    )
    return response


# Register routers
app.include_router(messages.router)
app.include_router(admin.router)

if settings.serve_assets:
    app.mount(
        "/assets",
        StaticFiles(directory=settings.asset_dir, check_dir=False),
        name="assets",
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
