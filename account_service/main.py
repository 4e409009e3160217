"""
Account Service

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from account_service.config import get_settings
from account_service.database import init_db, close_db
from account_service.api.v1 import router as api_router
from account_service.api.middleware.request_id import RequestIdMiddleware
from account_service.kernel.identity.exceptions import (
    ConflictError,
    CredentialMismatchError,
    IdentityError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from account_service.schemas.common import HealthResponse, format_errors
from account_service.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)

# Checked in order; subclasses before their bases
_ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (CredentialMismatchError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    if not settings.secret_key:
        logger.warning("SECRET_KEY is not set; registration will fail to issue tokens")
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Account Service

    Creates user accounts, issues seven-day bearer tokens and lets an
    authenticated user change their name, email and password.
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(RequestIdMiddleware)


def _error_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


def _server_error(request: Request) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "request_id": req_id},
        headers=_error_headers(request),
    )


@app.exception_handler(IdentityError)
async def identity_exception_handler(request: Request, exc: IdentityError):
    """Map identity errors to HTTP responses. Infrastructure detail stays in the logs."""
    if isinstance(exc, InfrastructureError):
        logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc)
        return _server_error(request)

    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    content = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=status_code, content=content, headers=_error_headers(request))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Keep the request ID on 401/404 etc. responses."""
    headers = _error_headers(request)
    if exc.headers:
        headers.update(exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors with the full list of violations."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "errors": format_errors(exc.errors(), skip_body=True)},
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions without exposing internals."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)
    return _server_error(request)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version)


app.include_router(
    api_router,
    prefix=settings.api_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "account_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
