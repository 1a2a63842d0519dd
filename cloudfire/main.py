"""Entry point for the CloudFire server."""

import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import bind_request_id, reset_request_id, setup_logging
from cloudfire.cleanup_task import TrashRetentionCleaner
from cloudfire.config import SERVER_HOST, SERVER_PORT
from cloudfire.database import ping_store
from cloudfire.exceptions import (
    AccountDisabledError,
    CloudFireException,
    DuplicateIdentityError,
    InvalidAPIKeyError,
    InvalidCredentialsError,
    NotFoundError,
    StoreUnavailableError,
    UnauthorizedAccessError,
    ValidationError,
)
from cloudfire.routes.admin_routes import router as admin_router
from cloudfire.routes.auth_routes import router as auth_router
from cloudfire.routes.file_routes import router as file_router
from cloudfire.routes.folder_routes import router as folder_router
from cloudfire.routes.share_routes import router as share_router
from cloudfire.routes.trash_routes import router as trash_router
from cloudfire.service_locator import get_engine

logger = setup_logging('cloudfire')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the store, seed the admin account and run the retention task for
    the lifetime of the application.
    """
    logger.info("CloudFire server starting up...")

    engine = get_engine()
    await engine.start()
    logger.info("Store initialized and admin account seeded")

    cleanup_task = TrashRetentionCleaner(engine)
    await cleanup_task.start()

    yield

    logger.info("CloudFire server shutting down...")
    await cleanup_task.stop()


app = FastAPI(
    title="CloudFire",
    description="Personal cloud file storage with trash, sharing and quotas",
    version="1.0.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = bind_request_id(request_id)

    start_time = time.time()
    logger.info(f"Request started: {request.method} {request.url.path}")

    try:
        response = await call_next(request)

        duration = time.time() - start_time
        user_id = getattr(request.state, 'user_id', None)
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [user_id={user_id or 'anonymous'}]"
        )
    finally:
        reset_request_id(token)

    response.headers["X-Request-ID"] = request_id
    return response


def _client_error(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    logger.warning(f"{type(exc).__name__}: {exc} path={request.url.path}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": code})


@app.exception_handler(DuplicateIdentityError)
async def duplicate_identity_handler(request: Request, exc: DuplicateIdentityError):
    return _client_error(request, exc, status.HTTP_409_CONFLICT, "USER_ALREADY_EXISTS")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _client_error(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS")


@app.exception_handler(InvalidAPIKeyError)
async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
    return _client_error(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_API_KEY")


@app.exception_handler(AccountDisabledError)
async def account_disabled_handler(request: Request, exc: AccountDisabledError):
    return _client_error(request, exc, status.HTTP_403_FORBIDDEN, "ACCOUNT_DISABLED")


@app.exception_handler(UnauthorizedAccessError)
async def unauthorized_access_handler(request: Request, exc: UnauthorizedAccessError):
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(f"Unauthorized access error: {exc} [user_id={user_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc), "code": "UNAUTHORIZED_ACCESS"}
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _client_error(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _client_error(request, exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"Store unavailable error: {exc} path={request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage is temporarily unavailable", "code": "STORE_UNAVAILABLE"}
    )


@app.exception_handler(CloudFireException)
async def cloudfire_exception_handler(request: Request, exc: CloudFireException):
    logger.error(f"CloudFire exception: {exc} path={request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


app.include_router(auth_router)
app.include_router(file_router)
app.include_router(folder_router)
app.include_router(trash_router)
app.include_router(share_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "CloudFire API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "cloudfire"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check endpoint. Verifies the store answers queries.
    """
    store_ok = await ping_store()
    status_code = status.HTTP_200_OK if store_ok else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={"ready": store_ok, "database": "ok" if store_ok else "unavailable"}
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "cloudfire.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
    )


if __name__ == "__main__":
    main()
