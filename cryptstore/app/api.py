"""FastAPI application exposing the encrypted file storage."""

import logging
import secrets
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from cryptstore.adapters.config_loader import ConfigError
from cryptstore.domain.models import UploadResult
from cryptstore.security.problem_details import problem_response, upload_problem
from cryptstore.security.uploads import UploadError
from cryptstore.services.storage_service import SecureStorage

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _ensure_correlation_id(request: Request) -> str:
    """Return existing correlation id or generate a new one."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if not correlation_id:
        correlation_id = secrets.token_urlsafe(16)
        request.state.correlation_id = correlation_id
    return correlation_id


def get_storage(request: Request) -> SecureStorage:
    return request.app.state.storage


def create_app(storage: SecureStorage) -> FastAPI:
    """Build the HTTP app around an initialised storage engine."""
    app = FastAPI(title="Cryptstore", description="Encrypted file storage", version="1.0.0")
    app.state.storage = storage

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        correlation_id = _ensure_correlation_id(request)
        response = await call_next(request)
        response.headers.setdefault("X-Correlation-ID", correlation_id)
        return response

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        return upload_problem(
            exc,
            instance=str(request.url.path),
            correlation_id=_ensure_correlation_id(request),
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        logger.error("Storage unavailable: %s", exc)
        return problem_response(
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
            title="Storage unavailable",
            detail="Secure storage is not configured",
            code="storage_unavailable",
            instance=str(request.url.path),
            correlation_id=_ensure_correlation_id(request),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
        logger.warning("HTTPException (%s): %s", exc.status_code, detail)
        return problem_response(
            status=exc.status_code,
            title="HTTP error",
            detail=detail,
            code=code,
            headers=exc.headers,
            instance=str(request.url.path),
            correlation_id=_ensure_correlation_id(request),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return problem_response(
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            title="Internal server error",
            detail="Internal server error",
            code="internal_error",
            instance=str(request.url.path),
            correlation_id=_ensure_correlation_id(request),
        )

    @app.post("/api/v1/files", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
    async def upload_file(request: Request):
        """Validate, encrypt and store a single uploaded file."""
        stored = await get_storage(request).upload_file(request)
        return UploadResult.from_descriptor(stored)

    @app.get("/api/v1/files/{filename}")
    async def download_file(filename: str, request: Request) -> Response:
        """Stream a stored file back decrypted, as an attachment."""
        return await get_storage(request).download_file(filename, instance=str(request.url.path))

    @app.delete("/api/v1/files/{filename}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_file(filename: str, request: Request):
        """Delete a stored file."""
        if not await get_storage(request).delete_file(filename):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy" if storage.ready else "unconfigured",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
