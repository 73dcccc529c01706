"""
API Error Handlers

Translate repository failures into HTTP responses:
- missing product or profile -> 404
- product row, upload or image write rejected by the backend -> 502
- any other backend failure -> 503
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

from src.repositories import (
    ImageUploadError,
    ProductNotFoundError,
    ProductWriteError,
    ProfileNotFoundError,
    RepositoryError,
)

logger = structlog.get_logger(__name__)


def _status_for(exc: RepositoryError) -> int:
    if isinstance(exc, (ProductNotFoundError, ProfileNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (ProductWriteError, ImageUploadError)):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_503_SERVICE_UNAVAILABLE


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.warning(
        "Request failed",
        path=request.url.path,
        status_code=status_code,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RepositoryError, repository_error_handler)
