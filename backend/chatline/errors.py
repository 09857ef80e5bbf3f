import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .core.exceptions import DatabaseRequestError, DomainException, RepositoryException

logger = logging.getLogger(__name__)


def _error_body(message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "detail": {
            "type": "error",
            "message": message,
            "code": code,
            "details": details or {},
        }
    }


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        headers = {"WWW-Authenticate": "Bearer"} if http_exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse({"detail": http_exc.detail}, status_code=http_exc.status_code, headers=headers)

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(request: Request, exc: RepositoryException) -> JSONResponse:
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
        if isinstance(exc, DatabaseRequestError):
            body = _error_body("Database request error", code="DATABASE_REQUEST_ERROR")
        else:
            body = _error_body("Internal server error", code="STORAGE_ERROR")
        return JSONResponse(body, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
