"""
Error taxonomy and global exception handlers.

Every handler renders ``{"message": ..., "success": false}`` so clients get one
error shape. Internal details are logged, never sent back.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


# ── Taxonomy ────────────────────────────────────────────────────────
class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class AppError(Exception):
    status_code = 500
    message = "Error interno del servidor."

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.headers = headers


class ValidationError(AppError):
    status_code = 400
    message = "Datos de entrada inválidos."


class Unauthorized(AppError):
    status_code = 401
    message = "Credenciales inválidas."


class Forbidden(AppError):
    status_code = 403
    message = "Acceso denegado."


class NotFound(AppError):
    status_code = 404
    message = "Recurso no encontrado."


class Conflict(AppError):
    status_code = 409
    message = "Conflicto con el estado actual del recurso."


class InternalError(AppError):
    status_code = 500


class TokenError(Exception):
    """Base class for bearer token verification failures."""


class TokenExpired(TokenError):
    pass


class TokenMalformed(TokenError):
    pass


class TokenNotYetValid(TokenError):
    pass


# ── Handlers ────────────────────────────────────────────────────────
def _error(status_code: int, message: object, headers: dict[str, str] | None = None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "success": False, **extra},
        headers=headers,
    )


async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return _error(exc.status_code, exc.message, exc.headers)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    return _error(400, "Faltan campos obligatorios o son inválidos.", fields=fields)


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s", exc.detail)
    return _error(429, "Demasiados intentos. Intente nuevamente más tarde.")


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return _error(409, "Violación de restricción en la base de datos.")


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return _error(500, "Error interno de la base de datos.")


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _error(500, "Error interno del servidor.")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
