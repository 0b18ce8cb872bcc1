"""
Ошибки приложения и их преобразование в HTTP ответы.

Сервисы и эндпоинты поднимают AppException, глобальные обработчики
превращают любое исключение в единый конверт {success, message, data}.
"""

import logging
from enum import Enum

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    STORAGE = "storage"
    INTERNAL = "internal"


# Соответствие типов ошибок HTTP статусам
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.CONFLICT: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.FORBIDDEN: 403,
    ErrorType.STORAGE: 500,
    ErrorType.INTERNAL: 500,
}


class AppException(Exception):
    """Исключение, которое поднимают сервисы и эндпоинты."""

    def __init__(self, error_type: ErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_type, 500)


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Глобальный обработчик AppException."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected ({exc.error_type.value}): {exc.message}"
        )
    headers = None
    if exc.error_type == ErrorType.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Ошибки маршрутизации FastAPI/Starlette (404 пути, 405 метода и т.п.)."""
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Невалидные параметры запроса приводятся к 400 ValidationError."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    message = "Invalid request. " + "; ".join(problems)
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return error_response(400, message)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Необработанные исключения: 500, текст ошибки только в режиме отладки."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    message = str(exc) if settings.DEBUG else "Internal server error"
    return error_response(500, message)
