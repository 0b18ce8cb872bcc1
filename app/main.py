"""
Главный модуль FastAPI приложения Shop Catalog API.

Содержит конфигурацию приложения, логирования, обработчиков ошибок
и роутеры.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.routers import api_router
from app.core.config import settings
from app.core.errors import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.db.database import engine
from app.db.models import Base

# Настройка логирования
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title="Shop Catalog API",
    description="API магазина: категории, товары, постеры и пользователи",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Единый конверт {success, message, data} для всех ошибок
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Раздача файлов локального хранилища
if settings.STORAGE_TYPE == "local":
    uploads_path = os.path.abspath(settings.STORAGE_PATH)
    os.makedirs(uploads_path, exist_ok=True)
    app.mount("/static", StaticFiles(directory=uploads_path), name="static")
    logger.info(f"Static files mounted at /static from {uploads_path}")

# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: сузить в продакшене до доменов витрины и админки
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения
    """
    return {"status": "ok", "service": "Shop Catalog API", "version": "1.0.0"}


# Подключение API роутеров
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_event():
    """
    Событие запуска приложения.

    Создает недостающие таблицы.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
