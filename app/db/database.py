"""
Конфигурация базы данных.

Содержит настройки подключения к БД и фабрику сессий.
"""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Создание движка SQLAlchemy.

    Для SQLite включаются внешние ключи (иначе ON DELETE RESTRICT
    не работает), а in-memory база разделяется между потоками.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            pool_pre_ping=True,  # Проверка соединения перед использованием
            echo=bool(settings.DEBUG),  # Логирование SQL запросов в режиме отладки
        )

    options = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite:"):
        options["poolclass"] = StaticPool
    sqlite_engine = create_engine(database_url, echo=bool(settings.DEBUG), **options)

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


# Создание движка SQLAlchemy
engine = build_engine(settings.DATABASE_URL)


# Фабрика сессий базы данных
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_db() -> Generator:
    """
    Dependency для получения сессии базы данных.

    Yields:
        Session: Сессия SQLAlchemy

    Note:
        Незафиксированные изменения откатываются, сессия закрывается
        после обработки запроса.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
