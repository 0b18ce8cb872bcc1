"""
Модуль аутентификации и авторизации.

Содержит функции для работы с JWT токенами, хеширования паролей
и проверки токена на защищенных маршрутах.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import AppException, ErrorType

logger = logging.getLogger(__name__)

# Настройка хеширования паролей (bcrypt генерирует соль на каждый хеш)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer схема; отсутствие заголовка обрабатываем сами (401, а не 403)
security = HTTPBearer(auto_error=False)


class AuthService:
    """Сервис для работы с аутентификацией."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Проверка пароля."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Хеширование пароля."""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(
        data: dict, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Создание JWT токена."""
        to_encode = data.copy()
        if expires_delta is not None:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(
                minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
            )

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Проверка подписи и срока действия JWT токена."""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except jwt.PyJWTError as e:
            logger.info(f"Rejected token: {e}")
            return None


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    Проверка Bearer токена для защищенных маршрутов.

    Returns:
        int: ID пользователя из токена (также сохраняется в request.state.user_id)

    Raises:
        AppException: UNAUTHORIZED без токена, FORBIDDEN при неверной
            подписи или истекшем сроке действия
    """
    if credentials is None or not credentials.credentials:
        raise AppException(ErrorType.UNAUTHORIZED, "No token provided.")

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise AppException(ErrorType.FORBIDDEN, "Token is not valid.")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AppException(ErrorType.FORBIDDEN, "Token is not valid.")

    request.state.user_id = user_id
    return user_id


# Экспорт сервиса
auth_service = AuthService()
