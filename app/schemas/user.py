"""
Pydantic схемы пользователей.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserCredentials(BaseModel):
    """
    Имя и пароль для регистрации, входа и обновления.

    Поля необязательны на уровне схемы: отсутствие проверяется
    эндпоинтом и возвращается как ValidationError с понятным текстом.
    """

    name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = None


class UserOut(BaseModel):
    """Схема для вывода пользователя (без хеша пароля)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime = Field(serialization_alias="createdAt")


class LoginOut(BaseModel):
    """Данные ответа при входе в систему."""

    token: str
    user: UserOut
