"""
Единый конверт ответа API.
"""

from typing import Any, Optional

from pydantic import BaseModel


class Envelope(BaseModel):
    """Схема ответа: {success, message, data}."""

    success: bool = True
    message: str
    data: Optional[Any] = None


def envelope(message: str, data: Any = None) -> dict:
    """Успешный ответ в едином формате."""
    return Envelope(success=True, message=message, data=data).model_dump()


def dump(schema: type[BaseModel], obj: Any) -> dict:
    """ORM объект -> JSON-совместимый dict с публичными именами полей."""
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)


def dump_many(schema: type[BaseModel], objects) -> list[dict]:
    return [dump(schema, obj) for obj in objects]
