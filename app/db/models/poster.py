"""
Модель рекламного постера.
"""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .category import NO_IMAGE_URL


class Poster(TimestampMixin, Base):
    """Постер для главной страницы. Связей с другими моделями нет."""

    __tablename__ = "posters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    poster_name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, default=NO_IMAGE_URL, nullable=False)
    image_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Poster(id={self.id}, poster_name='{self.poster_name}')>"
