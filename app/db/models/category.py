"""
Модели категорий и подкатегорий товаров.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

# Значение поля image, когда картинка не загружалась
NO_IMAGE_URL = "no_url"


class Category(TimestampMixin, Base):
    """
    Модель категории товаров.

    Attributes:
        id: Уникальный идентификатор категории
        name: Название категории
        image: URL изображения или "no_url"
        image_key: Ключ объекта в хранилище изображений
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[str] = mapped_column(Text, default=NO_IMAGE_URL, nullable=False)
    image_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"


class SubCategory(TimestampMixin, Base):
    """
    Модель подкатегории.

    Удаление категории запрещено, пока на нее ссылается хотя бы
    одна подкатегория (ON DELETE RESTRICT).
    """

    __tablename__ = "subcategories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped["Category"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<SubCategory(id={self.id}, name='{self.name}')>"
