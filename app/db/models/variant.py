"""
Модели типов вариантов (размер, цвет...) и самих вариантов.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class VariantType(Base):
    """Тип варианта, например "Size" с type="size"."""

    __tablename__ = "variant_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)


class Variant(Base):
    """Значение варианта, например "XL"."""

    __tablename__ = "variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    variant_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("variant_types.id", ondelete="RESTRICT"), nullable=False
    )
