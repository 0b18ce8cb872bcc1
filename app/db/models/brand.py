"""
Модель бренда товара.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Brand(Base):
    """Бренд, опционально привязанный к подкатегории."""

    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subcategory_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("subcategories.id", ondelete="RESTRICT"), nullable=True
    )
