"""
Модель изображения товара.
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# Номера слотов изображений: image1..image5
IMAGE_SLOTS = (1, 2, 3, 4, 5)


class ProductImage(Base):
    """
    Изображение товара в одном из пяти слотов.

    Attributes:
        id: Уникальный идентификатор изображения
        product_id: ID товара
        slot: Номер слота (1-5), уникален в пределах товара
        url: Публичный URL изображения
        storage_key: Ключ объекта в хранилище (для удаления)
    """

    __tablename__ = "product_images"

    __table_args__ = (
        UniqueConstraint("product_id", "slot", name="uq_product_image_slot"),
        CheckConstraint("slot BETWEEN 1 AND 5", name="slot_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False
    )
    slot: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    storage_key: Mapped[str] = mapped_column(String(255), nullable=False)

    product: Mapped["Product"] = relationship(back_populates="images")
