"""
Модель товара.
"""

from typing import List, Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Product(TimestampMixin, Base):
    """
    Модель товара.

    Attributes:
        id: Уникальный идентификатор товара
        name: Название товара
        description: Описание товара
        quantity: Остаток на складе
        price: Цена
        offer_price: Цена по акции
        category_id: ID категории (обязательная ссылка)
        subcategory_id: ID подкатегории (обязательная ссылка)
        brand_id, variant_type_id, variant_id: Необязательные ссылки
        images: Изображения товара по слотам 1-5
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    offer_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    subcategory_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subcategories.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    brand_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("brands.id", ondelete="SET NULL"), nullable=True
    )
    variant_type_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("variant_types.id", ondelete="SET NULL"), nullable=True
    )
    variant_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("variants.id", ondelete="SET NULL"), nullable=True
    )

    # Связи для отображения названий (populate)
    category: Mapped["Category"] = relationship(lazy="joined")
    subcategory: Mapped["SubCategory"] = relationship(lazy="joined")
    brand: Mapped[Optional["Brand"]] = relationship(lazy="joined")
    variant_type: Mapped[Optional["VariantType"]] = relationship(lazy="joined")
    variant: Mapped[Optional["Variant"]] = relationship(lazy="joined")

    images: Mapped[List["ProductImage"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.slot",
        lazy="selectin",
    )

    def image_in_slot(self, slot: int) -> Optional["ProductImage"]:
        for image in self.images:
            if image.slot == slot:
                return image
        return None

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
