"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .base import Base
from .brand import Brand
from .category import NO_IMAGE_URL, Category, SubCategory
from .poster import Poster
from .product import Product
from .product_image import IMAGE_SLOTS, ProductImage
from .user import User
from .variant import Variant, VariantType

__all__ = [
    "Base",
    "Brand",
    "Category",
    "SubCategory",
    "NO_IMAGE_URL",
    "Poster",
    "Product",
    "ProductImage",
    "IMAGE_SLOTS",
    "User",
    "Variant",
    "VariantType",
]
