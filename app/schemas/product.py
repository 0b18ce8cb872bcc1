"""
Pydantic схемы товаров.

Ссылки на категорию, подкатегорию, бренд и варианты отдаются
развернутыми ({id, name} или {id, type}) под публичными именами proXxxId.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NamedRef(BaseModel):
    """Развернутая ссылка: id и название."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class VariantTypeRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str


class ProductImageOut(BaseModel):
    """Изображение в слоте товара."""

    model_config = ConfigDict(from_attributes=True)

    slot: int = Field(serialization_alias="image")
    url: str


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    quantity: int
    price: float
    offer_price: Optional[float] = Field(None, serialization_alias="offerPrice")

    category: NamedRef = Field(serialization_alias="proCategoryId")
    subcategory: NamedRef = Field(serialization_alias="proSubCategoryId")
    brand: Optional[NamedRef] = Field(None, serialization_alias="proBrandId")
    variant_type: Optional[VariantTypeRef] = Field(None, serialization_alias="proVariantTypeId")
    variant: Optional[NamedRef] = Field(None, serialization_alias="proVariantId")

    images: List[ProductImageOut] = []
