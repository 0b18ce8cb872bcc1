from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryOut(BaseModel):
    """Схема для вывода категории."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image: str


class SubCategoryCreate(BaseModel):
    """Схема для создания подкатегории."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    category_id: Optional[int] = Field(None, alias="categoryId")


class SubCategoryOut(BaseModel):
    """Схема для вывода подкатегории."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: int = Field(serialization_alias="categoryId")
