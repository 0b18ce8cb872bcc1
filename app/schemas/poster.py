from pydantic import BaseModel, ConfigDict, Field


class PosterOut(BaseModel):
    """Схема для вывода постера."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    poster_name: str = Field(serialization_alias="posterName")
    image_url: str = Field(serialization_alias="imageUrl")
