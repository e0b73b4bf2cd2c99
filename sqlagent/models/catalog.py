"""Category models for question routing."""

from pydantic import BaseModel, ConfigDict, Field


class CategoryDefinition(BaseModel):
    """Hand-authored mapping of a business domain onto the schema."""

    name: str = Field(..., description="Category label shown to users")
    tables: tuple[str, ...] = Field(..., description="Tables belonging to the domain")
    keywords: tuple[str, ...] = Field(..., description="Lowercase trigger keywords")

    model_config = ConfigDict(frozen=True)
