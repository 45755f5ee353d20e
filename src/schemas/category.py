"""Category schemas."""

from pydantic import BaseModel, Field

from src.models.enums import CategoryTag


class ClassifyRequest(BaseModel):
    """Classify a single item name."""

    name: str = Field(..., max_length=500)
    category_hint: str | None = Field(None, max_length=100)
    brand: str | None = Field(None, max_length=255)


class ClassifyResponse(BaseModel):
    """Classification result with provenance."""

    category: CategoryTag
    normalized_key: str
    source: str
    rule: str | None = None


class CategoryPreferenceUpdate(BaseModel):
    """Teach a category for an item name."""

    name: str = Field(..., min_length=1, max_length=255)
    category: CategoryTag


class CategoryPreferenceResponse(BaseModel):
    """A stored preference."""

    normalized_key: str
    category: CategoryTag
