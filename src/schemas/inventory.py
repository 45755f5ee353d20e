"""Inventory matching schemas."""

from pydantic import BaseModel, Field

from src.models.enums import MatchType
from src.schemas.meal_plan import RecipeIngredient
from src.schemas.shopping import InventoryRecord


class InventoryMatchRequest(BaseModel):
    """Find the inventory record for an ingredient name."""

    name: str = Field(..., max_length=500)
    inventory: list[InventoryRecord] = Field(default_factory=list)


class InventoryMatchResponse(BaseModel):
    """Best match plus every containment candidate for manual selection."""

    normalized_key: str
    match: InventoryRecord | None
    candidates: list[InventoryRecord]
    needs_manual_selection: bool


class IngredientMatch(BaseModel):
    """A recipe or simple-meal ingredient paired with the inventory it consumes."""

    ingredient: RecipeIngredient
    normalized_key: str
    inventory_item: InventoryRecord | None = None
    quantity_to_consume: float = 0
    reason: str = "recipe"
    match_type: MatchType = MatchType.NONE
    is_manually_selected: bool = False


class MealCompletionResponse(BaseModel):
    """Ingredient matches for a completed meal."""

    matches: list[IngredientMatch]
    matched: int
    unmatched: int
