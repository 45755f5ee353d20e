"""Shopping list schemas."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.models.enums import CategoryTag, ListView, MatchType


class InventoryRecord(BaseModel):
    """An item the household owns. Owned by the inventory service; read only here."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | str = Field(..., validation_alias=AliasChoices("id", "_id"))
    name: str
    brand: str | None = None
    category: str | None = None
    quantity: float = 0
    unit: str = ""
    location: str | None = None


class IngredientReference(BaseModel):
    """One ingredient occurrence read from a recipe or a simple meal."""

    raw_name: str
    amount: float | None = None
    unit: str | None = None
    source_recipe: str | None = None
    category_hint: str | None = None
    inventory_item_id: int | str | None = None


class AlternativeAmount(BaseModel):
    """A quantity that could not be summed because its unit differs."""

    amount: float = 0
    unit: str = ""
    recipes: list[str] = Field(default_factory=list)


class ResolvedItem(BaseModel):
    """A shopping-list line after normalization, classification and matching."""

    ingredient: str
    normalized_key: str
    category: CategoryTag = CategoryTag.OTHER
    amount: float = 0
    unit: str = ""
    alternative_amounts: list[AlternativeAmount] = Field(default_factory=list)
    recipes: list[str] = Field(default_factory=list)
    in_inventory: bool = False
    inventory_item: InventoryRecord | None = None
    purchased: bool = False
    match_type: MatchType = MatchType.NONE


class ShoppingListStats(BaseModel):
    """Counts across every item of a list."""

    total_items: int = 0
    need_to_buy: int = 0
    in_inventory: int = 0
    purchased: int = 0


class ShoppingListOptions(BaseModel):
    """Switches for shopping list generation."""

    check_inventory: bool = True
    combine_ingredients: bool = True


class ShoppingListResult(BaseModel):
    """A generated shopping list grouped by category in canonical order."""

    items: dict[CategoryTag, list[ResolvedItem]] = Field(default_factory=dict)
    stats: ShoppingListStats = Field(default_factory=ShoppingListStats)
    generated_at: datetime

    def all_items(self) -> list[ResolvedItem]:
        """Every item across all categories, in display order."""
        return [item for bucket in self.items.values() for item in bucket]


# --- Requests ---


class ConsolidateRequest(BaseModel):
    """Raw entries in any supported shape (strings, objects, categorized maps)."""

    entries: Any


class MoveItemRequest(BaseModel):
    """Move one item of a generated list to a different category."""

    result: ShoppingListResult
    normalized_key: str = Field(..., min_length=1)
    from_category: str
    to_category: CategoryTag
    occurrence: int = Field(0, ge=0)


class TogglePurchasedRequest(BaseModel):
    """Flip the purchased flag of one item."""

    result: ShoppingListResult
    normalized_key: str = Field(..., min_length=1)
    category: str | None = None
    occurrence: int = Field(0, ge=0)


class SelectInventoryRequest(BaseModel):
    """Link one item to an inventory record picked by hand, or clear the link."""

    result: ShoppingListResult
    normalized_key: str = Field(..., min_length=1)
    category: str | None = None
    occurrence: int = Field(0, ge=0)
    record: InventoryRecord | None = None


class FilterListRequest(BaseModel):
    """View a subset of a generated list."""

    result: ShoppingListResult
    view: ListView = ListView.ALL


class ShoppingListTextResponse(BaseModel):
    """Plain-text rendering of a list."""

    text: str


class ExportTextRequest(BaseModel):
    """Render a generated list as plain text."""

    result: ShoppingListResult
    title: str = Field("Shopping List", max_length=200)
