"""Pydantic schemas for API requests and responses."""

from src.schemas.category import (
    CategoryPreferenceResponse,
    CategoryPreferenceUpdate,
    ClassifyRequest,
    ClassifyResponse,
)
from src.schemas.inventory import (
    IngredientMatch,
    InventoryMatchRequest,
    InventoryMatchResponse,
    MealCompletionResponse,
)
from src.schemas.meal_plan import (
    GenerateShoppingListRequest,
    MealCompletionRequest,
    MealPlanEntry,
    Recipe,
    RecipeIngredient,
    SimpleMeal,
    SimpleMealItem,
)
from src.schemas.shopping import (
    AlternativeAmount,
    IngredientReference,
    InventoryRecord,
    ResolvedItem,
    ShoppingListOptions,
    ShoppingListResult,
    ShoppingListStats,
)

__all__ = [
    "AlternativeAmount",
    "CategoryPreferenceResponse",
    "CategoryPreferenceUpdate",
    "ClassifyRequest",
    "ClassifyResponse",
    "GenerateShoppingListRequest",
    "IngredientMatch",
    "IngredientReference",
    "InventoryMatchRequest",
    "InventoryMatchResponse",
    "InventoryRecord",
    "MealCompletionRequest",
    "MealCompletionResponse",
    "MealPlanEntry",
    "Recipe",
    "RecipeIngredient",
    "ResolvedItem",
    "ShoppingListOptions",
    "ShoppingListResult",
    "ShoppingListStats",
    "SimpleMeal",
    "SimpleMealItem",
]
