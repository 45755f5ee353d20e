"""Meal plan schemas as handed over by the recipe / meal-plan service."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.schemas.shopping import InventoryRecord, ShoppingListOptions, ShoppingListResult


class RecipeIngredient(BaseModel):
    """Ingredient line of a recipe. ``amount`` may be a number or text like "2 cups"."""

    model_config = ConfigDict(extra="ignore")

    name: str
    amount: float | str | None = None
    unit: str | None = None
    category: str | None = None


class Recipe(BaseModel):
    """Recipe with its ingredients."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | str | None = Field(None, validation_alias=AliasChoices("id", "_id"))
    title: str = Field(..., validation_alias=AliasChoices("title", "name"))
    servings: float | None = None
    ingredients: list[RecipeIngredient] = Field(default_factory=list)


class SimpleMealItem(BaseModel):
    """One inventory-backed item of a simple (non-recipe) meal."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    item_name: str = Field(..., validation_alias=AliasChoices("item_name", "itemName"))
    quantity: float | None = None
    unit: str | None = None
    inventory_item_id: int | str | None = Field(
        None, validation_alias=AliasChoices("inventory_item_id", "inventoryItemId")
    )


class SimpleMeal(BaseModel):
    """A meal assembled from inventory items rather than a recipe."""

    name: str = ""
    items: list[SimpleMealItem] = Field(default_factory=list)


class MealPlanEntry(BaseModel):
    """A single meal slot of a plan: a recipe or a simple meal on a given day."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    day: str = ""
    meal_type: str = Field("", validation_alias=AliasChoices("meal_type", "mealType"))
    servings: float | None = None
    recipe: Recipe | None = None
    simple_meal: SimpleMeal | None = Field(
        None, validation_alias=AliasChoices("simple_meal", "simpleMeal")
    )

    @property
    def entry_type(self) -> str:
        if self.recipe is not None:
            return "recipe"
        if self.simple_meal is not None:
            return "simple"
        return "empty"


class GenerateShoppingListRequest(BaseModel):
    """Build a shopping list from meal plan entries and the current inventory."""

    entries: list[MealPlanEntry] = Field(default_factory=list)
    inventory: list[InventoryRecord] = Field(default_factory=list)
    options: ShoppingListOptions | None = None
    previous: ShoppingListResult | None = None


class MealCompletionRequest(BaseModel):
    """Match a finished meal's ingredients against inventory for consumption."""

    entry: MealPlanEntry
    inventory: list[InventoryRecord] = Field(default_factory=list)
    completion_percentage: float = Field(100, gt=0, le=100)
    added_items: list[InventoryRecord] = Field(
        default_factory=list, validation_alias=AliasChoices("added_items", "addedItems")
    )
    selections: dict[str, int | str | None] = Field(default_factory=dict)
