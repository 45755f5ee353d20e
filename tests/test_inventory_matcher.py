"""Tests for inventory matching and meal completion matching."""

from src.models.enums import MatchType
from src.schemas.meal_plan import MealPlanEntry, RecipeIngredient, SimpleMealItem
from src.schemas.shopping import InventoryRecord
from src.services.inventory_matcher import (
    InventoryWorkingCopy,
    candidate_matches,
    find_best_match,
    match_completed_meal,
    match_meal_ingredients,
    match_simple_meal_items,
    select_inventory_item,
)


def test_short_query_matches_longer_record():
    """Test "chicken" matches an inventory item named "Chicken Breast"."""
    inventory = [InventoryRecord(id=1, name="Chicken Breast", quantity=2, unit="lb")]

    match = find_best_match("chicken", inventory)

    assert match is not None
    assert match.id == 1


def test_long_query_matches_shorter_record():
    """Test "chicken breast" matches an inventory item named "Chicken"."""
    inventory = [InventoryRecord(id=1, name="Chicken", quantity=1, unit="each")]

    assert find_best_match("chicken breast", inventory).id == 1


def test_record_names_are_normalized():
    """Test descriptors on the inventory side do not prevent a match."""
    inventory = [InventoryRecord(id=9, name="Organic Whole Milk (2%)", quantity=1, unit="gal")]

    assert find_best_match("milk", inventory).id == 9


def test_no_match_returns_none(pantry_inventory):
    """Test that an unmatched name returns None instead of raising."""
    assert find_best_match("saffron", pantry_inventory) is None


def test_empty_inventory_returns_none():
    """Test that an empty inventory returns None."""
    assert find_best_match("flour", []) is None


def test_empty_query_returns_none(pantry_inventory):
    """Test that an empty key never matches everything."""
    assert find_best_match("", pantry_inventory) is None
    assert candidate_matches("(optional)", pantry_inventory) == []


def test_short_name_ambiguity_returns_first_listed(pantry_inventory):
    """Known precision limit: "oil" matches every oil and the first one listed wins."""
    assert find_best_match("oil", pantry_inventory).name == "Olive Oil"
    assert find_best_match("oil", list(reversed(pantry_inventory))).name == "Vegetable Oil"
    assert [r.name for r in candidate_matches("oil", pantry_inventory)] == [
        "Olive Oil",
        "Vegetable Oil",
    ]


def test_match_meal_ingredients_scales_by_completion(pantry_inventory):
    """Test quantities to consume are scaled and rounded to one decimal."""
    ingredients = [
        RecipeIngredient(name="Flour", amount="2 cups"),
        RecipeIngredient(name="Eggs", amount=3, unit="each"),
        RecipeIngredient(name="Saffron"),
    ]

    matches = match_meal_ingredients(ingredients, pantry_inventory, completion_percentage=50)

    assert [m.match_type for m in matches] == [MatchType.AUTO, MatchType.AUTO, MatchType.NONE]
    assert matches[0].inventory_item.id == 1
    assert matches[0].quantity_to_consume == 1.0
    assert matches[1].quantity_to_consume == 1.5
    assert matches[2].inventory_item is None
    assert matches[2].quantity_to_consume == 1


def test_match_meal_ingredients_rounds_to_one_decimal(pantry_inventory):
    """Test a partially eaten meal rounds the consumed amount."""
    matches = match_meal_ingredients(
        [RecipeIngredient(name="Chicken Breast", amount=1, unit="lb")],
        pantry_inventory,
        completion_percentage=33,
    )

    assert matches[0].quantity_to_consume == 0.3


def test_match_simple_meal_items_by_id(pantry_inventory):
    """Test simple-meal items resolve directly through their inventory id."""
    items = [
        SimpleMealItem.model_validate({"itemName": "Eggs", "quantity": 2, "inventoryItemId": 5}),
        SimpleMealItem(item_name="Olive Oil", quantity=1, inventory_item_id="999"),
        SimpleMealItem(item_name="Caviar", quantity=1),
    ]

    matches = match_simple_meal_items(items, pantry_inventory)

    assert matches[0].match_type == MatchType.DIRECT
    assert matches[0].inventory_item.id == 5
    assert matches[0].quantity_to_consume == 2
    # Stale id falls back to name matching
    assert matches[1].match_type == MatchType.AUTO
    assert matches[1].inventory_item.id == 3
    assert matches[2].match_type == MatchType.NONE
    assert all(m.reason == "simple_meal" for m in matches)


def test_select_inventory_item_marks_manual(pantry_inventory):
    """Test a hand-picked record is recorded as a manual match on a copy."""
    match = match_meal_ingredients([RecipeIngredient(name="Saffron")], pantry_inventory)[0]

    selected = select_inventory_item(match, pantry_inventory[3])

    assert selected.match_type == MatchType.MANUAL
    assert selected.is_manually_selected is True
    assert selected.inventory_item.name == "Vegetable Oil"
    assert match.match_type == MatchType.NONE

    cleared = select_inventory_item(selected, None)
    assert cleared.inventory_item is None
    assert cleared.match_type == MatchType.NONE


def test_working_copy_does_not_touch_source(pantry_inventory):
    """Test appending to the working copy leaves the caller's list unchanged."""
    working = InventoryWorkingCopy(pantry_inventory)

    working.append(InventoryRecord(id=42, name="Saffron", quantity=1, unit="g"))

    assert len(working) == len(pantry_inventory) + 1
    assert len(pantry_inventory) == 5
    assert working.find_best_match("saffron").id == 42
    assert find_best_match("saffron", pantry_inventory) is None


def test_completed_meal_uses_added_items(pantry_inventory):
    """Test records created during completion are matched without touching the inventory."""
    entry = MealPlanEntry.model_validate(
        {"recipe": {"title": "Paella", "ingredients": [{"name": "Saffron", "amount": 1}]}}
    )

    matches = match_completed_meal(
        entry,
        pantry_inventory,
        added_items=[InventoryRecord(id=42, name="Spanish Saffron", quantity=2, unit="g")],
    )

    assert matches[0].inventory_item.id == 42
    assert matches[0].match_type == MatchType.AUTO
    assert len(pantry_inventory) == 5


def test_completed_meal_applies_selections(pantry_inventory):
    """Test hand-picked ids become manual matches and None clears a match."""
    entry = MealPlanEntry.model_validate(
        {
            "recipe": {
                "title": "Stir Fry",
                "ingredients": [{"name": "Oil", "amount": 2}, {"name": "Chicken", "amount": 1}],
            }
        }
    )

    matches = match_completed_meal(
        entry, pantry_inventory, selections={"oil": 4, "chicken": None, "tofu": 1}
    )

    oil, chicken = matches
    assert oil.inventory_item.name == "Vegetable Oil"
    assert oil.match_type == MatchType.MANUAL
    assert oil.is_manually_selected is True
    assert chicken.inventory_item is None
    assert chicken.match_type == MatchType.NONE


def test_completed_meal_ignores_unknown_selection(pantry_inventory):
    """Test a selection naming a missing record keeps the automatic match."""
    entry = MealPlanEntry.model_validate(
        {"recipe": {"title": "Omelette", "ingredients": [{"name": "Eggs", "amount": 3}]}}
    )

    [eggs] = match_completed_meal(entry, pantry_inventory, selections={"eggs": 99})

    assert eggs.match_type == MatchType.AUTO
    assert eggs.inventory_item.id == 5
