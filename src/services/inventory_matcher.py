"""Inventory matching for shopping lists and meal completion.

Matching is bidirectional substring containment over normalized names: the
query matches a record when either normalized name contains the other. The
first record in list order wins; callers that want a different preference
pre-sort the inventory. Short queries are ambiguous ("oil" matches both
"olive oil" and "vegetable oil") and the first one listed is returned.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence

from src.models.enums import MatchType
from src.schemas.inventory import IngredientMatch
from src.schemas.meal_plan import MealPlanEntry, RecipeIngredient, SimpleMealItem
from src.schemas.shopping import InventoryRecord
from src.services.normalizer import normalize, parse_amount

logger = logging.getLogger(__name__)


def _contains_either_way(query: str, candidate: str) -> bool:
    if not query or not candidate:
        return False
    return query in candidate or candidate in query


def find_best_match(
    normalized_name: str, candidates: Sequence[InventoryRecord]
) -> InventoryRecord | None:
    """Return the first inventory record whose name overlaps the query, or None.

    None means "needs manual selection", never an error.
    """
    query = normalize(normalized_name)
    if not query:
        return None

    for record in candidates:
        if _contains_either_way(query, normalize(record.name)):
            return record
    return None


def candidate_matches(name: str, inventory: Iterable[InventoryRecord]) -> list[InventoryRecord]:
    """Every record that overlaps ``name``, in inventory order, for manual selection lists."""
    query = normalize(name)
    if not query:
        return []
    return [record for record in inventory if _contains_either_way(query, normalize(record.name))]


def _scaled_quantity(amount: float, completion_percentage: float) -> float:
    if amount <= 0:
        return 1
    return round(amount * completion_percentage / 100, 1)


def match_meal_ingredients(
    ingredients: Iterable[RecipeIngredient],
    inventory: Sequence[InventoryRecord],
    completion_percentage: float = 100,
) -> list[IngredientMatch]:
    """Pair each recipe ingredient with the inventory record it would consume.

    The quantity to consume is the ingredient amount scaled by how much of
    the meal was eaten, rounded to one decimal. Ingredients without a usable
    amount consume 1.
    """
    matches = []
    for ingredient in ingredients:
        key = normalize(ingredient.name)
        record = find_best_match(key, inventory)
        amount, _ = parse_amount(ingredient.amount)

        matches.append(
            IngredientMatch(
                ingredient=ingredient,
                normalized_key=key,
                inventory_item=record,
                quantity_to_consume=_scaled_quantity(amount, completion_percentage),
                reason="recipe",
                match_type=MatchType.AUTO if record else MatchType.NONE,
            )
        )

    matched = sum(1 for m in matches if m.inventory_item is not None)
    logger.info(f"Matched {matched}/{len(matches)} recipe ingredients to inventory")
    return matches


def match_simple_meal_items(
    items: Iterable[SimpleMealItem],
    inventory: Sequence[InventoryRecord],
    completion_percentage: float = 100,
) -> list[IngredientMatch]:
    """Resolve simple-meal items, which reference inventory records directly by id.

    An item whose id is missing or no longer in inventory falls back to name
    matching.
    """
    by_id = {str(record.id): record for record in inventory}
    matches = []

    for item in items:
        key = normalize(item.item_name)
        record = None
        match_type = MatchType.NONE

        if item.inventory_item_id is not None:
            record = by_id.get(str(item.inventory_item_id))
            if record is not None:
                match_type = MatchType.DIRECT

        if record is None:
            record = find_best_match(key, inventory)
            if record is not None:
                match_type = MatchType.AUTO

        matches.append(
            IngredientMatch(
                ingredient=RecipeIngredient(
                    name=item.item_name, amount=item.quantity, unit=item.unit
                ),
                normalized_key=key,
                inventory_item=record,
                quantity_to_consume=_scaled_quantity(item.quantity or 0, completion_percentage),
                reason="simple_meal",
                match_type=match_type,
            )
        )

    return matches


def select_inventory_item(match: IngredientMatch, record: InventoryRecord | None) -> IngredientMatch:
    """Return a copy of ``match`` pointing at a record the user picked by hand.

    Passing None clears the selection.
    """
    if record is None:
        return match.model_copy(
            update={
                "inventory_item": None,
                "match_type": MatchType.NONE,
                "is_manually_selected": True,
            }
        )
    return match.model_copy(
        update={
            "inventory_item": record,
            "match_type": MatchType.MANUAL,
            "is_manually_selected": True,
        }
    )


class InventoryWorkingCopy:
    """A private copy of the household inventory that newly added items are appended to.

    The list handed in by the inventory service is never modified.
    """

    def __init__(self, records: Iterable[InventoryRecord]):
        self._records = [record.model_copy() for record in records]

    def __iter__(self) -> Iterator[InventoryRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[InventoryRecord]:
        return list(self._records)

    def append(self, record: InventoryRecord) -> InventoryRecord:
        self._records.append(record)
        logger.debug(f"Added '{record.name}' to inventory working copy")
        return record

    def find_best_match(self, name: str) -> InventoryRecord | None:
        return find_best_match(name, self._records)

    def candidate_matches(self, name: str) -> list[InventoryRecord]:
        return candidate_matches(name, self._records)


def match_completed_meal(
    entry: MealPlanEntry,
    inventory: Iterable[InventoryRecord],
    completion_percentage: float = 100,
    added_items: Iterable[InventoryRecord] = (),
    selections: Mapping[str, int | str | None] | None = None,
) -> list[IngredientMatch]:
    """Match every ingredient of a finished meal, then apply hand-picked records.

    ``added_items`` are records the user created while completing the meal;
    they are matched like the rest of the inventory. ``selections`` maps a
    normalized key to the id of the record the user chose, or None to clear
    the match.
    """
    working = InventoryWorkingCopy(inventory)
    for record in added_items:
        working.append(record)
    records = working.records

    matches = []
    if entry.recipe is not None:
        matches.extend(
            match_meal_ingredients(entry.recipe.ingredients, records, completion_percentage)
        )
    if entry.simple_meal is not None:
        matches.extend(
            match_simple_meal_items(entry.simple_meal.items, records, completion_percentage)
        )

    if selections:
        by_id = {str(record.id): record for record in records}
        for index, match in enumerate(matches):
            if match.normalized_key not in selections:
                continue
            chosen = selections[match.normalized_key]
            record = by_id.get(str(chosen)) if chosen is not None else None
            if chosen is not None and record is None:
                logger.warning(f"Ignoring selection of unknown record {chosen!r} for '{match.normalized_key}'")
                continue
            matches[index] = select_inventory_item(match, record)

    return matches
