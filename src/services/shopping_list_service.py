"""Shopping list assembly from a meal plan and the household inventory."""

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from src.models.enums import CategoryTag, ListView, MatchType
from src.schemas.meal_plan import MealPlanEntry
from src.schemas.shopping import (
    IngredientReference,
    InventoryRecord,
    ResolvedItem,
    ShoppingListOptions,
    ShoppingListResult,
    ShoppingListStats,
)
from src.services.categorization import CategoryClassifier
from src.services.consolidator import Consolidator, merge_into, order_by_category
from src.services.inventory_matcher import find_best_match
from src.services.normalizer import normalize, parse_amount

logger = logging.getLogger(__name__)

SIMPLE_MEAL_SOURCE = "Simple meal"


def extract_references(entries: Iterable[MealPlanEntry]) -> list[IngredientReference]:
    """One reference per recipe ingredient and simple-meal item, in plan order.

    Recipe amounts are scaled by the planned servings over the recipe's own
    servings when both are known.
    """
    references = []
    for entry in entries:
        if entry.recipe is not None:
            recipe = entry.recipe
            scale = 1.0
            if entry.servings and recipe.servings:
                scale = entry.servings / recipe.servings

            for ingredient in recipe.ingredients:
                amount, parsed_unit = parse_amount(ingredient.amount)
                references.append(
                    IngredientReference(
                        raw_name=ingredient.name,
                        amount=round(amount * scale, 2),
                        unit=ingredient.unit or parsed_unit,
                        source_recipe=recipe.title,
                        category_hint=ingredient.category,
                    )
                )

        if entry.simple_meal is not None:
            source = entry.simple_meal.name or SIMPLE_MEAL_SOURCE
            for item in entry.simple_meal.items:
                references.append(
                    IngredientReference(
                        raw_name=item.item_name,
                        amount=item.quantity or 0,
                        unit=item.unit or "",
                        source_recipe=source,
                        inventory_item_id=item.inventory_item_id,
                    )
                )
    return references


def compute_stats(items: Iterable[ResolvedItem]) -> ShoppingListStats:
    """Counts over every item. need_to_buy is items neither owned nor purchased."""
    stats = ShoppingListStats()
    for item in items:
        stats.total_items += 1
        if item.in_inventory:
            stats.in_inventory += 1
        if item.purchased:
            stats.purchased += 1
        if not item.in_inventory and not item.purchased:
            stats.need_to_buy += 1
    return stats


def _format_quantity(amount: float, unit: str) -> str:
    if not amount:
        return unit.strip()
    return f"{amount:g} {unit}".strip()


class ShoppingListService:
    """Build and edit categorized shopping lists."""

    def __init__(
        self,
        classifier: CategoryClassifier,
        consolidator: Consolidator | None = None,
    ):
        self.classifier = classifier
        self.consolidator = consolidator or Consolidator(classifier)

    def build_shopping_list(
        self,
        meal_plan_entries: Iterable[MealPlanEntry],
        inventory: Sequence[InventoryRecord],
        options: ShoppingListOptions | None = None,
        previous: ShoppingListResult | None = None,
        user_id: int | None = None,
    ) -> ShoppingListResult:
        """Generate a shopping list for a meal plan.

        Running this twice on the same input gives an equivalent list. Purchased
        flags from ``previous`` are carried over by normalized name.
        """
        options = options or ShoppingListOptions()
        references = extract_references(meal_plan_entries)

        items = self.consolidator.consolidate(
            references, user_id=user_id, combine=options.combine_ingredients
        )

        linked_ids = {
            normalize(ref.raw_name): ref.inventory_item_id
            for ref in references
            if ref.inventory_item_id is not None
        }
        for bucket in items.values():
            for item in bucket:
                if options.check_inventory:
                    self._match_inventory(item, inventory, linked_ids.get(item.normalized_key))
                else:
                    item.in_inventory = False
                    item.inventory_item = None
                    item.match_type = MatchType.NONE

        if previous is not None:
            purchased_keys = {i.normalized_key for i in previous.all_items() if i.purchased}
            for bucket in items.values():
                for item in bucket:
                    if item.normalized_key in purchased_keys:
                        item.purchased = True

        result = ShoppingListResult(
            items=items,
            stats=compute_stats(i for bucket in items.values() for i in bucket),
            generated_at=datetime.now(UTC),
        )
        logger.info(
            f"Built shopping list: {len(references)} ingredients -> "
            f"{result.stats.total_items} items, {result.stats.in_inventory} in inventory"
        )
        return result

    def _match_inventory(
        self,
        item: ResolvedItem,
        inventory: Sequence[InventoryRecord],
        linked_id: int | str | None,
    ) -> None:
        record = None
        match_type = MatchType.NONE

        if linked_id is not None:
            record = next((r for r in inventory if str(r.id) == str(linked_id)), None)
            if record is not None:
                match_type = MatchType.DIRECT

        if record is None:
            record = find_best_match(item.normalized_key, inventory)
            if record is not None:
                match_type = MatchType.AUTO

        item.inventory_item = record
        item.in_inventory = record is not None
        item.match_type = match_type

    def move_item(
        self,
        result: ShoppingListResult,
        normalized_key: str,
        from_category: str | CategoryTag,
        to_category: CategoryTag | str,
        user_id: int | None = None,
        occurrence: int = 0,
    ) -> ResolvedItem | None:
        """Move an item to another category and remember the choice for this user.

        ``occurrence`` picks among items sharing a key, which only happens in
        lists built with ``combine_ingredients=False``. Returns the moved item,
        or None when it is not in the list.
        """
        destination = CategoryTag.parse(to_category)
        if destination is None:
            raise ValueError(f"Unknown category: {to_category!r}")

        found = self._find(result, normalized_key, CategoryTag.parse(from_category), occurrence)
        if found is None:
            logger.warning(f"Cannot move '{normalized_key}': not in list")
            return None

        source, item = found
        bucket = result.items[source]
        bucket.remove(item)
        if not bucket:
            del result.items[source]

        item.category = destination
        existing = next(
            (i for i in result.items.get(destination, []) if i.normalized_key == normalized_key),
            None,
        )
        if existing is not None:
            merge_into(existing, item)
            item = existing
        else:
            result.items.setdefault(destination, []).append(item)

        result.items = order_by_category(result.items)
        result.stats = compute_stats(result.all_items())

        if user_id is not None:
            self.classifier.record_preference(user_id, item.ingredient, destination)
        logger.info(f"Moved '{normalized_key}' from {source.value} to {destination.value}")
        return item

    @staticmethod
    def _find(
        result: ShoppingListResult,
        normalized_key: str,
        preferred: CategoryTag | None,
        occurrence: int = 0,
    ) -> tuple[CategoryTag, ResolvedItem] | None:
        """The ``occurrence``-th item with this key, looking in ``preferred`` first."""
        tags = list(result.items)
        if preferred in result.items:
            tags.remove(preferred)
            tags.insert(0, preferred)

        for tag in tags:
            same_key = [i for i in result.items[tag] if i.normalized_key == normalized_key]
            if occurrence < len(same_key):
                return tag, same_key[occurrence]
        return None

    def toggle_purchased(
        self,
        result: ShoppingListResult,
        normalized_key: str,
        category: str | CategoryTag | None = None,
        occurrence: int = 0,
    ) -> ResolvedItem | None:
        found = self._find(result, normalized_key, CategoryTag.parse(category), occurrence)
        if found is None:
            return None

        _, item = found
        item.purchased = not item.purchased
        result.stats = compute_stats(result.all_items())
        return item

    def select_inventory_item(
        self,
        result: ShoppingListResult,
        normalized_key: str,
        record: InventoryRecord | None,
        category: str | CategoryTag | None = None,
        occurrence: int = 0,
    ) -> ResolvedItem | None:
        """Link an item to an inventory record the user picked by hand.

        Passing None clears the link. Returns None when the item is not in the
        list.
        """
        found = self._find(result, normalized_key, CategoryTag.parse(category), occurrence)
        if found is None:
            return None

        _, item = found
        item.inventory_item = record
        item.in_inventory = record is not None
        item.match_type = MatchType.MANUAL if record is not None else MatchType.NONE
        result.stats = compute_stats(result.all_items())

        target = record.name if record is not None else "nothing"
        logger.info(f"Linked '{normalized_key}' to {target} by hand")
        return item

    def mark_all_purchased(self, result: ShoppingListResult) -> ShoppingListResult:
        for item in result.all_items():
            item.purchased = True
        result.stats = compute_stats(result.all_items())
        return result

    def clear_purchased(self, result: ShoppingListResult) -> ShoppingListResult:
        for item in result.all_items():
            item.purchased = False
        result.stats = compute_stats(result.all_items())
        return result

    @staticmethod
    def filter_items(
        result: ShoppingListResult, view: ListView = ListView.ALL
    ) -> dict[CategoryTag, list[ResolvedItem]]:
        """Items for one view of the list; categories left empty are omitted."""
        filters = {
            ListView.ALL: lambda i: True,
            ListView.NEED_TO_BUY: lambda i: not i.in_inventory and not i.purchased,
            ListView.IN_INVENTORY: lambda i: i.in_inventory,
            ListView.PURCHASED: lambda i: i.purchased,
        }
        keep = filters[ListView(view)]

        filtered = {}
        for tag, bucket in result.items.items():
            selected = [i for i in bucket if keep(i)]
            if selected:
                filtered[tag] = selected
        return filtered

    @staticmethod
    def render_text(result: ShoppingListResult, title: str = "Shopping List") -> str:
        """Plain-text export grouped by category, for printing or sharing."""
        lines = [f"Shopping List - {title}", f"Generated: {result.generated_at.date().isoformat()}"]

        for tag, bucket in result.items.items():
            lines.append("")
            lines.append(f"{tag.value.upper()}:")
            for item in bucket:
                checkbox = "[x]" if item.purchased else "[ ]"
                parts = [_format_quantity(item.amount, item.unit)] + [
                    _format_quantity(a.amount, a.unit) for a in item.alternative_amounts
                ]
                quantity = " + ".join(p for p in parts if p)
                status = ""
                if item.purchased:
                    status = " [PURCHASED]"
                elif item.in_inventory:
                    status = " [IN INVENTORY]"
                recipes = f" ({', '.join(item.recipes)})" if item.recipes else ""
                prefix = f"{quantity} " if quantity else ""
                lines.append(f"  {checkbox} {prefix}{item.ingredient}{status}{recipes}")

        return "\n".join(lines) + "\n"
