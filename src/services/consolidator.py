"""Consolidation of ingredient entries into categorized shopping-list items.

Upstream producers hand over entries in different shapes: bare strings,
ingredient objects, and previously saved lists keyed by category.
``resolve_entries`` turns all of them into a small tagged union once, at the
boundary, so the merge logic only ever sees ``StringEntry``, ``ObjectEntry``
and ``CategorizedBucket``.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from src.models.enums import CategoryTag, MatchType
from src.schemas.shopping import AlternativeAmount, InventoryRecord, ResolvedItem
from src.services.categorization import CategoryClassifier
from src.services.normalizer import extract_display_name, normalize, normalize_unit, parse_amount

logger = logging.getLogger(__name__)

RECIPE_FIELDS = ("source_recipe", "sourceRecipe", "recipe")


@dataclass(frozen=True)
class StringEntry:
    """A bare item name with no quantity."""

    name: str


@dataclass(frozen=True)
class ObjectEntry:
    """An item given as an object with at least a name."""

    name: str
    amount: float = 0
    unit: str = ""
    category: str | None = None
    category_hint: str | None = None
    recipes: tuple[str, ...] = ()
    alternative_amounts: tuple[AlternativeAmount, ...] = ()
    purchased: bool = False
    in_inventory: bool = False
    inventory_item: InventoryRecord | None = None
    match_type: MatchType = MatchType.NONE


@dataclass(frozen=True)
class CategorizedBucket:
    """Items filed under a category label by an earlier producer.

    ``tag`` is None when the label is not a known category (including purely
    numeric labels); its items are then reclassified.
    """

    label: str
    tag: CategoryTag | None
    entries: tuple["StringEntry | ObjectEntry", ...] = field(default_factory=tuple)


RawEntry = StringEntry | ObjectEntry | CategorizedBucket


def resolve_entries(value: Any) -> list[RawEntry]:
    """Turn any supported input shape into a flat list of raw entries.

    Entries that are neither a string nor an object with a name are skipped
    with a warning; the remaining entries are still returned.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump()

    if isinstance(value, str):
        if not value.strip():
            logger.warning("Skipping blank entry")
            return []
        return [StringEntry(name=value.strip())]

    if isinstance(value, Mapping):
        if extract_display_name(value):
            return [_object_entry(value)]
        if any(isinstance(items, list | tuple) for items in value.values()):
            return _buckets(value)
        logger.warning(f"Skipping entry without a name: {value!r}")
        return []

    if isinstance(value, list | tuple):
        resolved: list[RawEntry] = []
        for item in value:
            resolved.extend(resolve_entries(item))
        return resolved

    logger.warning(f"Skipping malformed entry of type {type(value).__name__}: {value!r}")
    return []


def _buckets(value: Mapping[Any, Any]) -> list[RawEntry]:
    buckets: list[RawEntry] = []
    for label, items in value.items():
        if isinstance(items, list | tuple):
            buckets.append(_bucket(label, items))
        else:
            logger.warning(f"Skipping non-list value under label '{label}': {items!r}")
    return buckets


def _bucket(label: Any, items: Iterable[Any]) -> CategorizedBucket:
    if isinstance(label, CategoryTag):
        label = label.value
    entries: list[StringEntry | ObjectEntry] = []
    for item in items:
        for entry in resolve_entries(item):
            if isinstance(entry, CategorizedBucket):
                # Nested buckets lose their label; their items are reclassified
                entries.extend(entry.entries)
            else:
                entries.append(entry)
    return CategorizedBucket(label=str(label), tag=CategoryTag.parse(str(label)), entries=tuple(entries))


def _object_entry(data: Mapping[str, Any]) -> ObjectEntry:
    raw_amount = data.get("amount", data.get("quantity"))
    amount, parsed_unit = parse_amount(raw_amount)
    unit = data.get("unit")
    if not isinstance(unit, str) or not unit.strip():
        unit = parsed_unit if isinstance(raw_amount, str) else ""

    recipes = _recipes(data.get("recipes"))
    for recipe_field in RECIPE_FIELDS:
        recipe = data.get(recipe_field)
        if isinstance(recipe, str) and recipe and recipe not in recipes:
            recipes.append(recipe)

    category = data.get("category")
    if isinstance(category, CategoryTag):
        category = category.value
    return ObjectEntry(
        name=extract_display_name(data),
        amount=amount,
        unit=unit.strip(),
        category=str(category) if category is not None else None,
        category_hint=data.get("category_hint") or data.get("categoryHint"),
        recipes=tuple(recipes),
        alternative_amounts=tuple(_alternatives(data.get("alternative_amounts"))),
        purchased=_flag(data.get("purchased")),
        in_inventory=_flag(data.get("in_inventory")),
        inventory_item=_inventory_item(data.get("inventory_item")),
        match_type=_match_type(data.get("match_type")),
    )


def _recipes(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list | tuple):
        return []
    recipes = []
    for recipe in value:
        if isinstance(recipe, str) and recipe and recipe not in recipes:
            recipes.append(recipe)
    return recipes


def _flag(value: Any) -> bool:
    # Only real booleans count
    return value is True


def _match_type(value: Any) -> MatchType:
    try:
        return MatchType(value)
    except ValueError:
        return MatchType.NONE


def _alternatives(value: Any) -> list[AlternativeAmount]:
    if not isinstance(value, list | tuple):
        return []
    alternatives = []
    for item in value:
        try:
            alternatives.append(AlternativeAmount.model_validate(item))
        except ValidationError:
            logger.warning(f"Dropping unreadable alternative amount: {item!r}")
    return alternatives


def _inventory_item(value: Any) -> InventoryRecord | None:
    if value is None:
        return None
    try:
        return InventoryRecord.model_validate(value)
    except ValidationError:
        logger.warning(f"Dropping unreadable inventory item: {value!r}")
        return None


def order_by_category(
    buckets: Mapping[CategoryTag, list[ResolvedItem]],
) -> dict[CategoryTag, list[ResolvedItem]]:
    """Canonical display order with empty categories removed."""
    return {
        tag: buckets[tag]
        for tag in sorted(buckets, key=lambda t: t.sort_index)
        if buckets[tag]
    }


def merge_into(existing: ResolvedItem, incoming: ResolvedItem) -> None:
    """Fold ``incoming`` into ``existing`` in place.

    Equal units are summed. A differing unit is kept as an alternative amount,
    added to an existing alternative with the same unit when there is one.
    """
    _add_amount(existing, incoming.amount, incoming.unit, incoming.recipes)
    for alternative in incoming.alternative_amounts:
        _add_amount(existing, alternative.amount, alternative.unit, alternative.recipes)

    for recipe in incoming.recipes:
        if recipe not in existing.recipes:
            existing.recipes.append(recipe)

    existing.purchased = existing.purchased or incoming.purchased
    if existing.inventory_item is None and incoming.inventory_item is not None:
        existing.inventory_item = incoming.inventory_item
        existing.match_type = incoming.match_type
    existing.in_inventory = existing.in_inventory or incoming.in_inventory


def _add_amount(item: ResolvedItem, amount: float, unit: str, recipes: list[str]) -> None:
    unit_key = normalize_unit(unit)
    if unit_key == normalize_unit(item.unit):
        item.amount += amount
        return

    for alternative in item.alternative_amounts:
        if normalize_unit(alternative.unit) == unit_key:
            alternative.amount += amount
            alternative.recipes.extend(r for r in recipes if r not in alternative.recipes)
            return

    item.alternative_amounts.append(
        AlternativeAmount(amount=amount, unit=unit, recipes=list(recipes))
    )


class Consolidator:
    """Merge entries that name the same item into one resolved item per category."""

    def __init__(self, classifier: CategoryClassifier):
        self.classifier = classifier

    def consolidate(
        self,
        entries: Any,
        user_id: int | None = None,
        combine: bool = True,
    ) -> dict[CategoryTag, list[ResolvedItem]]:
        """Resolve, classify and merge entries into categorized items.

        With ``combine=False`` every occurrence is kept as its own item.
        """
        raw_entries = resolve_entries(entries)
        buckets: dict[CategoryTag, dict[str, ResolvedItem]] = {}
        separate: dict[CategoryTag, list[ResolvedItem]] = {}

        for raw in raw_entries:
            if isinstance(raw, CategorizedBucket):
                if raw.tag is None:
                    logger.info(f"Reclassifying {len(raw.entries)} items under untrusted label '{raw.label}'")
                pairs = [(entry, raw.tag, False) for entry in raw.entries]
            else:
                pairs = [(raw, None, True)]

            for entry, bucket_tag, trust_label in pairs:
                item = self._resolve(entry, bucket_tag, trust_label, user_id)
                if not combine:
                    separate.setdefault(item.category, []).append(item)
                    continue

                by_key = buckets.setdefault(item.category, {})
                if item.normalized_key in by_key:
                    merge_into(by_key[item.normalized_key], item)
                else:
                    by_key[item.normalized_key] = item

        if combine:
            separate = {tag: list(items.values()) for tag, items in buckets.items()}

        result = order_by_category(separate)
        logger.info(
            f"Consolidated {len(raw_entries)} entries into "
            f"{sum(len(items) for items in result.values())} items"
        )
        return result

    def _resolve(
        self,
        entry: StringEntry | ObjectEntry,
        bucket_tag: CategoryTag | None,
        trust_label: bool,
        user_id: int | None,
    ) -> ResolvedItem:
        if isinstance(entry, StringEntry):
            entry = ObjectEntry(name=entry.name)

        tag = bucket_tag
        if tag is None and trust_label:
            tag = CategoryTag.parse(entry.category)
        if tag is None:
            hint = entry.category_hint or entry.category
            tag = self.classifier.classify(entry.name, category_hint=hint, user_id=user_id)

        return ResolvedItem(
            ingredient=entry.name,
            normalized_key=normalize(entry.name),
            category=tag,
            amount=entry.amount,
            unit=entry.unit,
            alternative_amounts=[a.model_copy(deep=True) for a in entry.alternative_amounts],
            recipes=list(entry.recipes),
            in_inventory=entry.in_inventory,
            inventory_item=entry.inventory_item,
            purchased=entry.purchased,
            match_type=entry.match_type,
        )
