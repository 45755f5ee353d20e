"""Enums for model fields."""

from enum import Enum


class CategoryTag(str, Enum):
    """Store-section categories, declared in canonical display order."""

    PRODUCE = "Produce"
    MEAT_SEAFOOD = "Meat & Seafood"
    DAIRY_EGGS = "Dairy & Eggs"
    BAKERY = "Bakery"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    CONDIMENTS = "Condiments & Sauces"
    SEASONINGS = "Seasonings"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: object) -> "CategoryTag | None":
        """Return the tag for a label, or None when the label is not a known tag.

        Matching is case-insensitive on the display value and the member name.
        Purely numeric labels are never accepted.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        label = value.strip()
        if not label or label.isdigit():
            return None
        lowered = label.lower()
        for tag in cls:
            if tag.value.lower() == lowered or tag.name.lower() == lowered:
                return tag
        return None

    @property
    def sort_index(self) -> int:
        """Position of this tag in the canonical display order."""
        return list(CategoryTag).index(self)


class MatchType(str, Enum):
    """How a shopping-list item was tied to an inventory record."""

    AUTO = "auto"
    MANUAL = "manual"
    DIRECT = "direct"
    NONE = "none"


class ListView(str, Enum):
    """Filters for viewing a generated shopping list."""

    ALL = "all"
    NEED_TO_BUY = "need_to_buy"
    IN_INVENTORY = "in_inventory"
    PURCHASED = "purchased"
