"""Name normalization for ingredient and grocery item strings.

Normalized keys are used only for comparison and grouping; they are never
shown to the user. Every function here is pure and never raises.
"""

import re
from collections.abc import Mapping
from fractions import Fraction
from typing import Any

QUALITY_DESCRIPTORS = (
    "organic",
    "natural",
    "pure",
    "fresh",
    "raw",
    "whole",
    "fine",
    "coarse",
    "ground",
)

PREPARATION_DESCRIPTORS = (
    "diced",
    "chopped",
    "minced",
    "sliced",
    "crushed",
    "grated",
    "shredded",
    "pounded",
    "flattened",
    "tenderized",
)

# "extra large" must be removed before "large" or a stray "extra" is left behind
SIZE_DESCRIPTORS = ("extra large", "small", "medium", "large", "jumbo", "mini")

PACKAGING_WORDS = ("can", "jar", "bottle", "bag", "box", "package", "container", "pack")

NAME_FIELDS = ("name", "item_name", "itemName", "ingredient", "raw_name")

UNIT_ALIASES = {
    "c": "cup",
    "cups": "cup",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tbs": "tbsp",
    "tbsps": "tbsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tsps": "tsp",
    "pound": "lb",
    "pounds": "lb",
    "lbs": "lb",
    "ounce": "oz",
    "ounces": "oz",
    "gram": "g",
    "grams": "g",
    "kilogram": "kg",
    "kilograms": "kg",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "milliliter": "ml",
    "milliliters": "ml",
    "quart": "qt",
    "quarts": "qt",
    "pint": "pt",
    "pints": "pt",
    "gallon": "gal",
    "gallons": "gal",
    "cloves": "clove",
    "cans": "can",
    "pieces": "piece",
    "items": "item",
}


def _whole_words(words: tuple[str, ...]) -> re.Pattern[str]:
    # Word boundaries are any non-alphanumeric character, same as the final cleanup step
    alternatives = "|".join(r"\s+".join(re.escape(part) for part in w.split()) for w in words)
    return re.compile(r"(?<![a-z0-9])(?:" + alternatives + r")(?![a-z0-9])")


_PARENTHETICAL = re.compile(r"\([^)]*\)")
_QUALITY = _whole_words(QUALITY_DESCRIPTORS)
_PREPARATION = _whole_words(PREPARATION_DESCRIPTORS)
_SIZE = _whole_words(SIZE_DESCRIPTORS)
_PACKAGING = _whole_words(PACKAGING_WORDS)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_AMOUNT = re.compile(r"^\s*(\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+)")


def normalize(raw_name: Any) -> str:
    """Canonicalize a raw ingredient or item name for comparison.

    >>> normalize("Tomatoes (Diced)")
    'tomatoes'
    >>> normalize("Organic Extra Large Eggs, 1 box")
    'eggs 1'
    """
    if not isinstance(raw_name, str):
        return ""

    text = raw_name.lower()
    text = _PARENTHETICAL.sub(" ", text)
    text = _QUALITY.sub(" ", text)
    text = _PREPARATION.sub(" ", text)
    text = _SIZE.sub(" ", text)
    text = _PACKAGING.sub(" ", text)
    text = _NON_ALNUM.sub(" ", text)
    return " ".join(text.split())


def extract_ingredient_name(value: Any) -> str:
    """Normalize a name given either as a string or as an object carrying one.

    Objects may be mappings or attribute-bearing instances exposing one of
    ``name``, ``item_name``, ``itemName``, ``ingredient`` or ``raw_name``.
    """
    return normalize(extract_display_name(value))


def extract_display_name(value: Any) -> str:
    """Return the un-normalized name carried by a string or object, or ''."""
    if isinstance(value, str):
        return value.strip()

    for field in NAME_FIELDS:
        if isinstance(value, Mapping):
            candidate = value.get(field)
        else:
            candidate = getattr(value, field, None)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return ""


def normalize_unit(unit: Any) -> str:
    """Canonical spelling of a measurement unit so "cups" and "cup" compare equal."""
    if not isinstance(unit, str):
        return ""
    cleaned = unit.strip().lower().rstrip(".")
    return UNIT_ALIASES.get(cleaned, cleaned)


def parse_amount(text: Any) -> tuple[float, str]:
    """Split an amount string such as "1 1/2 cups" into (1.5, "cups").

    Numbers pass through with an empty unit. Text without a leading number
    yields ``(0.0, text)``.
    """
    if isinstance(text, bool):
        return 0.0, ""
    if isinstance(text, int | float):
        return float(text), ""
    if not isinstance(text, str):
        return 0.0, ""

    match = _AMOUNT.match(text)
    if not match:
        return 0.0, text.strip()

    number = match.group(1)
    try:
        amount = float(sum(Fraction(part) for part in number.split()))
    except (ValueError, ZeroDivisionError):
        return 0.0, text.strip()

    unit = text[match.end() :].strip()
    return amount, unit
