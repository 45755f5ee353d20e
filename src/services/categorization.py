"""Category classification using learned preferences first, then an ordered rule cascade."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.models.enums import CategoryTag
from src.services.normalizer import extract_display_name, normalize
from src.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationInput:
    """Lowercased, punctuation-free views of the values a rule may inspect."""

    text: str
    hint: str = ""
    brand: str = ""

    @classmethod
    def build(cls, name: Any, category_hint: Any = None, brand: Any = None) -> "ClassificationInput":
        return cls(
            text=_clean(extract_display_name(name)),
            hint=_clean(category_hint),
            brand=_clean(brand),
        )


@dataclass(frozen=True)
class ClassificationRule:
    """A single step of the cascade: the first rule whose predicate holds wins."""

    name: str
    predicate: Callable[[ClassificationInput], bool]
    tag: CategoryTag

    def matches(self, value: ClassificationInput) -> bool:
        return self.predicate(value)


def _clean(value: Any) -> str:
    """Lowercase, drop parentheticals and punctuation, keep every word."""
    if not isinstance(value, str):
        return ""
    text = re.sub(r"\([^)]*\)", " ", value.lower())
    text = re.sub(r"[^a-z0-9]+", " ", text)
    return " ".join(text.split())


def _keywords(*words: str) -> re.Pattern[str]:
    """Whole-word pattern that also accepts a trailing plural "s" / "es"."""
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})(?:s|es)?\b")


def _words(*words: str) -> re.Pattern[str]:
    """Exact whole-word pattern (no plural tolerance)."""
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b")


CONVENIENCE_MARKERS = _keywords(
    "helper",
    "hamburger helper",
    "tuna helper",
    "chicken helper",
    "lasagna",
    "beef stroganoff",
    "stroganoff",
    "cheesy italian shells",
    "frozen pizza",
    "lean cuisine",
    "stouffer",
    "stouffers",
    "marie callender",
    "marie callenders",
    "tv dinner",
    "macaroni and cheese",
    "mac and cheese",
    "kraft dinner",
)
CONVENIENCE_EXEMPT = _keywords("noodle", "sheet")

FROZEN_MARKERS = re.compile(r"^frozen\b|\bice cream\b|\bpopsicle")

SPICES = _keywords(
    "seasoning",
    "spice",
    "ground cinnamon",
    "cinnamon stick",
    "ground pepper",
    "white pepper",
    "black pepper",
    "peppercorn",
    "cayenne pepper",
    "cayenne",
    "red pepper flakes",
    "garlic powder",
    "onion powder",
    "chili powder",
    "curry powder",
    "paprika",
    "oregano",
    "basil",
    "thyme",
    "cumin",
    "nutmeg",
    "turmeric",
    "rosemary",
    "bay leaves",
    "bay leaf",
    "dill weed",
    "kosher salt",
    "sea salt",
    "coarse salt",
    "garlic salt",
    "celery salt",
    "allspice",
)
SALT = _keywords("salt")
PEPPER = _words("pepper")
PEPPER_DISQUALIFIERS = _words(
    "bell",
    "sweet",
    "jalapeno",
    "poblano",
    "serrano",
    "habanero",
    "anaheim",
    "banana",
    "jack",
    "peppers",
)

SAUCES = _keywords(
    "sauce",
    "gravy",
    "dressing",
    "vinegar",
    "mayo",
    "mayonnaise",
    "mustard",
    "ketchup",
    "catsup",
    "salsa",
    "marinara",
    "pesto",
    "relish",
    "worcestershire",
    "sriracha",
    "barbecue",
    "bbq",
    "teriyaki",
    "aioli",
    "condiment",
)

SOUPS = _keywords("soup", "broth", "stock", "bouillon", "consomme")

BREADS = _keywords(
    "bread",
    "bun",
    "roll",
    "bagel",
    "tortilla",
    "pita",
    "english muffin",
    "croissant",
    "baguette",
    "naan",
    "flatbread",
    "hoagie",
)
BREAD_DISQUALIFIERS = _keywords("crumb", "breadcrumb")
PANTRY_STARCHES = _keywords(
    "pasta",
    "spaghetti",
    "penne",
    "macaroni",
    "noodle",
    "shells",
    "rigatoni",
    "farfalle",
    "rotini",
    "linguine",
    "fettuccine",
    "orzo",
    "rice",
    "quinoa",
    "oats",
    "oatmeal",
    "stuffing",
    "barley",
    "couscous",
    "flour",
    "sugar",
    "brown sugar",
    "cornmeal",
    "cornstarch",
    "breadcrumbs",
    "bread crumbs",
    "panko",
    "cracker",
    "chip",
    "pretzel",
    "cereal",
    "granola",
    "baking powder",
    "baking soda",
    "yeast",
    "cocoa",
    "vanilla extract",
)
POTATOES = _keywords("potato", "sweet potato", "yam", "hash brown", "tater tot")
STARCH_DISQUALIFIERS = _keywords("vinegar", "sauce")

VEGETABLES = _keywords(
    "onion",
    "green onion",
    "scallion",
    "shallot",
    "leek",
    "garlic",
    "ginger",
    "tomato",
    "bell pepper",
    "sweet pepper",
    "peppers",
    "jalapeno",
    "poblano",
    "serrano",
    "habanero",
    "eggplant",
    "carrot",
    "celery",
    "lettuce",
    "romaine",
    "spinach",
    "kale",
    "arugula",
    "broccoli",
    "cauliflower",
    "cucumber",
    "zucchini",
    "squash",
    "mushroom",
    "cabbage",
    "corn",
    "pea",
    "green bean",
    "asparagus",
    "brussels sprout",
    "radish",
    "beet",
    "artichoke",
    "okra",
    "cilantro",
    "parsley",
    "avocado",
)
VEGETABLE_DISQUALIFIERS = _keywords(
    "sauce", "soup", "broth", "oil", "paste", "canned", "powder", "juice"
)

FRUITS = _keywords(
    "apple",
    "banana",
    "orange",
    "lemon",
    "lime",
    "grape",
    "berries",
    "strawberry",
    "strawberries",
    "blueberry",
    "blueberries",
    "raspberry",
    "raspberries",
    "melon",
    "watermelon",
    "cantaloupe",
    "peach",
    "pear",
    "plum",
    "cherry",
    "cherries",
    "kiwi",
    "mango",
    "pineapple",
)
FRUIT_DISQUALIFIERS = _keywords("juice", "milk", "oil", "extract", "pie filling")

CANNED_AND_DRY_GOODS = _keywords(
    "canned",
    "bean",
    "black bean",
    "kidney bean",
    "pinto bean",
    "chickpea",
    "garbanzo",
    "lentil",
    "tomato paste",
    "tomato puree",
    "crushed tomato",
)

EGGS = _keywords("egg")

SPECIFIC_PROTEINS = _keywords(
    "ground beef",
    "ground turkey",
    "ground pork",
    "ground chicken",
    "hamburger",
    "chicken breast",
    "chicken thigh",
    "chicken wing",
    "chicken leg",
    "chicken tender",
    "drumstick",
    "turkey breast",
    "stew meat",
    "steak",
    "ribeye",
    "sirloin",
    "brisket",
    "pot roast",
    "chuck roast",
    "pork chop",
    "pork loin",
    "pork shoulder",
    "tenderloin",
    "bacon",
    "ham",
    "sausage",
    "hot dog",
    "bratwurst",
    "pepperoni",
    "salami",
    "deli meat",
    "lunch meat",
    "meatball",
    "lamb",
    "veal",
    "salmon",
    "tuna",
    "shrimp",
    "cod",
    "tilapia",
    "crab",
    "lobster",
    "scallop",
    "tofu",
)
BROAD_PROTEINS = _keywords("chicken", "beef", "pork", "turkey", "fish", "meat")
PROTEIN_DISQUALIFIERS = _keywords(
    "sauce", "gravy", "soup", "helper", "seasoning", "powder", "broth", "stock"
)

DAIRY = _keywords(
    "milk",
    "buttermilk",
    "yogurt",
    "yoghurt",
    "cream",
    "sour cream",
    "heavy cream",
    "whipping cream",
    "half and half",
    "butter",
    "ghee",
    "cottage cheese",
    "cream cheese",
    "kefir",
)
CHEESES = _keywords(
    "cheese", "cheddar", "mozzarella", "parmesan", "ricotta", "feta", "provolone", "gouda", "brie"
)
CHEESE_DISQUALIFIERS = _keywords("lasagna", "helper", "shells", "macaroni", "sauce")
NUT_BUTTERS = _keywords("peanut butter", "almond butter", "cashew butter", "nut butter")

FATS = _keywords(
    "oil",
    "olive oil",
    "avocado oil",
    "cooking spray",
    "shortening",
    "lard",
    "nut",
    "walnut",
    "almond",
    "pecan",
    "cashew",
    "peanut",
    "pistachio",
    "hazelnut",
    "seed",
    "sesame",
    "chia",
    "flax",
    "peanut butter",
    "almond butter",
)


def _is_convenience(value: ClassificationInput) -> bool:
    if CONVENIENCE_MARKERS.search(value.brand):
        return True
    return bool(CONVENIENCE_MARKERS.search(value.text)) and not CONVENIENCE_EXEMPT.search(
        value.text
    )


def _is_frozen(value: ClassificationInput) -> bool:
    return bool(FROZEN_MARKERS.search(value.text))


def _is_seasoning(value: ClassificationInput) -> bool:
    if SPICES.search(value.text):
        return True
    if "spice" in value.hint or "seasoning" in value.hint:
        return True
    if SALT.search(value.text):
        return True
    return bool(PEPPER.search(value.text)) and not PEPPER_DISQUALIFIERS.search(value.text)


def _is_sauce(value: ClassificationInput) -> bool:
    return bool(SAUCES.search(value.text))


def _is_soup(value: ClassificationInput) -> bool:
    return bool(SOUPS.search(value.text))


def _starch(pattern: re.Pattern[str]) -> Callable[[ClassificationInput], bool]:
    def predicate(value: ClassificationInput) -> bool:
        return bool(pattern.search(value.text)) and not STARCH_DISQUALIFIERS.search(value.text)

    return predicate


def _is_bread(value: ClassificationInput) -> bool:
    return _starch(BREADS)(value) and not BREAD_DISQUALIFIERS.search(value.text)


def _is_vegetable(value: ClassificationInput) -> bool:
    if VEGETABLE_DISQUALIFIERS.search(value.text):
        return False
    return bool(VEGETABLES.search(value.text)) or "vegetable" in value.hint


def _is_fruit(value: ClassificationInput) -> bool:
    return bool(FRUITS.search(value.text)) and not FRUIT_DISQUALIFIERS.search(value.text)


def _is_canned_or_dry_good(value: ClassificationInput) -> bool:
    return bool(CANNED_AND_DRY_GOODS.search(value.text))


def _is_egg(value: ClassificationInput) -> bool:
    return bool(EGGS.search(value.text))


def _is_protein(value: ClassificationInput) -> bool:
    if SPECIFIC_PROTEINS.search(value.text):
        return True
    return bool(BROAD_PROTEINS.search(value.text)) and not PROTEIN_DISQUALIFIERS.search(
        value.text
    )


def _is_dairy(value: ClassificationInput) -> bool:
    if NUT_BUTTERS.search(value.text):
        return False
    if DAIRY.search(value.text):
        return True
    return bool(CHEESES.search(value.text)) and not CHEESE_DISQUALIFIERS.search(value.text)


def _is_fat(value: ClassificationInput) -> bool:
    return bool(FATS.search(value.text))


# Order matters: earlier rules resolve keyword collisions for later ones
# ("chicken broth" is a soup before it is ever considered a protein).
CATEGORY_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("convenience", _is_convenience, CategoryTag.OTHER),
    ClassificationRule("frozen", _is_frozen, CategoryTag.FROZEN),
    ClassificationRule("seasoning", _is_seasoning, CategoryTag.SEASONINGS),
    ClassificationRule("sauce", _is_sauce, CategoryTag.CONDIMENTS),
    ClassificationRule("soup", _is_soup, CategoryTag.OTHER),
    ClassificationRule("bread", _is_bread, CategoryTag.BAKERY),
    ClassificationRule("pantry_starch", _starch(PANTRY_STARCHES), CategoryTag.PANTRY),
    ClassificationRule("potato", _starch(POTATOES), CategoryTag.PRODUCE),
    ClassificationRule("vegetable", _is_vegetable, CategoryTag.PRODUCE),
    ClassificationRule("fruit", _is_fruit, CategoryTag.PRODUCE),
    ClassificationRule("canned_dry_goods", _is_canned_or_dry_good, CategoryTag.PANTRY),
    ClassificationRule("egg", _is_egg, CategoryTag.DAIRY_EGGS),
    ClassificationRule("protein", _is_protein, CategoryTag.MEAT_SEAFOOD),
    ClassificationRule("dairy", _is_dairy, CategoryTag.DAIRY_EGGS),
    ClassificationRule("fat", _is_fat, CategoryTag.PANTRY),
)


def match_rule(
    name: Any,
    category_hint: Any = None,
    brand: Any = None,
    rules: tuple[ClassificationRule, ...] = CATEGORY_RULES,
) -> ClassificationRule | None:
    """Return the first rule that matches, or None when the cascade falls through."""
    value = ClassificationInput.build(name, category_hint, brand)
    if not value.text:
        return None
    for rule in rules:
        if rule.matches(value):
            return rule
    return None


class CategoryClassifier:
    """Classify names into a CategoryTag, consulting per-user preferences first."""

    def __init__(
        self,
        preference_store: PreferenceStore | None = None,
        rules: tuple[ClassificationRule, ...] = CATEGORY_RULES,
    ):
        self.preference_store = preference_store
        self.rules = rules

    def classify(
        self,
        name: Any,
        category_hint: str | None = None,
        brand: str | None = None,
        user_id: int | None = None,
    ) -> CategoryTag:
        """Return exactly one CategoryTag for any input; never raises."""
        return self.categorize_item(name, category_hint, brand, user_id)["category"]

    def categorize_item(
        self,
        name: Any,
        category_hint: str | None = None,
        brand: str | None = None,
        user_id: int | None = None,
    ) -> dict[str, Any]:
        """Classify with provenance.

        Returns:
            {
                "category": CategoryTag,
                "normalized_key": str,
                "source": "preference" | "rule" | "hint" | "default",
                "rule": str | None
            }
        """
        key = normalize(extract_display_name(name))
        if not key:
            return self._result(CategoryTag.OTHER, key, "default")

        # Step 1: Manual corrections always win
        preferred = self._check_preference(key, user_id)
        if preferred is not None:
            logger.info(f"Preference match for '{key}' -> {preferred.value} (user {user_id})")
            return self._result(preferred, key, "preference")

        # Step 2: Ordered rule cascade
        rule = match_rule(name, category_hint, brand, self.rules)
        if rule is not None:
            logger.debug(f"Rule '{rule.name}' classified '{key}' -> {rule.tag.value}")
            return self._result(rule.tag, key, "rule", rule.name)

        # Step 3: A hint that already names a valid tag
        hinted = CategoryTag.parse(category_hint)
        if hinted is not None:
            return self._result(hinted, key, "hint")

        return self._result(CategoryTag.OTHER, key, "default")

    def record_preference(self, user_id: int, name: Any, category: CategoryTag | str) -> str:
        """Persist a manual category assignment and return the normalized key it is stored under."""
        tag = CategoryTag.parse(category)
        if tag is None:
            raise ValueError(f"Unknown category: {category!r}")

        key = normalize(extract_display_name(name))
        if not key:
            raise ValueError("Cannot record a preference for an empty name")

        if self.preference_store is None:
            logger.warning(f"No preference store configured; '{key}' -> {tag.value} not saved")
            return key

        self.preference_store.set(user_id, key, tag)
        return key

    def _check_preference(self, key: str, user_id: int | None) -> CategoryTag | None:
        if user_id is None or self.preference_store is None:
            return None
        return self.preference_store.get(user_id, key)

    @staticmethod
    def _result(
        category: CategoryTag, key: str, source: str, rule: str | None = None
    ) -> dict[str, Any]:
        return {
            "category": category,
            "normalized_key": key,
            "source": source,
            "rule": rule,
        }
