"""Tests for category classification."""

from unittest.mock import MagicMock

import pytest

from src.models.enums import CategoryTag
from src.services.categorization import CATEGORY_RULES, CategoryClassifier, match_rule
from src.services.preference_store import InMemoryPreferenceStore, SqlAlchemyPreferenceStore


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Onion", CategoryTag.PRODUCE),
        ("Russet Potatoes", CategoryTag.PRODUCE),
        ("Avocado", CategoryTag.PRODUCE),
        ("Bell Pepper", CategoryTag.PRODUCE),
        ("Apples", CategoryTag.PRODUCE),
        ("Chicken Breast", CategoryTag.MEAT_SEAFOOD),
        ("Ground Beef", CategoryTag.MEAT_SEAFOOD),
        ("Salmon", CategoryTag.MEAT_SEAFOOD),
        ("Milk", CategoryTag.DAIRY_EGGS),
        ("Large Eggs", CategoryTag.DAIRY_EGGS),
        ("Cheddar Cheese", CategoryTag.DAIRY_EGGS),
        ("Salted Butter", CategoryTag.DAIRY_EGGS),
        ("Sourdough Bread", CategoryTag.BAKERY),
        ("All-Purpose Flour", CategoryTag.PANTRY),
        ("Bread Crumbs", CategoryTag.PANTRY),
        ("Lasagna Noodles", CategoryTag.PANTRY),
        ("Potato Chips", CategoryTag.PANTRY),
        ("Black Beans", CategoryTag.PANTRY),
        ("Olive Oil", CategoryTag.PANTRY),
        ("Avocado Oil", CategoryTag.PANTRY),
        ("Frozen Peas", CategoryTag.FROZEN),
        ("Ketchup", CategoryTag.CONDIMENTS),
        ("Chicken Gravy", CategoryTag.CONDIMENTS),
        ("Paprika", CategoryTag.SEASONINGS),
        ("Kosher Salt", CategoryTag.SEASONINGS),
        ("pepper", CategoryTag.SEASONINGS),
        ("Chicken Noodle Soup", CategoryTag.OTHER),
        ("Hamburger Helper", CategoryTag.OTHER),
    ],
)
def test_classify_rule_cascade(name, expected):
    """Test that common grocery names land in the expected section."""
    assert CategoryClassifier().classify(name) == expected


def test_chicken_broth_is_not_protein():
    """Test that a soup rule wins over the broad protein keyword."""
    classifier = CategoryClassifier()

    assert classifier.classify("Chicken Broth") == CategoryTag.OTHER
    assert match_rule("Chicken Broth").name == "soup"


def test_hamburger_helper_is_convenience():
    """Test that convenience meals are caught before starch or protein."""
    rule = match_rule("Hamburger Helper")

    assert rule.name == "convenience"
    assert rule.tag == CategoryTag.OTHER


def test_convenience_detected_from_brand():
    """Test that a convenience brand classifies the item as Other."""
    classifier = CategoryClassifier()

    assert classifier.classify("Meatloaf", brand="Stouffer's") == CategoryTag.OTHER


def test_spice_hint_makes_seasoning():
    """Test that a spice hint classifies an unknown name as a seasoning."""
    assert CategoryClassifier().classify("Za'atar", category_hint="Spices") == CategoryTag.SEASONINGS


def test_valid_hint_used_when_no_rule_matches():
    """Test that a hint naming a category is used after the cascade falls through."""
    result = CategoryClassifier().categorize_item("Widget", category_hint="frozen")

    assert result["category"] == CategoryTag.FROZEN
    assert result["source"] == "hint"


def test_numeric_hint_is_ignored():
    """Test that numeric labels are never accepted as a category."""
    result = CategoryClassifier().categorize_item("Widget", category_hint="3")

    assert result["category"] == CategoryTag.OTHER
    assert result["source"] == "default"


@pytest.mark.parametrize("name", ["", "   ", "(optional)", None, 12])
def test_unresolvable_names_default_to_other(name):
    """Test that the classifier is total for degenerate input."""
    assert CategoryClassifier().classify(name) == CategoryTag.OTHER


def test_classify_is_deterministic():
    """Test that repeated calls give the same tag."""
    classifier = CategoryClassifier()
    names = ["Chicken Broth", "Onion", "Mystery Item", "Cheesy Italian Shells"]

    first = [classifier.classify(n) for n in names]
    second = [classifier.classify(n) for n in names]

    assert first == second


def test_rules_are_individually_addressable():
    """Test every rule has a unique name and a real tag."""
    names = [rule.name for rule in CATEGORY_RULES]

    assert len(names) == len(set(names))
    assert all(isinstance(rule.tag, CategoryTag) for rule in CATEGORY_RULES)
    assert names.index("soup") < names.index("protein")
    assert names.index("convenience") < names.index("pantry_starch")


def test_preference_overrides_cascade(preference_store, classifier):
    """Test that a recorded preference wins over the rules."""
    assert classifier.classify("pepper", user_id=1) == CategoryTag.SEASONINGS

    classifier.record_preference(1, "Pepper", CategoryTag.PRODUCE)

    result = classifier.categorize_item("pepper", user_id=1)
    assert result["category"] == CategoryTag.PRODUCE
    assert result["source"] == "preference"
    assert preference_store.get(1, "pepper") == CategoryTag.PRODUCE


def test_recorded_seasoning_preference():
    """Test recording pepper as a seasoning keeps classifying it that way."""
    classifier = CategoryClassifier(InMemoryPreferenceStore())

    classifier.record_preference(1, "pepper", "Seasonings")

    assert classifier.classify("pepper", user_id=1) == CategoryTag.SEASONINGS
    assert classifier.categorize_item("pepper", user_id=1)["source"] == "preference"


def test_preferences_are_per_user(classifier):
    """Test one user's preference does not affect another user."""
    classifier.record_preference(1, "Tofu", CategoryTag.PRODUCE)

    assert classifier.classify("Tofu", user_id=1) == CategoryTag.PRODUCE
    assert classifier.classify("Tofu", user_id=2) == CategoryTag.MEAT_SEAFOOD
    assert classifier.classify("Tofu") == CategoryTag.MEAT_SEAFOOD


def test_preference_lookup_uses_normalized_key():
    """Test the store is queried with the normalized name."""
    store = MagicMock()
    store.get.return_value = CategoryTag.BAKERY
    classifier = CategoryClassifier(store)

    result = classifier.classify("Fresh Tortillas (Corn)", user_id=7)

    assert result == CategoryTag.BAKERY
    store.get.assert_called_once_with(7, "tortillas")


def test_record_preference_rejects_unknown_category(classifier):
    """Test that an unknown category is refused."""
    with pytest.raises(ValueError):
        classifier.record_preference(1, "milk", "Snacks")
    with pytest.raises(ValueError):
        classifier.record_preference(1, "milk", "4")


def test_record_preference_rejects_empty_name(classifier):
    """Test that a name normalizing to nothing is refused."""
    with pytest.raises(ValueError):
        classifier.record_preference(1, "(organic)", CategoryTag.PRODUCE)


def test_sqlalchemy_store_upserts(db):
    """Test the database store keeps one row per user and key, last write wins."""
    store = SqlAlchemyPreferenceStore(db)

    store.set(1, "pepper", CategoryTag.SEASONINGS)
    store.set(1, "pepper", CategoryTag.PRODUCE)
    store.set(2, "pepper", CategoryTag.OTHER)

    assert store.get(1, "pepper") == CategoryTag.PRODUCE
    assert store.all_for_user(1) == {"pepper": CategoryTag.PRODUCE}
    assert store.get(2, "pepper") == CategoryTag.OTHER

    assert store.delete(1, "pepper") is True
    assert store.delete(1, "pepper") is False
    assert store.get(1, "pepper") is None
