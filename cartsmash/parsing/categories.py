"""Aisle classification by keyword lookup.

The table is ordered data: the first category with a keyword that occurs in
the item name wins, and names matching nothing fall back to ``other``. Keep
keywords specific enough that they do not occur inside unrelated words
("ice" would also hit "rice" and "juice").
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .models import GroceryCategory

DEFAULT_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    GroceryCategory.PRODUCE.value: [
        "apple", "banana", "orange", "strawberr", "blueberr", "raspberr", "berries",
        "grape", "lemon", "lime", "avocado", "tomato", "potato", "onion", "garlic",
        "carrot", "lettuce", "spinach", "kale", "broccoli", "cauliflower", "cucumber",
        "celery", "zucchini", "mushroom", "bell pepper", "jalapeno", "cilantro",
        "parsley", "basil", "peach", "pear", "mango", "melon", "cabbage", "cherr",
        "kiwi", "squash", "asparagus", "green beans", "scallion", "shallot",
        "eggplant", "peppers", "salad", "fruit", "vegetable", "veggie", "sweet corn",
    ],
    GroceryCategory.DAIRY.value: [
        "milk", "cheese", "cheddar", "mozzarella", "parmesan", "yogurt", "yoghurt",
        "butter", "cream", "egg", "half and half", "cottage", "kefir", "ghee",
    ],
    GroceryCategory.MEAT.value: [
        "chicken", "beef", "pork", "turkey", "fish", "salmon", "tuna", "bacon",
        "sausage", "steak", "lamb", "veal", "shrimp", "crab", "lobster", "meat",
        "brisket", "chorizo", "salami", "pepperoni", "prosciutto", "tilapia",
    ],
    GroceryCategory.PANTRY.value: [
        "rice", "pasta", "spaghetti", "noodle", "cereal", "oat", "flour", "sugar",
        "salt", "pepper", "spice", "sauce", "marinara", "soup", "broth", "oil",
        "vinegar", "beans", "lentil", "honey", "syrup", "ketchup", "mustard", "mayo",
        "peanut", "almond", "walnut", "cashew", "jam", "jelly", "baking soda",
        "baking powder", "yeast", "vanilla", "cocoa", "cracker", "chips", "granola",
        "quinoa", "canned",
    ],
    GroceryCategory.BAKERY.value: [
        "bread", "bagel", "muffin", "croissant", "buns", "roll", "tortilla", "pita",
        "naan", "baguette", "donut", "doughnut", "cake", "cookie", "brownie",
        "biscuit", "pastry", "loaf",
    ],
    GroceryCategory.FROZEN.value: [
        "frozen", "popsicle", "pizza", "fries", "tater tots", "waffle",
        "sorbet", "gelato",
    ],
    GroceryCategory.BEVERAGES.value: [
        "water", "juice", "soda", "coffee", "tea", "wine", "beer", "kombucha",
        "seltzer", "drink",
    ],
}


class CategoryTable(Mapping[str, Tuple[str, ...]]):
    """Ordered, validated ``category -> keywords`` mapping."""

    def __init__(self, entries: Iterable[Tuple[str, Iterable[str]]]):
        allowed = set(GroceryCategory.values()) - {GroceryCategory.OTHER.value}
        table: Dict[str, Tuple[str, ...]] = {}
        for category, keywords in entries:
            key = str(category).strip().lower()
            if key not in allowed:
                raise ValueError(f"Unknown grocery category '{category}'")
            if isinstance(keywords, str):
                raise ValueError(f"Keywords for '{key}' must be a list, not a string")
            cleaned = tuple(str(k).strip().lower() for k in keywords if str(k).strip())
            table[key] = table.get(key, ()) + cleaned
        self._table = table

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "CategoryTable":
        return cls(mapping.items())

    def __getitem__(self, category: str) -> Tuple[str, ...]:
        return self._table[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def classify(self, item_name: str) -> str:
        lowered = item_name.lower()
        for category, keywords in self._table.items():
            if any(keyword in lowered for keyword in keywords):
                return category
        return GroceryCategory.OTHER.value


DEFAULT_CATEGORY_TABLE = CategoryTable.from_mapping(DEFAULT_CATEGORY_KEYWORDS)


def classify_category(item_name: str, table: Optional[CategoryTable] = None) -> str:
    """Return the aisle category for ``item_name``, defaulting to ``other``."""
    if not isinstance(item_name, str):
        raise TypeError(f"item_name must be str, got {type(item_name).__name__}")
    return (table if table is not None else DEFAULT_CATEGORY_TABLE).classify(item_name)


def load_category_table(path: str | Path) -> CategoryTable:
    """Read a JSON object of ``{category: [keywords]}``; key order is precedence order."""
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Category table {path} must be a JSON object")
    return CategoryTable.from_mapping(payload)
