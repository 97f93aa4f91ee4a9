from __future__ import annotations

import re
from typing import Dict, List, Tuple

WORD_NUMBERS: Dict[str, str] = {
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
    "eleven": "11",
    "twelve": "12",
}

# Grouped in the order the line parser tries them.
UNIT_GROUPS: List[Tuple[str, List[str]]] = [
    (
        "weight",
        ["lb", "lbs", "pound", "pounds", "oz", "ounce", "ounces", "kg", "kilogram",
         "kilograms", "g", "gram", "grams", "mg"],
    ),
    (
        "volume",
        ["l", "liter", "liters", "litre", "litres", "ml", "milliliter", "milliliters",
         "gal", "gallon", "gallons", "qt", "quart", "quarts", "pt", "pint", "pints",
         "fl oz", "cup", "cups", "tbsp", "tablespoon", "tablespoons", "tsp",
         "teaspoon", "teaspoons"],
    ),
    (
        "container",
        ["pack", "packs", "package", "packages", "packet", "packets", "bag", "bags",
         "box", "boxes", "can", "cans", "jar", "jars", "bottle", "bottles", "carton",
         "cartons", "container", "containers", "bunch", "bunches", "head", "heads",
         "loaf", "loaves", "clove", "cloves", "tin", "tins", "piece", "pieces"],
    ),
    ("dozen", ["dozen", "doz"]),
]

CANONICAL_UNITS: Dict[str, str] = {
    "lbs": "lb", "pound": "lb", "pounds": "lb",
    "ounce": "oz", "ounces": "oz",
    "kilogram": "kg", "kilograms": "kg",
    "gram": "g", "grams": "g",
    "liter": "l", "liters": "l", "litre": "l", "litres": "l",
    "milliliter": "ml", "milliliters": "ml",
    "gallon": "gal", "gallons": "gal",
    "quart": "qt", "quarts": "qt",
    "pint": "pt", "pints": "pt",
    "cups": "cup",
    "tablespoon": "tbsp", "tablespoons": "tbsp",
    "teaspoon": "tsp", "teaspoons": "tsp",
    "packs": "pack", "package": "pack", "packages": "pack",
    "packet": "pack", "packets": "pack",
    "bags": "bag", "boxes": "box", "cans": "can", "jars": "jar",
    "bottles": "bottle", "cartons": "carton", "containers": "container",
    "bunches": "bunch", "heads": "head", "loaves": "loaf", "cloves": "clove",
    "tins": "tin", "pieces": "piece",
    "doz": "dozen",
}

_WORD_NUMBER_ALT = "|".join(WORD_NUMBERS)

# Mixed numbers and fractions come before plain numbers so "1 1/2" is not cut at "1".
QUANTITY_PATTERN = (
    r"(?P<quantity>"
    r"\d+\s+\d+/\d+"
    r"|\d+/\d+"
    r"|\d+(?:\.\d+)?\s*-\s*\d+(?:\.\d+)?"
    r"|\d+(?:\.\d+)?"
    rf"|(?:{_WORD_NUMBER_ALT})\b"
    r")"
)


def unit_alternation(units: List[str]) -> str:
    """Build a regex alternation with longer tokens first so "lbs" never matches as "lb"."""
    ordered = sorted(units, key=len, reverse=True)
    return "|".join(r"\s*".join(re.escape(part) for part in unit.split()) for unit in ordered)


def build_unit_patterns() -> List[Tuple[str, re.Pattern[str]]]:
    patterns: List[Tuple[str, re.Pattern[str]]] = []
    for group, units in UNIT_GROUPS:
        pattern = re.compile(
            rf"^{QUANTITY_PATTERN}\s*(?P<unit>{unit_alternation(units)})\b\.?\s*(?P<name>.*)$",
            re.IGNORECASE,
        )
        patterns.append((group, pattern))
    return patterns


def normalize_quantity(raw: str) -> str:
    """Map word numbers to digits; any other quantity is returned as written."""
    return WORD_NUMBERS.get(raw.lower(), raw)


def normalize_unit(raw: str) -> str:
    return " ".join(raw.lower().split())


def canonical_unit(unit: str | None) -> str | None:
    if unit is None:
        return None
    key = normalize_unit(unit)
    if key.replace(" ", "") == "floz":
        return "fl oz"
    return CANONICAL_UNITS.get(key, key)
