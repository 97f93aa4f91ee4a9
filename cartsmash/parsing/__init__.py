"""Free-text grocery parsing: lines to quantity, unit, name and aisle."""

from .categories import (
    DEFAULT_CATEGORY_TABLE,
    CategoryTable,
    classify_category,
    load_category_table,
)
from .line_parser import parse_grocery_item, strip_list_markers
from .list_parser import is_header_line, parse_grocery_list
from .models import GroceryCategory, ParsedGroceryItem
from .units import canonical_unit

__all__ = [
    "DEFAULT_CATEGORY_TABLE",
    "CategoryTable",
    "GroceryCategory",
    "ParsedGroceryItem",
    "canonical_unit",
    "classify_category",
    "is_header_line",
    "load_category_table",
    "parse_grocery_item",
    "parse_grocery_list",
    "strip_list_markers",
]
