"""CartSmash grocery list parsing service."""

from .parsing import ParsedGroceryItem, parse_grocery_item, parse_grocery_list

__all__ = ["ParsedGroceryItem", "parse_grocery_item", "parse_grocery_list"]
