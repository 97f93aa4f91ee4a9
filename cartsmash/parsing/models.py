from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .units import canonical_unit


class GroceryCategory(str, Enum):
    PRODUCE = "produce"
    DAIRY = "dairy"
    MEAT = "meat"
    PANTRY = "pantry"
    BAKERY = "bakery"
    FROZEN = "frozen"
    BEVERAGES = "beverages"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class ParsedGroceryItem:
    """One grocery line split into quantity, unit, name and aisle category."""

    original: str
    item_name: str
    quantity: Optional[str]
    unit: Optional[str]
    category: str = GroceryCategory.OTHER.value

    @property
    def canonical_unit(self) -> Optional[str]:
        return canonical_unit(self.unit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "itemName": self.item_name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
        }
