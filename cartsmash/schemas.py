from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Mirrors parsing.GroceryCategory.
CategoryName = Literal[
    "produce", "dairy", "meat", "pantry", "bakery", "frozen", "beverages", "other"
]


class ParsedItem(BaseModel):
    original: str
    itemName: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    category: CategoryName = "other"


class CartItem(ParsedItem):
    id: str
    canonicalUnit: Optional[str] = None
    confidence: float = Field(ge=0, le=1)
    needsReview: bool = False
    parsingMethod: str = "regex"
    addedAt: str
    updatedAt: Optional[str] = None


class CategoryCount(BaseModel):
    totalItems: int
    categories: Dict[str, int] = Field(default_factory=dict)


class GroceryListParseRequest(BaseModel):
    text: str = Field(max_length=100_000)
    splitOnSeparators: Optional[bool] = None


class GroceryListParseResponse(BaseModel):
    success: bool = True
    items: List[ParsedItem]
    itemCount: int
    stats: CategoryCount


class CartParseRequest(BaseModel):
    listText: str = Field(max_length=100_000)
    action: Literal["replace", "merge"] = "replace"
    splitOnSeparators: Optional[bool] = None


class CartParseResponse(BaseModel):
    success: bool = True
    cart: List[CartItem]
    action: Literal["replace", "merge"]
    itemsAdded: int
    duplicatesSkipped: int = 0
    totalItems: int


class ConfidenceBands(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class CartStats(BaseModel):
    totalItems: int
    categories: Dict[str, int] = Field(default_factory=dict)
    confidence: ConfidenceBands = Field(default_factory=ConfidenceBands)
    needsReview: int = 0
    averageConfidence: float = 0.0
    lastModified: Optional[str] = None


class CartResponse(BaseModel):
    success: bool = True
    cart: List[CartItem]
    itemCount: int
    stats: CartStats


class CartItemUpdate(BaseModel):
    itemName: Optional[str] = Field(default=None, min_length=1, max_length=500)
    quantity: Optional[str] = Field(default=None, max_length=32)
    unit: Optional[str] = Field(default=None, max_length=32)
    category: Optional[CategoryName] = None

    model_config = ConfigDict(extra="forbid")


class CartItemResponse(BaseModel):
    success: bool = True
    item: CartItem
    cart: List[CartItem]


class CartDeleteResponse(BaseModel):
    success: bool = True
    cart: List[CartItem]
    deletedItem: CartItem


class CartClearResponse(BaseModel):
    success: bool = True
    cart: List[CartItem] = Field(default_factory=list)
    previousItemCount: int


class CartStatsResponse(BaseModel):
    success: bool = True
    stats: CartStats


class CartSearchResponse(BaseModel):
    success: bool = True
    query: str
    results: List[CartItem]
    count: int
