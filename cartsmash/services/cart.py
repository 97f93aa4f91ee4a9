from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status

from ..parsing import (
    CategoryTable,
    GroceryCategory,
    ParsedGroceryItem,
    canonical_unit,
    classify_category,
    parse_grocery_list,
)
from ..schemas import CartItemUpdate, CartStats, CategoryCount, ConfidenceBands
from .cart_store import CartRecord, CartStore

logger = logging.getLogger(__name__)

PARSING_METHOD = "regex"
BASE_CONFIDENCE = 0.6
REVIEW_THRESHOLD = 0.8
MEDIUM_CONFIDENCE = 0.6
MIN_SEARCH_LENGTH = 2


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_item_name(name: str) -> str:
    return " ".join(name.lower().split())


def score_confidence(
    *, quantity: Optional[str], unit: Optional[str], item_name: str, category: str
) -> float:
    """Rough signal of how much of a line looked like a grocery item.

    Each of quantity, unit, a non-trivial name and a known aisle adds 0.1
    on top of the base.
    """
    score = BASE_CONFIDENCE
    if quantity:
        score += 0.1
    if unit:
        score += 0.1
    if len(item_name.strip()) > 3:
        score += 0.1
    if category != GroceryCategory.OTHER.value:
        score += 0.1
    return round(min(score, 1.0), 2)


def build_cart_item(item: ParsedGroceryItem, *, added_at: Optional[str] = None) -> CartRecord:
    confidence = score_confidence(
        quantity=item.quantity,
        unit=item.unit,
        item_name=item.item_name,
        category=item.category,
    )
    record = item.to_dict()
    record.update(
        {
            "id": uuid.uuid4().hex,
            "canonicalUnit": item.canonical_unit,
            "confidence": confidence,
            "needsReview": confidence < REVIEW_THRESHOLD,
            "parsingMethod": PARSING_METHOD,
            "addedAt": added_at or _now_iso(),
            "updatedAt": None,
        }
    )
    return record


def parse_text_or_400(
    text: str,
    *,
    empty_detail: str,
    split_on_separators: bool = False,
    table: Optional[CategoryTable] = None,
) -> List[ParsedGroceryItem]:
    """Parse pasted text, turning blank input and empty results into 400s."""
    if not text or not text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=empty_detail)
    items = parse_grocery_list(text, split_on_separators=split_on_separators, table=table)
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No grocery items found")
    return items


def merge_items(
    existing: Sequence[CartRecord], incoming: Iterable[CartRecord]
) -> Tuple[List[CartRecord], List[CartRecord], int]:
    """Append incoming items whose names are not already in the cart.

    Only names already in the cart count as duplicates; repeats inside the
    incoming batch are all kept.
    """
    existing_names = {normalize_item_name(item.get("itemName") or "") for item in existing}
    added: List[CartRecord] = []
    skipped = 0
    for item in incoming:
        if normalize_item_name(item.get("itemName") or "") in existing_names:
            skipped += 1
            continue
        added.append(item)
    return list(existing) + added, added, skipped


def parse_into_cart(
    store: CartStore,
    owner: str,
    text: str,
    *,
    action: str = "replace",
    split_on_separators: bool = False,
    table: Optional[CategoryTable] = None,
) -> Tuple[List[CartRecord], int, int]:
    """Parse ``text`` and replace or merge the owner's cart.

    Returns the new cart, the number of items added and the number of
    duplicates skipped by a merge.
    """
    parsed = parse_text_or_400(
        text,
        empty_detail="listText required",
        split_on_separators=split_on_separators,
        table=table,
    )
    added_at = _now_iso()
    incoming = [build_cart_item(item, added_at=added_at) for item in parsed]

    if action == "replace":
        cart, added, skipped = incoming, incoming, 0
    elif action == "merge":
        cart, added, skipped = merge_items(store.get(owner), incoming)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown action '{action}'")

    store.save(owner, cart)
    logger.info(
        "Cart parse owner=%s action=%s parsed=%d added=%d skipped=%d total=%d",
        owner,
        action,
        len(parsed),
        len(added),
        skipped,
        len(cart),
    )
    return cart, len(added), skipped


def _find_index(cart: Sequence[CartRecord], item_id: str) -> int:
    for index, item in enumerate(cart):
        if item.get("id") == item_id:
            return index
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")


def update_cart_item(
    store: CartStore,
    owner: str,
    item_id: str,
    update: CartItemUpdate,
    *,
    table: Optional[CategoryTable] = None,
) -> Tuple[CartRecord, List[CartRecord]]:
    cart = store.get(owner)
    index = _find_index(cart, item_id)
    item = dict(cart[index])
    changes: Dict[str, Any] = update.model_dump(exclude_unset=True)

    if "itemName" in changes:
        name = " ".join((changes["itemName"] or "").split())
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="itemName cannot be empty")
        changes["itemName"] = name
        if "category" not in changes and name != item.get("itemName"):
            changes["category"] = classify_category(name, table)
    if "unit" in changes:
        changes["unit"] = (changes["unit"] or "").strip() or None
        changes["canonicalUnit"] = canonical_unit(changes["unit"])
    if "quantity" in changes:
        changes["quantity"] = changes["quantity"].strip() if changes["quantity"] else None

    item.update(changes)
    if item.get("unit") and not item.get("quantity"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A unit requires a quantity")
    if item.get("category") is None:
        item["category"] = GroceryCategory.OTHER.value
    item["confidence"] = score_confidence(
        quantity=item.get("quantity"),
        unit=item.get("unit"),
        item_name=item["itemName"],
        category=item["category"],
    )
    item["needsReview"] = item["confidence"] < REVIEW_THRESHOLD
    item["updatedAt"] = _now_iso()

    cart[index] = item
    store.save(owner, cart)
    logger.info("Cart item updated owner=%s id=%s fields=%s", owner, item_id, sorted(changes))
    return item, cart


def remove_cart_item(store: CartStore, owner: str, item_id: str) -> Tuple[CartRecord, List[CartRecord]]:
    cart = store.get(owner)
    index = _find_index(cart, item_id)
    removed = cart.pop(index)
    store.save(owner, cart)
    logger.info("Cart item removed owner=%s id=%s remaining=%d", owner, item_id, len(cart))
    return removed, cart


def clear_cart(store: CartStore, owner: str) -> int:
    previous = store.clear(owner)
    logger.info("Cart cleared owner=%s previous=%d", owner, previous)
    return previous


def count_categories(items: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    counts = Counter(item.get("category") or GroceryCategory.OTHER.value for item in items)
    return dict(counts)


def summarize_parsed(items: Sequence[ParsedGroceryItem]) -> CategoryCount:
    return CategoryCount(
        totalItems=len(items),
        categories=count_categories(item.to_dict() for item in items),
    )


def compute_cart_stats(cart: Sequence[CartRecord]) -> CartStats:
    bands = ConfidenceBands()
    total_confidence = 0.0
    for item in cart:
        confidence = float(item.get("confidence") or 0.0)
        total_confidence += confidence
        if confidence >= REVIEW_THRESHOLD:
            bands.high += 1
        elif confidence >= MEDIUM_CONFIDENCE:
            bands.medium += 1
        else:
            bands.low += 1

    timestamps = [item.get("updatedAt") or item.get("addedAt") for item in cart]
    timestamps = [ts for ts in timestamps if ts]
    return CartStats(
        totalItems=len(cart),
        categories=count_categories(cart),
        confidence=bands,
        needsReview=sum(1 for item in cart if item.get("needsReview")),
        averageConfidence=round(total_confidence / len(cart), 3) if cart else 0.0,
        lastModified=max(timestamps) if timestamps else None,
    )


def search_cart(
    cart: Sequence[CartRecord],
    query: str,
    *,
    category: Optional[str] = None,
    needs_review: Optional[bool] = None,
) -> List[CartRecord]:
    term = (query or "").strip().lower()
    if len(term) < MIN_SEARCH_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search query (q) must be at least {MIN_SEARCH_LENGTH} characters",
        )

    results: List[CartRecord] = []
    for item in cart:
        haystacks = (item.get("itemName"), item.get("category"), item.get("original"))
        if not any(term in (value or "").lower() for value in haystacks):
            continue
        if category and item.get("category") != category:
            continue
        if needs_review is not None and bool(item.get("needsReview")) != needs_review:
            continue
        results.append(item)
    return results
