from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..auth import get_cart_owner
from ..config import get_settings
from ..ratelimit import limiter, parse_rate_limit
from ..schemas import (
    CartClearResponse,
    CartDeleteResponse,
    CartItemResponse,
    CartItemUpdate,
    CartParseRequest,
    CartParseResponse,
    CartResponse,
    CartSearchResponse,
    CartStatsResponse,
    CategoryName,
)
from ..services.cart import (
    clear_cart,
    compute_cart_stats,
    parse_into_cart,
    remove_cart_item,
    search_cart,
    update_cart_item,
)
from ..services.cart_store import CartStore, get_cart_store
from ..services.category_table import get_category_table


router = APIRouter(prefix="/cart", tags=["cart"])


@router.post("/parse", response_model=CartParseResponse)
@limiter.limit(parse_rate_limit)
def parse_cart(
    request: Request,
    payload: CartParseRequest,
    owner: str = Depends(get_cart_owner),
    store: CartStore = Depends(get_cart_store),
):
    split = payload.splitOnSeparators
    if split is None:
        split = get_settings().split_on_separators
    cart, added, skipped = parse_into_cart(
        store,
        owner,
        payload.listText,
        action=payload.action,
        split_on_separators=split,
        table=get_category_table(),
    )
    return CartParseResponse(
        cart=cart,
        action=payload.action,
        itemsAdded=added,
        duplicatesSkipped=skipped,
        totalItems=len(cart),
    )


@router.get("/current", response_model=CartResponse)
def current_cart(owner: str = Depends(get_cart_owner), store: CartStore = Depends(get_cart_store)):
    cart = store.get(owner)
    return CartResponse(cart=cart, itemCount=len(cart), stats=compute_cart_stats(cart))


@router.put("/item/{item_id}", response_model=CartItemResponse)
def update_item(
    item_id: str,
    payload: CartItemUpdate,
    owner: str = Depends(get_cart_owner),
    store: CartStore = Depends(get_cart_store),
):
    item, cart = update_cart_item(store, owner, item_id, payload, table=get_category_table())
    return CartItemResponse(item=item, cart=cart)


@router.delete("/item/{item_id}", response_model=CartDeleteResponse)
def delete_item(item_id: str, owner: str = Depends(get_cart_owner), store: CartStore = Depends(get_cart_store)):
    removed, cart = remove_cart_item(store, owner, item_id)
    return CartDeleteResponse(cart=cart, deletedItem=removed)


@router.post("/clear", response_model=CartClearResponse)
def clear(owner: str = Depends(get_cart_owner), store: CartStore = Depends(get_cart_store)):
    return CartClearResponse(previousItemCount=clear_cart(store, owner))


@router.get("/stats", response_model=CartStatsResponse)
def stats(owner: str = Depends(get_cart_owner), store: CartStore = Depends(get_cart_store)):
    return CartStatsResponse(stats=compute_cart_stats(store.get(owner)))


@router.get("/search", response_model=CartSearchResponse)
def search(
    q: str = Query(default=""),
    category: Optional[CategoryName] = Query(default=None),
    needsReview: Optional[bool] = Query(default=None),
    owner: str = Depends(get_cart_owner),
    store: CartStore = Depends(get_cart_store),
):
    results = search_cart(store.get(owner), q, category=category, needs_review=needsReview)
    return CartSearchResponse(query=q, results=results, count=len(results))
