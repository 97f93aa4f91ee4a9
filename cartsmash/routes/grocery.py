import logging

from fastapi import APIRouter, Request

from ..config import get_settings
from ..ratelimit import limiter, parse_rate_limit
from ..schemas import GroceryListParseRequest, GroceryListParseResponse, ParsedItem
from ..services.cart import parse_text_or_400, summarize_parsed
from ..services.category_table import get_category_table


router = APIRouter(prefix="/grocery-list", tags=["grocery-list"])

logger = logging.getLogger(__name__)


@router.post("/parse", response_model=GroceryListParseResponse)
@limiter.limit(parse_rate_limit)
def parse_grocery_list_text(request: Request, payload: GroceryListParseRequest) -> GroceryListParseResponse:
    split = payload.splitOnSeparators
    if split is None:
        split = get_settings().split_on_separators
    items = parse_text_or_400(
        payload.text,
        empty_detail="No text provided",
        split_on_separators=split,
        table=get_category_table(),
    )
    logger.info("Parsed grocery list items=%d", len(items))
    return GroceryListParseResponse(
        items=[ParsedItem(**item.to_dict()) for item in items],
        itemCount=len(items),
        stats=summarize_parsed(items),
    )
