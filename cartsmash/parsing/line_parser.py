from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .categories import CategoryTable, classify_category
from .models import ParsedGroceryItem
from .units import QUANTITY_PATTERN, build_unit_patterns, normalize_quantity

logger = logging.getLogger(__name__)

# Bullets, checkboxes, "1." / "1)" ordinals and "a)" letter ordinals, any number
# of them in a row. Ordinals need trailing whitespace so "1.5 lbs" keeps its quantity.
LIST_MARKER_PATTERN = re.compile(
    r"^(?:"
    r"(?:[-*•·◦▪▫◆◇→➤➢>]"
    r"|\[[ xX✓]?\]"
    r"|\d+[.)](?=\s|$)"
    r"|[a-zA-Z]\))"
    r"\s*)+"
)

UNIT_PATTERNS: List[Tuple[str, re.Pattern[str]]] = build_unit_patterns()
GENERIC_QUANTITY_PATTERN = re.compile(rf"^{QUANTITY_PATTERN}\s+(?P<name>.+)$", re.IGNORECASE)

_LEADING_OF = re.compile(r"^of\s+", re.IGNORECASE)
_TRAILING_PUNCTUATION = " ,;:."


def strip_list_markers(text: str) -> str:
    """Remove bullets, checkboxes and ordinals from the start of a line."""
    return LIST_MARKER_PATTERN.sub("", text.strip(), count=1).strip()


def _clean_item_name(raw: str) -> str:
    name = " ".join(raw.split())
    name = _LEADING_OF.sub("", name)
    return name.rstrip(_TRAILING_PUNCTUATION)


def _extract_quantity(cleaned: str) -> Tuple[Optional[str], Optional[str], str]:
    for group, pattern in UNIT_PATTERNS:
        match = pattern.match(cleaned)
        if not match:
            continue
        name = _clean_item_name(match.group("name"))
        if not name:
            # "2 lbs" on its own; let the generic pattern keep the unit word as the name.
            continue
        logger.debug("Matched %s unit pattern for line %r", group, cleaned)
        return normalize_quantity(match.group("quantity")), match.group("unit"), name

    match = GENERIC_QUANTITY_PATTERN.match(cleaned)
    if match:
        return normalize_quantity(match.group("quantity")), None, _clean_item_name(match.group("name"))

    return None, None, _clean_item_name(cleaned)


def parse_grocery_item(line: str, table: Optional[CategoryTable] = None) -> Optional[ParsedGroceryItem]:
    """Parse one free-text grocery line.

    Returns ``None`` when nothing is left after stripping list markers.
    Lines that match no quantity pattern become an item whose name is the
    whole cleaned line, with quantity and unit left empty.

    Raises:
        TypeError: if ``line`` is not a string.
    """
    if not isinstance(line, str):
        raise TypeError(f"grocery line must be str, got {type(line).__name__}")

    cleaned = strip_list_markers(line)
    if not cleaned:
        return None

    quantity, unit, item_name = _extract_quantity(cleaned)
    if not item_name:
        return None

    return ParsedGroceryItem(
        original=line,
        item_name=item_name,
        quantity=quantity,
        unit=unit,
        category=classify_category(item_name, table),
    )
