from __future__ import annotations

import logging
import re
from typing import List, Optional

from .categories import CategoryTable
from .line_parser import parse_grocery_item
from .models import ParsedGroceryItem

logger = logging.getLogger(__name__)

HEADER_PATTERNS = [
    re.compile(r"^(?:my\s+)?(?:grocery|shopping)\s+list\s*:?$", re.IGNORECASE),
    re.compile(r"^(?:grocery|shopping)\s+list\s+for\b[^:]*:$", re.IGNORECASE),
    re.compile(r"^(?:ingredients|groceries|items|to\s+buy|my\s+list)\s*:?$", re.IGNORECASE),
    re.compile(r"^#{1,6}\s+\S.*$"),
]

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")
_SEPARATOR_SPLIT = re.compile(r"\r\n|\r|\n|;|,")


def is_header_line(line: str) -> bool:
    """True when a trimmed line is a list title rather than an item."""
    stripped = line.strip()
    return any(pattern.match(stripped) for pattern in HEADER_PATTERNS)


def split_lines(text: str, *, split_on_separators: bool = False) -> List[str]:
    splitter = _SEPARATOR_SPLIT if split_on_separators else _LINE_SPLIT
    return [segment.strip() for segment in splitter.split(text)]


def parse_grocery_list(
    text: str,
    *,
    split_on_separators: bool = False,
    table: Optional[CategoryTable] = None,
) -> List[ParsedGroceryItem]:
    """Parse a pasted block of grocery text into items, in input order.

    Blank lines and list headers are skipped. Identical lines produce
    identical items; nothing is merged.
    """
    if not isinstance(text, str):
        raise TypeError(f"grocery list text must be str, got {type(text).__name__}")

    items: List[ParsedGroceryItem] = []
    skipped_headers = 0
    for line in split_lines(text, split_on_separators=split_on_separators):
        if not line:
            continue
        if is_header_line(line):
            skipped_headers += 1
            continue
        item = parse_grocery_item(line, table)
        if item is not None:
            items.append(item)

    logger.debug(
        "Parsed grocery list items=%d headers_skipped=%d", len(items), skipped_headers
    )
    return items
