"""Command-line interface for parsing grocery text without the HTTP service."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from .observability import configure_logging
from .parsing import (
    DEFAULT_CATEGORY_TABLE,
    CategoryTable,
    ParsedGroceryItem,
    load_category_table,
    parse_grocery_list,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse a pasted grocery list into structured items")
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Text file to parse (default: read stdin)",
    )
    parser.add_argument(
        "--split-separators",
        action="store_true",
        help="Also split lines on ';' and ','",
    )
    parser.add_argument(
        "--categories",
        type=Path,
        default=None,
        help="JSON file of {category: [keywords]} replacing the built-in table",
    )
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def render_table(items: Sequence[ParsedGroceryItem]) -> str:
    rows = [("QTY", "UNIT", "ITEM", "CATEGORY")]
    rows.extend((item.quantity or "", item.unit or "", item.item_name, item.category) for item in items)
    widths = [max(len(row[col]) for row in rows) for col in range(4)]
    lines = ["  ".join(value.ljust(widths[col]) for col, value in enumerate(row)).rstrip() for row in rows]
    return "\n".join(lines)


def _read_input(path: Optional[Path], stdin: TextIO) -> str:
    if path is None:
        return stdin.read()
    return path.read_text(encoding="utf-8")


def main(argv: Optional[List[str]] = None, *, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(json_logs=False, level=args.log_level, force=True)

    table: CategoryTable = DEFAULT_CATEGORY_TABLE
    if args.categories is not None:
        try:
            table = load_category_table(args.categories)
        except (OSError, ValueError) as exc:
            parser.error(f"cannot load category table {args.categories}: {exc}")

    try:
        text = _read_input(args.input, stdin)
    except OSError as exc:
        parser.error(f"cannot read {args.input}: {exc}")

    items = parse_grocery_list(text, split_on_separators=args.split_separators, table=table)
    logger.info("Parsed %d items", len(items))

    if args.format == "table":
        stdout.write(render_table(items) + "\n")
    else:
        json.dump([item.to_dict() for item in items], stdout, indent=2, ensure_ascii=False)
        stdout.write("\n")
    return 0 if items else 1


if __name__ == "__main__":
    raise SystemExit(main())
