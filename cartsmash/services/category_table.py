from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from ..config import get_settings
from ..parsing import DEFAULT_CATEGORY_TABLE, CategoryTable, load_category_table

logger = logging.getLogger(__name__)


@lru_cache
def get_category_table() -> CategoryTable:
    """Load the configured keyword table once per process, falling back to the built-in one."""
    path_setting = get_settings().category_table_path
    if not path_setting:
        return DEFAULT_CATEGORY_TABLE

    table_path = Path(path_setting)
    try:
        table = load_category_table(table_path)
    except FileNotFoundError:
        logger.warning("Category table %s not found; using default keywords", table_path)
        return DEFAULT_CATEGORY_TABLE
    except (json.JSONDecodeError, ValueError) as exc:
        logger.warning("Invalid category table %s: %s; using default keywords", table_path, exc)
        return DEFAULT_CATEGORY_TABLE

    logger.info("Loaded category table %s with %d categories", table_path, len(table))
    return table
