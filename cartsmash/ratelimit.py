from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings


def parse_rate_limit() -> str:
    return get_settings().parse_rate_limit


limiter = Limiter(key_func=get_remote_address)
