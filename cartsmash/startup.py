from __future__ import annotations

from typing import Iterable, Tuple

from .config import Settings
from .observability import get_logger

logger = get_logger(__name__)


def _collect_missing(settings: Settings, pairs: Iterable[Tuple[str, str]]) -> list[str]:
    missing: list[str] = []
    for attr, label in pairs:
        value = getattr(settings, attr, None)
        if value in (None, "", [], {}):
            missing.append(label)
    return missing


def validate_settings(settings: Settings) -> None:
    """Fail fast when auth or storage config is missing outside dev."""
    environment = (settings.environment or "dev").lower()

    auth_pairs: list[Tuple[str, str]] = []
    if settings.auth_required and not settings.auth_disable_verification:
        auth_pairs = [
            ("auth_issuer", "AUTH_ISSUER"),
            ("auth_audience", "AUTH_AUDIENCE"),
        ]

    if environment == "dev":
        dev_missing = _collect_missing(settings, [("redis_url", "REDIS_URL"), *auth_pairs])
        if dev_missing:
            logger.warning(
                "Running in dev without recommended config; carts are kept in memory",
                missing=dev_missing,
            )
        return

    required_pairs: list[Tuple[str, str]] = [("redis_url", "REDIS_URL"), *auth_pairs]
    missing = _collect_missing(settings, required_pairs)
    if missing:
        raise RuntimeError(
            f"Missing required configuration for environment '{environment}': {', '.join(sorted(missing))}"
        )
    if settings.auth_disable_verification:
        logger.warning(
            "JWT signature verification disabled outside dev", environment=environment
        )
