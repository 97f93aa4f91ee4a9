from __future__ import annotations

import copy
import json
import logging
import threading
from typing import Any, Dict, List, Protocol

import redis
from fastapi import HTTPException, Request, status

from ..config import Settings

logger = logging.getLogger(__name__)

CartRecord = Dict[str, Any]


class CartStore(Protocol):
    """Per-owner cart persistence. Carts are ordered lists of item dicts."""

    def get(self, owner: str) -> List[CartRecord]: ...

    def save(self, owner: str, items: List[CartRecord]) -> None: ...

    def clear(self, owner: str) -> int: ...


class InMemoryCartStore:
    def __init__(self) -> None:
        self._carts: Dict[str, List[CartRecord]] = {}
        self._lock = threading.Lock()

    def get(self, owner: str) -> List[CartRecord]:
        with self._lock:
            return copy.deepcopy(self._carts.get(owner, []))

    def save(self, owner: str, items: List[CartRecord]) -> None:
        with self._lock:
            self._carts[owner] = copy.deepcopy(items)

    def clear(self, owner: str) -> int:
        with self._lock:
            return len(self._carts.pop(owner, []))


class RedisCartStore:
    """One JSON blob per owner under ``cart:{owner}``, refreshed TTL on every write."""

    def __init__(self, client: redis.Redis, ttl_seconds: int) -> None:
        self._redis = client
        self._ttl = ttl_seconds

    @staticmethod
    def _key(owner: str) -> str:
        return f"cart:{owner}"

    def get(self, owner: str) -> List[CartRecord]:
        try:
            raw = self._redis.get(self._key(owner))
        except redis.RedisError as exc:
            logger.error("Cart read failed owner=%s: %s", owner, exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cart storage unavailable")
        return json.loads(raw) if raw else []

    def save(self, owner: str, items: List[CartRecord]) -> None:
        try:
            self._redis.setex(self._key(owner), self._ttl, json.dumps(items))
        except redis.RedisError as exc:
            logger.error("Cart write failed owner=%s: %s", owner, exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cart storage unavailable")

    def clear(self, owner: str) -> int:
        key = self._key(owner)
        try:
            # GET and DEL in one MULTI/EXEC so a concurrent save is either counted or kept.
            pipe = self._redis.pipeline(transaction=True)
            pipe.get(key)
            pipe.delete(key)
            raw, _ = pipe.execute()
        except redis.RedisError as exc:
            logger.error("Cart clear failed owner=%s: %s", owner, exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cart storage unavailable")
        return len(json.loads(raw)) if raw else 0


def build_cart_store(settings: Settings) -> CartStore:
    if not settings.redis_url:
        logger.info("REDIS_URL not set; using in-memory cart store")
        return InMemoryCartStore()
    client = redis.from_url(settings.redis_url, decode_responses=True)
    return RedisCartStore(client, ttl_seconds=settings.cart_ttl_seconds)


def get_cart_store(request: Request) -> CartStore:
    return request.app.state.cart_store
