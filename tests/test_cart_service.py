from __future__ import annotations

import json
import unittest
from typing import Any, Dict, List, Optional, Tuple

import redis
from fastapi import HTTPException

from cartsmash.parsing import parse_grocery_item
from cartsmash.schemas import CartItemUpdate
from cartsmash.services.cart import (
    build_cart_item,
    compute_cart_stats,
    merge_items,
    parse_into_cart,
    remove_cart_item,
    score_confidence,
    search_cart,
    update_cart_item,
)
from cartsmash.services.cart_store import InMemoryCartStore, RedisCartStore


class FakeRedis:
    """Just enough of the redis client API for RedisCartStore."""

    def __init__(self, fail: bool = False) -> None:
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = fail
        self.executed: List[Tuple[bool, List[Tuple[str, str]]]] = []

    def get(self, key: str) -> Optional[str]:
        if self.fail:
            raise redis.ConnectionError("down")
        return self.data.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        if self.fail:
            raise redis.ConnectionError("down")
        self.data[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> int:
        if self.fail:
            raise redis.ConnectionError("down")
        return 1 if self.data.pop(key, None) is not None else 0

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        return FakePipeline(self, transaction)


class FakePipeline:
    def __init__(self, client: FakeRedis, transaction: bool) -> None:
        self.client = client
        self.transaction = transaction
        self.commands: List[Tuple[str, str]] = []

    def get(self, key: str) -> None:
        self.commands.append(("get", key))

    def delete(self, key: str) -> None:
        self.commands.append(("delete", key))

    def execute(self) -> List[Any]:
        self.client.executed.append((self.transaction, list(self.commands)))
        return [getattr(self.client, name)(key) for name, key in self.commands]


class ConfidenceTest(unittest.TestCase):
    def test_full_signal_scores_one(self):
        self.assertEqual(
            score_confidence(quantity="2", unit="lbs", item_name="chicken breast", category="meat"),
            1.0,
        )

    def test_instruction_line_needs_review(self):
        item = parse_grocery_item("Cook until tender")
        assert item is not None
        record = build_cart_item(item)
        self.assertEqual(record["confidence"], 0.7)
        self.assertTrue(record["needsReview"])

    def test_cart_item_carries_identity_and_parsed_fields(self):
        item = parse_grocery_item("2 lbs chicken breast")
        assert item is not None
        record = build_cart_item(item, added_at="2026-01-01T00:00:00+00:00")
        self.assertEqual(len(record["id"]), 32)
        self.assertEqual(record["itemName"], "chicken breast")
        self.assertEqual(record["canonicalUnit"], "lb")
        self.assertEqual(record["addedAt"], "2026-01-01T00:00:00+00:00")
        self.assertFalse(record["needsReview"])


class CartOperationsTest(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryCartStore()

    def test_replace_overwrites_existing_cart(self):
        parse_into_cart(self.store, "u1", "milk\neggs")
        cart, added, skipped = parse_into_cart(self.store, "u1", "3 bananas", action="replace")
        self.assertEqual([item["itemName"] for item in cart], ["bananas"])
        self.assertEqual((added, skipped), (1, 0))
        self.assertEqual(self.store.get("u1"), cart)

    def test_merge_skips_names_already_in_cart(self):
        parse_into_cart(self.store, "u1", "milk\n2 lbs chicken breast")
        cart, added, skipped = parse_into_cart(
            self.store, "u1", "MILK\n3 bananas\n3 bananas", action="merge"
        )
        self.assertEqual(
            [item["itemName"] for item in cart],
            ["milk", "chicken breast", "bananas", "bananas"],
        )
        self.assertEqual((added, skipped), (2, 1))

    def test_owners_do_not_share_carts(self):
        parse_into_cart(self.store, "u1", "milk")
        parse_into_cart(self.store, "u2", "eggs")
        self.assertEqual([i["itemName"] for i in self.store.get("u1")], ["milk"])
        self.assertEqual([i["itemName"] for i in self.store.get("u2")], ["eggs"])

    def test_blank_text_is_400(self):
        with self.assertRaises(HTTPException) as ctx:
            parse_into_cart(self.store, "u1", "   ")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail, "listText required")

    def test_header_only_text_is_400_and_cart_untouched(self):
        parse_into_cart(self.store, "u1", "milk")
        with self.assertRaises(HTTPException) as ctx:
            parse_into_cart(self.store, "u1", "Shopping List:")
        self.assertEqual(ctx.exception.detail, "No grocery items found")
        self.assertEqual(len(self.store.get("u1")), 1)

    def test_update_name_reclassifies(self):
        cart, _, _ = parse_into_cart(self.store, "u1", "Cook until tender")
        item, cart = update_cart_item(
            self.store, "u1", cart[0]["id"], CartItemUpdate(itemName="chicken thighs")
        )
        self.assertEqual(item["category"], "meat")
        self.assertFalse(item["needsReview"])
        self.assertIsNotNone(item["updatedAt"])
        self.assertEqual(self.store.get("u1")[0]["itemName"], "chicken thighs")

    def test_update_keeps_explicit_category(self):
        cart, _, _ = parse_into_cart(self.store, "u1", "milk")
        item, _ = update_cart_item(
            self.store, "u1", cart[0]["id"], CartItemUpdate(itemName="oat drink", category="dairy")
        )
        self.assertEqual(item["category"], "dairy")

    def test_update_rejects_unit_without_quantity(self):
        cart, _, _ = parse_into_cart(self.store, "u1", "milk")
        with self.assertRaises(HTTPException) as ctx:
            update_cart_item(self.store, "u1", cart[0]["id"], CartItemUpdate(unit="gallon"))
        self.assertEqual(ctx.exception.status_code, 400)

    def test_update_keeps_unit_as_written(self):
        cart, _, _ = parse_into_cart(self.store, "u1", "milk")
        item, _ = update_cart_item(
            self.store, "u1", cart[0]["id"], CartItemUpdate(quantity="2", unit=" Gallons ")
        )
        self.assertEqual(item["unit"], "Gallons")
        self.assertEqual(item["canonicalUnit"], "gal")

    def test_update_unknown_item_is_404(self):
        with self.assertRaises(HTTPException) as ctx:
            update_cart_item(self.store, "u1", "missing", CartItemUpdate(quantity="2"))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_remove_item(self):
        cart, _, _ = parse_into_cart(self.store, "u1", "milk\neggs")
        removed, cart = remove_cart_item(self.store, "u1", cart[0]["id"])
        self.assertEqual(removed["itemName"], "milk")
        self.assertEqual([i["itemName"] for i in cart], ["eggs"])
        with self.assertRaises(HTTPException):
            remove_cart_item(self.store, "u1", removed["id"])


class CartStatsAndSearchTest(unittest.TestCase):
    def setUp(self):
        store = InMemoryCartStore()
        self.cart, _, _ = parse_into_cart(
            store, "u1", "2 lbs chicken breast\n3 bananas\nCook until tender\n1 gallon milk"
        )

    def test_stats(self):
        stats = compute_cart_stats(self.cart)
        self.assertEqual(stats.totalItems, 4)
        self.assertEqual(stats.categories, {"meat": 1, "produce": 1, "other": 1, "dairy": 1})
        self.assertEqual(stats.confidence.high, 3)
        self.assertEqual(stats.confidence.medium, 1)
        self.assertEqual(stats.needsReview, 1)
        self.assertIsNotNone(stats.lastModified)

    def test_stats_for_empty_cart(self):
        stats = compute_cart_stats([])
        self.assertEqual(stats.totalItems, 0)
        self.assertEqual(stats.averageConfidence, 0.0)
        self.assertIsNone(stats.lastModified)

    def test_search_matches_name_category_and_original(self):
        self.assertEqual(len(search_cart(self.cart, "chick")), 1)
        self.assertEqual(len(search_cart(self.cart, "produce")), 1)
        self.assertEqual(len(search_cart(self.cart, "2 lbs")), 1)

    def test_search_filters(self):
        self.assertEqual(len(search_cart(self.cart, "an", category="produce")), 1)
        flagged = search_cart(self.cart, "en", needs_review=True)
        self.assertEqual([i["itemName"] for i in flagged], ["Cook until tender"])

    def test_short_query_is_400(self):
        with self.assertRaises(HTTPException) as ctx:
            search_cart(self.cart, "a")
        self.assertEqual(ctx.exception.status_code, 400)


class MergeItemsTest(unittest.TestCase):
    def test_merge_normalizes_whitespace_and_case(self):
        merged, added, skipped = merge_items(
            [{"itemName": "Chicken  Breast"}], [{"itemName": "chicken breast"}, {"itemName": "rice"}]
        )
        self.assertEqual([i["itemName"] for i in merged], ["Chicken  Breast", "rice"])
        self.assertEqual(len(added), 1)
        self.assertEqual(skipped, 1)


class RedisCartStoreTest(unittest.TestCase):
    def test_round_trip_with_ttl(self):
        client = FakeRedis()
        store = RedisCartStore(client, ttl_seconds=120)  # type: ignore[arg-type]
        store.save("u1", [{"id": "a", "itemName": "milk"}])
        self.assertEqual(json.loads(client.data["cart:u1"]), [{"id": "a", "itemName": "milk"}])
        self.assertEqual(client.ttls["cart:u1"], 120)
        self.assertEqual(store.get("u1"), [{"id": "a", "itemName": "milk"}])
        self.assertEqual(store.clear("u1"), 1)
        self.assertEqual(store.get("u1"), [])

    def test_clear_reads_and_deletes_in_one_transaction(self):
        client = FakeRedis()
        store = RedisCartStore(client, ttl_seconds=120)  # type: ignore[arg-type]
        store.save("u1", [{"id": "a"}, {"id": "b"}])
        self.assertEqual(store.clear("u1"), 2)
        self.assertEqual(client.executed, [(True, [("get", "cart:u1"), ("delete", "cart:u1")])])
        self.assertNotIn("cart:u1", client.data)
        self.assertEqual(store.clear("u1"), 0)

    def test_clear_on_unavailable_redis_is_503(self):
        store = RedisCartStore(FakeRedis(fail=True), ttl_seconds=120)  # type: ignore[arg-type]
        with self.assertRaises(HTTPException) as ctx:
            store.clear("u1")
        self.assertEqual(ctx.exception.status_code, 503)

    def test_unavailable_redis_is_503(self):
        store = RedisCartStore(FakeRedis(fail=True), ttl_seconds=120)  # type: ignore[arg-type]
        with self.assertRaises(HTTPException) as ctx:
            store.get("u1")
        self.assertEqual(ctx.exception.status_code, 503)


if __name__ == "__main__":
    unittest.main()
