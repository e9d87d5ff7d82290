"""Tests for topping up short personalized lists."""

from cartwise.config import EngineConfig
from cartwise.recommender.backfill import BackfillEngine
from cartwise.recommender.types import (
    REASON_NEW_ARRIVAL,
    REASON_POPULAR,
    REASON_TRENDING,
    EnrichedProduct,
)
from tests.factories import make_product, run


class StubListings:
    """Serves fixed listings and records what it was asked for."""

    def __init__(self, popular=(), trending=(), new_arrivals=()):
        self.lists = {
            "popular": [EnrichedProduct(make_product(pid)) for pid in popular],
            "trending": [EnrichedProduct(make_product(pid)) for pid in trending],
            "new_arrivals": [EnrichedProduct(make_product(pid)) for pid in new_arrivals],
        }
        self.requests = []

    async def _serve(self, kind, limit, exclude_ids):
        self.requests.append((kind, limit, list(exclude_ids)))
        return [p for p in self.lists[kind] if p.id not in exclude_ids][:limit]

    async def popular(self, limit, exclude_ids=()):
        return await self._serve("popular", limit, exclude_ids)

    async def trending(self, limit, exclude_ids=()):
        return await self._serve("trending", limit, exclude_ids)

    async def new_arrivals(self, limit, exclude_ids=()):
        return await self._serve("new_arrivals", limit, exclude_ids)


def _fill(listings, needed, exclude_ids=()):
    return run(BackfillEngine(listings, EngineConfig()).fill(needed, exclude_ids))


def test_quota_interleaves_sources():
    listings = StubListings(
        popular=["a", "b", "c"], trending=["d", "e"], new_arrivals=["f", "g"]
    )

    picked = _fill(listings, 5)

    assert [(r.product_id, r.reason, r.score) for r in picked] == [
        ("a", REASON_POPULAR, 3),
        ("b", REASON_POPULAR, 3),
        ("d", REASON_TRENDING, 2),
        ("e", REASON_TRENDING, 2),
        ("f", REASON_NEW_ARRIVAL, 1),
    ]
    assert all(r.product is not None for r in picked)


def test_each_source_is_asked_for_twice_the_gap():
    listings = StubListings(popular=["a"])

    _fill(listings, 4, exclude_ids=["x", "y"])

    assert sorted(listings.requests) == [
        ("new_arrivals", 8, ["x", "y"]),
        ("popular", 8, ["x", "y"]),
        ("trending", 8, ["x", "y"]),
    ]


def test_tops_up_from_remaining_sources():
    listings = StubListings(popular=["a", "b", "c", "d", "e"])

    picked = _fill(listings, 4)

    assert [r.product_id for r in picked] == ["a", "b", "c", "d"]
    assert {r.reason for r in picked} == {REASON_POPULAR}


def test_duplicates_across_sources_are_skipped():
    listings = StubListings(popular=["a"], trending=["a", "b"], new_arrivals=["c"])

    picked = _fill(listings, 3)

    assert [(r.product_id, r.reason) for r in picked] == [
        ("a", REASON_POPULAR),
        ("b", REASON_TRENDING),
        ("c", REASON_NEW_ARRIVAL),
    ]


def test_exhausted_sources_return_what_exists():
    listings = StubListings(popular=["a"], new_arrivals=["b"])

    assert [r.product_id for r in _fill(listings, 6)] == ["a", "b"]


def test_nothing_needed():
    listings = StubListings(popular=["a"])

    assert _fill(listings, 0) == []
    assert listings.requests == []


def test_failing_source_degrades_to_empty():
    class BrokenListings(StubListings):
        async def trending(self, limit, exclude_ids=()):
            raise RuntimeError("boom")

    assert _fill(BrokenListings(popular=["a"]), 2) == []
