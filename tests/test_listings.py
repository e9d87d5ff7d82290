"""Tests for the Popular, Trending, New Arrivals and Similar listings."""

import pytest

from cartwise.config import EngineConfig
from cartwise.exceptions import ProductNotFoundError
from cartwise.recommender.enrich import ProductEnricher
from cartwise.recommender.listings import ListingStrategies
from cartwise.store.memory import InMemoryStore
from cartwise.store.models import OrderStatus
from tests.factories import (
    fixed_clock,
    make_feedback,
    make_options,
    make_order,
    make_product,
    run,
)


def _listings(store, config=None):
    return ListingStrategies(
        store, ProductEnricher(store), config or EngineConfig(), clock=fixed_clock
    )


def _ids(items):
    return [item.id for item in items]


def test_popular_ranks_by_units_sold(sample_store):
    popular = run(_listings(sample_store).popular(10))

    # p5 is a best seller but averages 3 stars
    assert _ids(popular) == ["p2", "p1", "p10", "p9"]


def test_popular_drops_products_rated_four_or_below():
    store = InMemoryStore(
        products=[make_product(pid) for pid in ("four", "high", "unrated")],
        orders=[make_order("o1", "c1", [("four", 9), ("high", 5), ("unrated", 1)])],
        feedback=[
            make_feedback("c1", "four", 4),
            make_feedback("c2", "high", 5),
            make_feedback("c3", "high", 4),
        ],
    )

    assert _ids(run(_listings(store).popular(5))) == ["high", "unrated"]


def test_popular_excludes_and_limits(sample_store):
    listings = _listings(sample_store)

    assert _ids(run(listings.popular(2))) == ["p2", "p1"]
    assert _ids(run(listings.popular(10, exclude_ids=["p2", "p10"]))) == ["p1", "p9"]


def test_popular_falls_back_to_catalog_without_sales():
    store = InMemoryStore(
        products=[
            make_product("a"),
            make_product("gone", deleted=True),
            make_product("b"),
            make_product("c"),
        ],
        orders=[make_order("o1", "c1", [("a", 3)], status=OrderStatus.CANCELLED)],
    )

    assert _ids(run(_listings(store).popular(2))) == ["a", "b"]
    assert _ids(run(_listings(store).popular(5, exclude_ids=["a"]))) == ["b", "c"]


def test_trending_only_counts_recent_sales(sample_store):
    trending = run(_listings(sample_store).trending(10))

    # o3 (p5) is older than the trending window
    assert _ids(trending) == ["p2", "p10", "p1", "p9"]


def test_trending_window_is_configurable(sample_store):
    listings = _listings(sample_store, EngineConfig(trending_window_days=7))

    assert _ids(run(listings.trending(10))) == ["p10", "p2"]


def test_new_arrivals_newest_available_first(sample_store):
    listings = _listings(sample_store)

    assert _ids(run(listings.new_arrivals(3))) == ["p6", "p8", "p5"]
    # p4 has no stock, p7 is deleted
    assert _ids(run(listings.new_arrivals(10))) == [
        "p6",
        "p8",
        "p5",
        "p10",
        "p9",
        "p3",
        "p2",
        "p1",
    ]
    assert _ids(run(listings.new_arrivals(2, exclude_ids=["p6"]))) == ["p8", "p5"]


def test_similar_stays_in_category_and_price_band():
    """An anchor priced 100 only matches its category within [70, 130]."""
    store = InMemoryStore(
        products=[
            make_product("anchor", 100, category="shoes"),
            make_product("low", 70, category="shoes"),
            make_product("high", 130, category="shoes"),
            make_product("too-low", 69, category="shoes"),
            make_product("too-high", 131, category="shoes"),
            make_product("book", 100, category="books"),
            make_product("no-stock", 100, stock=0, category="shoes"),
            make_product("gone", 100, category="shoes", deleted=True),
        ]
    )

    similar = run(_listings(store).similar("anchor", 10))

    assert _ids(similar) == ["low", "high"]


def test_similar_respects_limit():
    store = InMemoryStore(
        products=[make_product(f"s{i}", 100, category="shoes") for i in range(6)]
    )

    assert len(run(_listings(store).similar("s0", 3))) == 3


def test_similar_unknown_or_deleted_anchor(sample_store):
    listings = _listings(sample_store)

    with pytest.raises(ProductNotFoundError):
        run(listings.similar("missing", 5))
    with pytest.raises(ProductNotFoundError):
        run(listings.similar("p7", 5))


def test_similar_anchor_without_category(sample_store):
    assert run(_listings(sample_store).similar("p8", 5)) == []


def test_similar_counts_option_stock_of_sold_out_products():
    """A product with no own stock qualifies through an in-stock size."""
    sized, sized_values = make_options("v", [0, 4])
    store = InMemoryStore(
        products=[
            make_product("anchor", 100, category="shoes"),
            make_product("v", 110, stock=0, category="shoes"),
        ],
        option_types=[sized],
        option_values=sized_values,
    )

    similar = run(_listings(store).similar("anchor", 5))

    assert _ids(similar) == ["v"]
    assert [v.stock for v in similar[0].option_types[0].values] == [0, 4]


def test_similar_scans_past_sold_out_products():
    store = InMemoryStore(
        products=[make_product("anchor", 100, category="shoes")]
        + [make_product(f"out{i}", 100, stock=0, category="shoes") for i in range(6)]
        + [make_product("last", 100, category="shoes")]
    )

    assert _ids(run(_listings(store).similar("anchor", 1))) == ["last"]


def test_new_arrivals_scan_past_sold_out_newest_products():
    store = InMemoryStore(
        products=[
            make_product(f"new{i}", stock=0, created_days_ago=i + 1) for i in range(5)
        ]
        + [make_product("ok", stock=3, created_days_ago=90)]
    )

    assert _ids(run(_listings(store).new_arrivals(1))) == ["ok"]


def test_catalog_fallback_scans_past_sold_out_products():
    store = InMemoryStore(
        products=[make_product(f"out{i}", stock=0) for i in range(5)]
        + [make_product("ok"), make_product("also-ok")]
    )

    assert _ids(run(_listings(store).popular(1))) == ["ok"]
    assert _ids(run(_listings(store).trending(5))) == ["ok", "also-ok"]
