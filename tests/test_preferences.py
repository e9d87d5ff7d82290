"""Tests for shopper preference extraction."""

import math

import pytest

from cartwise.config import EngineConfig
from cartwise.recommender.preferences import PreferenceExtractor
from cartwise.store.memory import InMemoryStore
from cartwise.store.models import Category, Wishlist
from tests.factories import make_feedback, make_product, run


def test_preferences_from_feedback_and_wishlist(sample_store):
    extractor = PreferenceExtractor(sample_store, EngineConfig())

    prefs = run(extractor.extract("c1"))

    assert prefs.liked_product_ids == ["p1", "p5"]
    assert prefs.wishlist_product_ids == ["p6"]
    assert prefs.liked_category_ids == {"cat-shoes", "cat-books"}
    assert prefs.wishlist_category_ids == {"cat-books"}
    assert prefs.avg_rating == pytest.approx(4.5)
    assert prefs.product_ratings == {"p1": 5, "p5": 4}
    # Runner 100, Novel 20, Atlas 60
    assert prefs.price_min == 20
    assert prefs.price_max == 100
    assert prefs.price_midpoint == 60
    assert prefs.has_feedback and prefs.has_wishlist


def test_low_ratings_count_toward_average_but_not_likes():
    store = InMemoryStore(
        products=[make_product("a", price=10), make_product("b", price=500)],
        feedback=[make_feedback("c1", "a", 5), make_feedback("c1", "b", 2)],
    )

    prefs = run(PreferenceExtractor(store, EngineConfig()).extract("c1"))

    assert prefs.liked_product_ids == ["a"]
    assert prefs.avg_rating == pytest.approx(3.5)
    # Only liked and wishlisted products shape the price range
    assert prefs.price_min == prefs.price_max == 10


def test_neutral_snapshot_without_history(sample_store):
    prefs = run(PreferenceExtractor(sample_store, EngineConfig()).extract("c99"))

    assert prefs.liked_product_ids == []
    assert prefs.wishlist_product_ids == []
    assert prefs.category_ids == set()
    assert prefs.avg_rating == 0
    assert prefs.price_min == 0
    assert math.isinf(prefs.price_max)
    assert not prefs.has_price_range
    assert not prefs.has_feedback
    assert not prefs.has_wishlist
    assert not prefs.has_product_signal


def test_category_tolerates_populated_and_raw_references():
    """Populated categories and bare ids project to the same id."""
    store = InMemoryStore(
        categories=[Category("cat-shoes", "Shoes")],
        products=[
            make_product("a", category="cat-shoes"),
            make_product("b", category="cat-unknown"),
            make_product("c", category=None),
        ],
        wishlists=[Wishlist("c1", ["a", "b", "c"])],
    )

    prefs = run(PreferenceExtractor(store, EngineConfig()).extract("c1"))

    assert prefs.wishlist_category_ids == {"cat-shoes", "cat-unknown"}
    assert not prefs.has_feedback
    assert prefs.has_wishlist


def test_liked_threshold_is_configurable(sample_store):
    config = EngineConfig(liked_rating_threshold=5)

    prefs = run(PreferenceExtractor(sample_store, config).extract("c1"))

    assert prefs.liked_product_ids == ["p1"]
