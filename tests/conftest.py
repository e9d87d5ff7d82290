"""Shared fixtures: a small shoe-and-book shop and an API client over it."""

import sys
from pathlib import Path
from typing import Dict

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cartwise.api.main import app
from cartwise.api.metrics import metrics_service
from cartwise.api.routes import recommend
from cartwise.recommender.engine import RecommendationEngine
from cartwise.store.memory import InMemoryStore
from cartwise.store.models import Cart, CartItem, Category, OrderStatus, Wishlist
from tests.factories import (
    fixed_clock,
    make_feedback,
    make_options,
    make_order,
    make_product,
)


def sample_catalog() -> Dict[str, list]:
    """Ten products, five shoppers and a handful of orders.

    c1 likes p1 (shoes) and p5 (books), wishlists p6 and has p10 then p1 in
    the cart. c99 has no history at all.
    """
    sandal_options, sandal_values = make_options("p3", [0, 3])
    products = [
        make_product("p1", 100, 5, "cat-shoes", 60, name="Runner"),
        make_product("p2", 110, 3, "cat-shoes", 50, name="Trail"),
        make_product("p3", 40, 0, "cat-shoes", 40, name="Sandal"),
        make_product("p4", 200, 0, "cat-shoes", 30, name="Boot"),
        make_product("p5", 20, 10, "cat-books", 5, name="Novel"),
        make_product("p6", 60, 2, "cat-books", 1, name="Atlas"),
        make_product("p7", 95, 9, "cat-shoes", 2, deleted=True, name="Old Shoe"),
        make_product("p8", 10, 50, None, 3, name="Sock"),
        make_product("p9", 35, 4, "cat-books", 20, name="Cookbook"),
        make_product("p10", 30, 6, "cat-shoes", 15, name="Slipper"),
    ]
    feedback = [
        make_feedback("c1", "p1", 5),
        make_feedback("c1", "p5", 4),
        make_feedback("c2", "p1", 5),
        make_feedback("c2", "p5", 4),
        make_feedback("c2", "p2", 5),
        make_feedback("c2", "p9", 5),
        make_feedback("c3", "p1", 4),
        make_feedback("c3", "p2", 5),
        make_feedback("c3", "p9", 4),
        make_feedback("c4", "p5", 1),
    ]
    orders = [
        make_order("o1", "c2", [("p1", 1), ("p2", 2)], OrderStatus.COMPLETED, 10),
        make_order("o2", "c3", [("p1", 1), ("p9", 1)], OrderStatus.SHIPPED, 12),
        make_order("o3", "c4", [("p5", 3)], OrderStatus.PROCESSING, 40),
        make_order("o4", "c5", [("p8", 10)], OrderStatus.PENDING, 2),
        make_order("o5", "c3", [("p6", 9)], OrderStatus.CANCELLED, 2),
        make_order("o6", "c2", [("p2", 1), ("p10", 2)], OrderStatus.COMPLETED, 5),
    ]
    return {
        "categories": [Category("cat-shoes", "Shoes"), Category("cat-books", "Books")],
        "products": products,
        "option_types": [sandal_options],
        "option_values": sandal_values,
        "feedback": feedback,
        "wishlists": [Wishlist(customer_id="c1", product_ids=["p6"])],
        "carts": [
            Cart(
                customer_id="c1",
                items=[CartItem("p10", 1), CartItem("p1", 1)],
            )
        ],
        "orders": orders,
    }


@pytest.fixture
def sample_store() -> InMemoryStore:
    return InMemoryStore(**sample_catalog())


@pytest.fixture
def engine(sample_store) -> RecommendationEngine:
    return RecommendationEngine(sample_store, clock=fixed_clock)


@pytest.fixture
def client(engine):
    """Test client serving the sample shop instead of on-disk data."""
    metrics_service.reset()
    app.dependency_overrides[recommend.get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()
    metrics_service.reset()


@pytest.fixture
def reset_engine_cache():
    """Drop the API's cached engine before and after a test."""
    recommend._engine_cache = None
    yield
    recommend._engine_cache = None
