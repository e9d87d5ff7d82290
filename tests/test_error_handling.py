"""Tests for error handling in the Cartwise engine and API.

Tests failing store reads, invalid requests and missing or broken catalog
data.
"""

import logging

import pandas as pd

from cartwise.recommender.engine import RecommendationEngine
from cartwise.store.memory import InMemoryStore
from tests.conftest import sample_catalog
from tests.factories import fixed_clock, run

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)


class FailingStore(InMemoryStore):
    """Sample shop whose named store reads raise."""

    def __init__(self, failing, **catalog):
        super().__init__(**catalog)
        for name in failing:
            setattr(self, name, self._fail(name))

    @staticmethod
    def _fail(name):
        async def fail(*args, **kwargs):
            raise RuntimeError(f"{name} is unavailable")

        return fail


def _failing_engine(*failing):
    store = FailingStore(failing, **sample_catalog())
    return RecommendationEngine(store, clock=fixed_clock)


def test_failing_preferences_yield_empty_result():
    engine = _failing_engine("find_feedback_by_customer")

    assert run(engine.get_personalized_recommendations("c1", limit=5)) == []


def test_failing_co_purchase_still_uses_other_strategies():
    engine = _failing_engine("find_orders_containing_product")

    recs = run(engine.get_personalized_recommendations("c1", limit=5))

    # Similar-taste candidates replace the co-purchase ones
    assert [(r.product_id, r.reason) for r in recs] == [
        ("p2", "Highly recommended"),
        ("p9", "Highly recommended"),
        ("p3", "Similar to products you loved"),
        ("p5", "Trending now"),
        ("p6", "New arrival"),
    ]


def test_failing_sales_aggregation_leaves_new_arrivals():
    engine = _failing_engine("aggregate_order_lines_by_product")

    assert run(engine.get_popular(5)) == []
    assert run(engine.get_trending(5)) == []
    assert [p.id for p in run(engine.get_new_arrivals(2))] == ["p6", "p8"]

    recs = run(engine.get_personalized_recommendations("c99", limit=3))
    assert [r.reason for r in recs] == ["New arrival"] * 3


def test_failing_enrichment_drops_everything():
    engine = _failing_engine("find_option_types_by_products")

    assert run(engine.get_personalized_recommendations("c1", limit=5)) == []
    assert run(engine.get_popular(5)) == []


def test_invalid_limit_returns_400(client):
    for limit in (0, 51, -3):
        response = client.get(f"/recommend/popular?limit={limit}")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Limit must be between 1 and 50",
            "details": {"limit": limit},
        }

    response = client.get("/recommend/personalized/c1?limit=100")
    assert response.status_code == 400


def test_malformed_product_id_returns_400(client):
    response = client.get("/recommend/similar/bad.id")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid product ID"


def test_unknown_product_returns_404(client):
    for product_id in ("missing", "p7"):
        response = client.get(f"/recommend/similar/{product_id}")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Product not found",
            "details": {"product_id": product_id},
        }


def test_missing_catalog_returns_503(client, reset_engine_cache, tmp_path):
    response = client.post(
        "/recommend/reload-data", params={"data_dir": str(tmp_path / "nowhere")}
    )

    assert response.status_code == 503
    assert "Catalog data not found" in response.json()["error"]


def test_missing_products_file_returns_503(client, reset_engine_cache, tmp_path):
    response = client.post("/recommend/reload-data", params={"data_dir": str(tmp_path)})

    assert response.status_code == 503
    assert "error" in response.json()["details"]


def test_broken_catalog_returns_500(client, reset_engine_cache, tmp_path):
    pd.DataFrame(
        [{"id": "p1", "name": "Runner", "price": "cheap", "stock": 1}]
    ).to_csv(tmp_path / "products.csv", index=False)

    response = client.post("/recommend/reload-data", params={"data_dir": str(tmp_path)})

    assert response.status_code == 500
    data = response.json()
    assert "Failed to load catalog data" in data["error"]
    assert data["details"]["error_type"] == "ValueError"
