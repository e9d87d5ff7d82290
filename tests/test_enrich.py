"""Tests for cart filtering, availability filtering and enrichment."""

from collections import Counter

from cartwise.recommender.enrich import ProductEnricher, exclude_cart_items
from cartwise.recommender.types import RecommendedProduct
from cartwise.store.memory import InMemoryStore
from cartwise.store.models import Category
from tests.factories import make_options, make_product, run


class CountingStore(InMemoryStore):
    """Counts batched lookups issued during enrichment."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = Counter()

    async def find_products(self, *args, **kwargs):
        self.calls["find_products"] += 1
        return await super().find_products(*args, **kwargs)

    async def find_option_types_by_products(self, *args, **kwargs):
        self.calls["find_option_types_by_products"] += 1
        return await super().find_option_types_by_products(*args, **kwargs)

    async def find_option_values_by_option_types(self, *args, **kwargs):
        self.calls["find_option_values_by_option_types"] += 1
        return await super().find_option_values_by_option_types(*args, **kwargs)


def _store():
    sized, sized_values = make_options("sized", [0, 3])
    sold_out, sold_out_values = make_options("sold-out", [0, 0])
    return CountingStore(
        categories=[Category("cat-shoes", "Shoes")],
        products=[
            make_product("plain", stock=4),
            make_product("empty", stock=0),
            make_product("sized", stock=0),
            make_product("sold-out", stock=10),
            make_product("gone", stock=5, deleted=True),
        ],
        option_types=[sized, sold_out],
        option_values=sized_values + sold_out_values,
    )


def _recs(*product_ids):
    return [
        RecommendedProduct(pid, float(10 - i), "Popular choice")
        for i, pid in enumerate(product_ids)
    ]


def test_exclude_cart_items():
    recs = _recs("a", "b", "c")

    assert [r.product_id for r in exclude_cart_items(recs, ["b", "z"])] == ["a", "c"]
    assert exclude_cart_items(recs, []) == recs


def test_option_values_are_kept_verbatim_including_zero_stock():
    """A product with values at stock 0 and 3 stays, listing both values."""
    enriched = run(ProductEnricher(_store()).load(["sized"]))

    item = enriched["sized"]
    assert item.is_available
    assert len(item.option_types) == 1
    values = item.option_types[0].values
    assert [(v.value, v.stock, v.price) for v in values] == [
        ("V0", 0, 0.0),
        ("V1", 3, 1.0),
    ]


def test_availability_follows_variants_when_present():
    enriched = run(
        ProductEnricher(_store()).load(["plain", "empty", "sized", "sold-out", "gone"])
    )

    # sold-out has own stock but no variant in stock
    assert set(enriched) == {"plain", "sized"}
    assert enriched["plain"].option_types == []
    assert enriched["plain"].product.category == Category("cat-shoes", "Shoes")


def test_enrich_recommendations_preserves_rank_order():
    enricher = ProductEnricher(_store())
    recs = _recs("sized", "missing", "empty", "plain")

    enriched = run(enricher.enrich_recommendations(recs))

    assert [r.product_id for r in enriched] == ["sized", "plain"]
    assert [r.score for r in enriched] == [10.0, 7.0]
    assert enriched[1].product.id == "plain"


def test_enrichment_issues_one_query_per_collection():
    store = _store()
    enricher = ProductEnricher(store)

    run(enricher.enrich_recommendations(_recs("plain", "empty", "sized", "sold-out")))

    assert store.calls == Counter(
        {
            "find_products": 1,
            "find_option_types_by_products": 1,
            "find_option_values_by_option_types": 1,
        }
    )


def test_attach_options_keeps_input_order():
    store = _store()
    products = [
        run(store.get_product(pid)) for pid in ("sized", "sold-out", "plain", "empty")
    ]

    enriched = run(ProductEnricher(store).attach_options(products))

    assert [item.id for item in enriched] == ["sized", "plain"]


def test_empty_inputs_skip_the_store():
    store = _store()
    enricher = ProductEnricher(store)

    assert run(enricher.load([])) == {}
    assert run(enricher.attach_options([])) == []
    assert run(enricher.enrich_recommendations([])) == []
    assert sum(store.calls.values()) == 0
