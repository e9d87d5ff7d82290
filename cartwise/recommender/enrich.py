"""Cart filtering, stock filtering and product enrichment.

Candidates are hydrated with their products and option variants using one
batched query per collection, never one query per candidate.
"""

import asyncio
import logging
from typing import Collection, Dict, List, Sequence

from cartwise.recommender.types import (
    EnrichedProduct,
    OptionTypePayload,
    OptionValuePayload,
    RecommendedProduct,
)
from cartwise.recommender.utils import group_by_key
from cartwise.store.models import OptionType, OptionValue, Product, ProductFilter
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)


def exclude_cart_items(
    recommendations: List[RecommendedProduct],
    cart_product_ids: Collection[str],
) -> List[RecommendedProduct]:
    """Drop every candidate already sitting in the shopper's cart."""
    in_cart = set(cart_product_ids)
    return [rec for rec in recommendations if rec.product_id not in in_cart]


def _option_payload(
    option_types: List[OptionType],
    values_by_type: Dict[str, List[OptionValue]],
) -> List[OptionTypePayload]:
    return [
        OptionTypePayload(
            id=option_type.id,
            name=option_type.name,
            values=[
                OptionValuePayload(
                    id=value.id,
                    value=value.value,
                    image=value.image,
                    price=value.price,
                    stock=value.stock,
                )
                for value in values_by_type.get(option_type.id, [])
            ],
        )
        for option_type in option_types
    ]


class ProductEnricher:
    """Hydrates candidates and drops the ones that cannot be bought."""

    def __init__(self, store: RecommendationStore):
        self.store = store

    async def _load_option_values(
        self, option_types: List[OptionType]
    ) -> List[OptionValue]:
        if not option_types:
            return []
        return await self.store.find_option_values_by_option_types(
            [t.id for t in option_types]
        )

    def _assemble(
        self,
        products: Sequence[Product],
        option_types: List[OptionType],
        option_values: List[OptionValue],
    ) -> List[EnrichedProduct]:
        types_by_product = group_by_key(option_types, lambda t: t.product_id)
        values_by_type = group_by_key(option_values, lambda v: v.option_type_id)

        enriched = []
        for product in products:
            item = EnrichedProduct(
                product=product,
                option_types=_option_payload(
                    types_by_product.get(product.id, []), values_by_type
                ),
            )
            if item.is_available:
                enriched.append(item)
        return enriched

    async def attach_options(self, products: Sequence[Product]) -> List[EnrichedProduct]:
        """Hydrate already-loaded products and keep the available ones.

        Input order is preserved.
        """
        if not products:
            return []
        option_types = await self.store.find_option_types_by_products(
            [p.id for p in products]
        )
        option_values = await self._load_option_values(option_types)
        return self._assemble(products, option_types, option_values)

    async def load(self, product_ids: Sequence[str]) -> Dict[str, EnrichedProduct]:
        """Batch-load products by id, hydrated and availability-filtered.

        Products and option types are fetched concurrently; option values
        follow once the option type ids are known. Soft-deleted and
        unavailable products are missing from the result.

        Args:
            product_ids: Candidate product ids.

        Returns:
            Dictionary mapping product id to its enriched product.
        """
        if not product_ids:
            return {}

        ids = list(dict.fromkeys(product_ids))
        products, option_types = await asyncio.gather(
            self.store.find_products(ProductFilter(ids_in=ids), populate_category=True),
            self.store.find_option_types_by_products(ids),
        )
        option_values = await self._load_option_values(option_types)
        enriched = self._assemble(products, option_types, option_values)

        logger.debug(
            "Enriched products",
            extra={
                "num_requested": len(ids),
                "num_found": len(products),
                "num_available": len(enriched),
            },
        )
        return {item.id: item for item in enriched}

    async def enrich_recommendations(
        self,
        recommendations: List[RecommendedProduct],
    ) -> List[RecommendedProduct]:
        """Attach products to candidates, dropping unavailable ones.

        Ranking order is preserved.
        """
        enriched = await self.load([rec.product_id for rec in recommendations])
        return [
            RecommendedProduct(
                product_id=rec.product_id,
                score=rec.score,
                reason=rec.reason,
                product=enriched[rec.product_id],
            )
            for rec in recommendations
            if rec.product_id in enriched
        ]
