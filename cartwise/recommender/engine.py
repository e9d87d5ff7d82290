"""Module for getting recommendations.

`RecommendationEngine` wires the strategies together over an injected store
and exposes the personalized and public entry points.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from cartwise.config import EngineConfig
from cartwise.recommender.backfill import BackfillEngine
from cartwise.recommender.collaborative import CollaborativeFilter
from cartwise.recommender.content import ContentBasedFilter
from cartwise.recommender.enrich import ProductEnricher, exclude_cart_items
from cartwise.recommender.hybrid import combine_recommendations
from cartwise.recommender.listings import ListingStrategies, utc_now
from cartwise.recommender.preferences import PreferenceExtractor
from cartwise.recommender.types import EnrichedProduct, RecommendedProduct
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class RecommendationEngine:
    """Hybrid recommendation engine.

    Stateless across requests; one instance can serve any number of
    concurrent calls.
    """

    def __init__(
        self,
        store: RecommendationStore,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.enricher = ProductEnricher(store)
        self.preferences = PreferenceExtractor(store, self.config)
        self.collaborative = CollaborativeFilter(store, self.config)
        self.content_based = ContentBasedFilter(store, self.config)
        self.listings = ListingStrategies(store, self.enricher, self.config, clock)
        self.backfill = BackfillEngine(self.listings, self.config)

    async def get_personalized_recommendations(
        self,
        customer_id: str,
        limit: int = DEFAULT_LIMIT,
    ) -> List[RecommendedProduct]:
        """Get ranked recommendations for a shopper.

        Collaborative and content-based candidates are combined, stripped of
        cart items and unavailable products, then topped up with backfill
        when fewer than ``limit`` remain. A shopper without ratings or
        wishlist gets backfill only, even with a filled cart. Never raises:
        any unexpected error yields an empty list.

        Args:
            customer_id: Shopper to recommend for.
            limit: Maximum number of recommendations.

        Returns:
            Personalized recommendations followed by backfill ones.
        """
        start_time = time.time()

        logger.info(
            "Starting recommendation generation",
            extra={"customer_id": customer_id, "limit": limit},
        )

        try:
            preferences, cart = await asyncio.gather(
                self.preferences.extract(customer_id),
                self.store.find_cart_by_customer(customer_id),
            )

            if preferences.has_history:
                collaborative, content_based = await asyncio.gather(
                    self.collaborative.recommend(customer_id, preferences, cart),
                    self.content_based.recommend(preferences),
                )
            else:
                # No ratings and no wishlist: straight to popularity
                logger.info(
                    "No shopper history, serving backfill only",
                    extra={"customer_id": customer_id},
                )
                collaborative, content_based = [], []
            combined = combine_recommendations(
                collaborative,
                content_based,
                collaborative_weight=self.config.collaborative_weight,
            )

            cart_ids = cart.product_ids if cart else []
            candidates = exclude_cart_items(combined, cart_ids)
            recommendations = (await self.enricher.enrich_recommendations(candidates))[
                :limit
            ]

            num_personalized = len(recommendations)
            if num_personalized < limit:
                chosen = [rec.product_id for rec in recommendations]
                recommendations.extend(
                    await self.backfill.fill(
                        limit - num_personalized,
                        exclude_ids=list(cart_ids) + chosen,
                    )
                )

            logger.info(
                "Recommendations generated",
                extra={
                    "customer_id": customer_id,
                    "num_collaborative": len(collaborative),
                    "num_content_based": len(content_based),
                    "num_personalized": num_personalized,
                    "num_recommendations": len(recommendations),
                    "total_time_ms": round((time.time() - start_time) * 1000, 2),
                },
            )
            return recommendations

        except Exception as e:
            logger.error(
                "Recommendation generation failed",
                extra={
                    "customer_id": customer_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "total_time_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            return []

    async def get_popular(self, limit: int = DEFAULT_LIMIT) -> List[EnrichedProduct]:
        return await self.listings.popular(limit)

    async def get_trending(self, limit: int = DEFAULT_LIMIT) -> List[EnrichedProduct]:
        return await self.listings.trending(limit)

    async def get_new_arrivals(self, limit: int = DEFAULT_LIMIT) -> List[EnrichedProduct]:
        return await self.listings.new_arrivals(limit)

    async def get_similar(
        self,
        product_id: str,
        limit: int = DEFAULT_LIMIT,
    ) -> List[EnrichedProduct]:
        """Get products similar to an anchor product.

        Raises:
            ProductNotFoundError: If the anchor is missing or soft-deleted.
        """
        return await self.listings.similar(product_id, limit)
