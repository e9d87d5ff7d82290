"""Content-based filtering.

Scores catalog products by category and price affinity to the products a
shopper liked or wishlisted.
"""

import logging
from typing import List

import numpy as np

from cartwise.config import EngineConfig
from cartwise.recommender.types import (
    REASON_BASED_ON_INTERESTS,
    REASON_BASED_ON_WISHLIST,
    REASON_FAVORITES_AND_WISHLIST,
    REASON_SIMILAR_TO_LOVED,
    RecommendedProduct,
    UserPreferences,
)
from cartwise.recommender.utils import best_effort
from cartwise.store.models import ProductFilter
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)


def _reason(liked_category: bool, wishlist_category: bool) -> str:
    if liked_category and wishlist_category:
        return REASON_FAVORITES_AND_WISHLIST
    if liked_category:
        return REASON_SIMILAR_TO_LOVED
    if wishlist_category:
        return REASON_BASED_ON_WISHLIST
    return REASON_BASED_ON_INTERESTS


class ContentBasedFilter:
    """Scores products similar to what the shopper already likes."""

    def __init__(self, store: RecommendationStore, config: EngineConfig):
        self.store = store
        self.config = config

    def build_filter(self, preferences: UserPreferences) -> ProductFilter:
        """Build the candidate query for a preference snapshot.

        Candidates exclude liked and wishlisted products, stay within the
        preferred categories and within the preferred price range widened
        by 30% of its span on both ends.
        """
        product_filter = ProductFilter(
            ids_not_in=preferences.liked_product_ids + preferences.wishlist_product_ids,
        )
        if preferences.category_ids:
            product_filter.category_ids_in = sorted(preferences.category_ids)

        if preferences.has_price_range:
            margin = (
                preferences.price_max - preferences.price_min
            ) * self.config.price_band_tolerance
            product_filter.min_price = max(0.0, preferences.price_min - margin)
            product_filter.max_price = preferences.price_max + margin

        return product_filter

    @best_effort("content_based")
    async def recommend(self, preferences: UserPreferences) -> List[RecommendedProduct]:
        """Get content-based candidates for a preference snapshot.

        Score = 5
                + 3 for a liked category, else + 2 for a wishlisted category
                + max(0, 2 - |price - midpoint| / midpoint)
        """
        if not preferences.has_product_signal:
            return []

        products = await self.store.find_products(
            self.build_filter(preferences),
            limit=self.config.max_candidates,
        )
        if not products:
            return []

        prices = np.array([p.price for p in products], dtype=float)
        midpoint = preferences.price_midpoint
        if preferences.has_price_range and midpoint > 0:
            price_bonus = np.maximum(
                0.0, self.config.max_price_bonus - np.abs(prices - midpoint) / midpoint
            )
        else:
            price_bonus = np.zeros(len(products))

        recommendations = []
        for product, bonus in zip(products, price_bonus):
            in_liked = product.category_id in preferences.liked_category_ids
            in_wishlist = product.category_id in preferences.wishlist_category_ids

            score = self.config.content_base_score
            if in_liked:
                score += self.config.liked_category_bonus
            elif in_wishlist:
                score += self.config.wishlist_category_bonus
            score += float(bonus)

            recommendations.append(
                RecommendedProduct(
                    product_id=product.id,
                    score=score,
                    reason=_reason(in_liked, in_wishlist),
                )
            )

        logger.debug(
            "Computed content-based candidates",
            extra={
                "customer_id": preferences.customer_id,
                "num_candidates": len(recommendations),
            },
        )
        return recommendations
