"""Backfill of short personalized lists.

Tops a personalized list up with Popular, Trending and New Arrival products,
interleaved by quota.
"""

import asyncio
import logging
import math
from typing import Collection, List, Set, Tuple

from cartwise.config import EngineConfig
from cartwise.recommender.listings import ListingStrategies
from cartwise.recommender.types import (
    REASON_NEW_ARRIVAL,
    REASON_POPULAR,
    REASON_TRENDING,
    EnrichedProduct,
    RecommendedProduct,
)
from cartwise.recommender.utils import best_effort

# Configure module logger
logger = logging.getLogger(__name__)

NUM_BACKFILL_SOURCES = 3


class BackfillEngine:
    """Supplies non-personalized candidates when personalized ones run short."""

    def __init__(self, listings: ListingStrategies, config: EngineConfig):
        self.listings = listings
        self.config = config

    @best_effort("backfill")
    async def fill(
        self,
        needed: int,
        exclude_ids: Collection[str] = (),
    ) -> List[RecommendedProduct]:
        """Get up to ``needed`` backfill recommendations.

        Each source is asked for ``needed * 2`` products. Popular gets the
        first ``ceil(needed / 3)`` slots, then Trending, then New Arrivals.
        A second pass tops up from whatever the sources have left, so the
        result is only short when the sources are exhausted.

        Args:
            needed: Number of missing slots.
            exclude_ids: Cart contents and products already recommended.

        Returns:
            Backfill recommendations in slot order.
        """
        if needed <= 0:
            return []

        excluded = list(exclude_ids)
        pool_size = needed * self.config.backfill_pool_multiplier
        popular, trending, new_arrivals = await asyncio.gather(
            self.listings.popular(pool_size, excluded),
            self.listings.trending(pool_size, excluded),
            self.listings.new_arrivals(pool_size, excluded),
        )

        sources: List[Tuple[List[EnrichedProduct], str, float]] = [
            (popular, REASON_POPULAR, self.config.popular_backfill_score),
            (trending, REASON_TRENDING, self.config.trending_backfill_score),
            (new_arrivals, REASON_NEW_ARRIVAL, self.config.new_arrival_backfill_score),
        ]
        per_strategy = math.ceil(needed / NUM_BACKFILL_SOURCES)

        picked: List[RecommendedProduct] = []
        seen: Set[str] = set(excluded)
        for quota in (per_strategy, needed):
            for products, reason, score in sources:
                taken = 0
                for item in products:
                    if len(picked) >= needed or taken >= quota:
                        break
                    if item.id in seen:
                        continue
                    seen.add(item.id)
                    picked.append(
                        RecommendedProduct(
                            product_id=item.id,
                            score=score,
                            reason=reason,
                            product=item,
                        )
                    )
                    taken += 1

        logger.info(
            "Backfilled recommendations",
            extra={
                "needed": needed,
                "num_backfilled": len(picked),
                "num_popular": len(popular),
                "num_trending": len(trending),
                "num_new_arrivals": len(new_arrivals),
            },
        )
        return picked
