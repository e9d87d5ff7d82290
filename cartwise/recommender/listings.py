"""Public listing strategies: Popular, Trending, New Arrivals and Similar.

These need no shopper and return plain product lists without scores or
reasons. The backfill engine reuses the first three.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Collection, List, Optional

from cartwise.config import EngineConfig
from cartwise.exceptions import ProductNotFoundError
from cartwise.recommender.enrich import ProductEnricher
from cartwise.recommender.types import EnrichedProduct
from cartwise.recommender.utils import best_effort
from cartwise.store.models import COUNTED_ORDER_STATUSES, ProductFilter, ProductSort
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ListingStrategies:
    """Non-personalized product listings."""

    def __init__(
        self,
        store: RecommendationStore,
        enricher: ProductEnricher,
        config: EngineConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.enricher = enricher
        self.config = config
        self.clock = clock

    @best_effort("popular")
    async def popular(
        self,
        limit: int,
        exclude_ids: Collection[str] = (),
    ) -> List[EnrichedProduct]:
        """Best sellers over all counted orders."""
        return await self._best_sellers(limit, exclude_ids, since=None)

    @best_effort("trending")
    async def trending(
        self,
        limit: int,
        exclude_ids: Collection[str] = (),
    ) -> List[EnrichedProduct]:
        """Best sellers over the recent sales window."""
        since = self.clock() - timedelta(days=self.config.trending_window_days)
        return await self._best_sellers(limit, exclude_ids, since=since)

    async def _best_sellers(
        self,
        limit: int,
        exclude_ids: Collection[str],
        since: Optional[datetime],
    ) -> List[EnrichedProduct]:
        ranked = await self.store.aggregate_order_lines_by_product(
            COUNTED_ORDER_STATUSES,
            since=since,
            exclude_product_ids=exclude_ids,
            limit=limit * self.config.popular_pool_multiplier,
        )
        if not ranked:
            logger.info(
                "No sales found, falling back to catalog products",
                extra={"limit": limit, "since": since.isoformat() if since else None},
            )
            return await self._any_products(limit, exclude_ids)

        product_ids = [product_id for product_id, _ in ranked]
        enriched, ratings = await asyncio.gather(
            self.enricher.load(product_ids),
            self.store.aggregate_average_rating_by_product(product_ids),
        )
        average_rating = dict(ratings)

        results = []
        for product_id in product_ids:
            item = enriched.get(product_id)
            if item is None:
                continue
            rating = average_rating.get(product_id)
            # Unrated products stay eligible
            if rating is not None and rating <= self.config.popular_min_average_rating:
                continue
            results.append(item)
            if len(results) >= limit:
                break
        return results

    async def _any_products(
        self,
        limit: int,
        exclude_ids: Collection[str],
    ) -> List[EnrichedProduct]:
        return await self._collect_available(
            ProductFilter(ids_not_in=list(exclude_ids)), limit
        )

    async def _collect_available(
        self,
        product_filter: ProductFilter,
        limit: int,
        sort: Optional[ProductSort] = None,
    ) -> List[EnrichedProduct]:
        """Page through matching products until ``limit`` can be bought.

        Each page re-queries with the ids already seen excluded, so sold-out
        products never hide available ones further down the catalog. Stops
        early once a page comes back short.
        """
        page_size = max(limit * self.config.catalog_page_multiplier, 1)
        seen = list(product_filter.ids_not_in)
        results: List[EnrichedProduct] = []
        num_pages = 0

        while len(results) < limit:
            products = await self.store.find_products(
                replace(product_filter, ids_not_in=seen),
                sort=sort,
                limit=page_size,
                populate_category=True,
            )
            num_pages += 1
            results.extend(await self.enricher.attach_options(products))
            if len(products) < page_size:
                break
            seen.extend(p.id for p in products)

        if num_pages > 1:
            logger.debug(
                "Scanned several catalog pages",
                extra={"limit": limit, "num_pages": num_pages, "found": len(results)},
            )
        return results[:limit]

    @best_effort("new_arrivals")
    async def new_arrivals(
        self,
        limit: int,
        exclude_ids: Collection[str] = (),
    ) -> List[EnrichedProduct]:
        """Newest catalog products that can be bought."""
        return await self._collect_available(
            ProductFilter(ids_not_in=list(exclude_ids)),
            limit,
            sort=ProductSort.NEWEST,
        )

    async def similar(self, product_id: str, limit: int) -> List[EnrichedProduct]:
        """Products in the anchor's category priced within 30% of it.

        Availability is judged on effective stock, so a product whose own
        stock is 0 still qualifies through an in-stock option value.

        Raises:
            ProductNotFoundError: If the anchor is missing or soft-deleted.
        """
        anchor = await self.store.get_product(product_id)
        if anchor is None or anchor.is_deleted:
            raise ProductNotFoundError(product_id)

        category_id = anchor.category_id
        if category_id is None:
            logger.warning(
                "Anchor product has no category",
                extra={"product_id": product_id},
            )
            return []

        margin = anchor.price * self.config.similar_price_tolerance
        return await self._collect_available(
            ProductFilter(
                ids_not_in=[anchor.id],
                category_ids_in=[category_id],
                min_price=anchor.price - margin,
                max_price=anchor.price + margin,
            ),
            limit,
        )
