"""Shopper preference extraction.

Builds a `UserPreferences` snapshot from a shopper's ratings and wishlist.
"""

import asyncio
import logging
import math
from typing import List, Set

import numpy as np

from cartwise.config import EngineConfig
from cartwise.recommender.types import UserPreferences
from cartwise.store.models import Product
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)


def _category_ids(products: List[Product]) -> Set[str]:
    return {p.category_id for p in products if p.category_id is not None}


class PreferenceExtractor:
    """Derives taste signals from feedback and wishlist history."""

    def __init__(self, store: RecommendationStore, config: EngineConfig):
        self.store = store
        self.config = config

    async def extract(self, customer_id: str) -> UserPreferences:
        """Build the preference snapshot of a shopper.

        A shopper without any history gets a neutral snapshot: no liked or
        wishlisted products, average rating 0 and an unbounded price range.

        Args:
            customer_id: Shopper to profile.

        Returns:
            Preference snapshot for this request.
        """
        feedback, wishlist = await asyncio.gather(
            self.store.find_feedback_by_customer(customer_id, populate_products=True),
            self.store.find_wishlist_by_customer(customer_id, populate_products=True),
        )

        liked = [f for f in feedback if f.rating >= self.config.liked_rating_threshold]
        liked_products = [f.product for f in liked if f.product is not None]
        wishlist_ids = list(wishlist.product_ids) if wishlist else []
        wishlist_products = list(wishlist.products or []) if wishlist else []

        prices = [p.price for p in liked_products + wishlist_products]
        price_min = float(np.min(prices)) if prices else 0.0
        price_max = float(np.max(prices)) if prices else math.inf
        avg_rating = float(np.mean([f.rating for f in feedback])) if feedback else 0.0

        preferences = UserPreferences(
            customer_id=customer_id,
            liked_product_ids=[f.product_id for f in liked],
            wishlist_product_ids=wishlist_ids,
            liked_category_ids=_category_ids(liked_products),
            wishlist_category_ids=_category_ids(wishlist_products),
            avg_rating=avg_rating,
            price_min=price_min,
            price_max=price_max,
            product_ratings={f.product_id: f.rating for f in feedback},
            has_feedback=bool(feedback),
            has_wishlist=bool(wishlist_ids),
        )

        logger.debug(
            "Extracted user preferences",
            extra={
                "customer_id": customer_id,
                "num_liked": len(preferences.liked_product_ids),
                "num_wishlisted": len(preferences.wishlist_product_ids),
                "num_categories": len(preferences.category_ids),
            },
        )
        return preferences
