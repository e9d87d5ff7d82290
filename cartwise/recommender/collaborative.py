"""Collaborative filtering strategies.

Two sub-strategies are tried in order: products frequently bought together
with the shopper's latest cart item, then products liked by shoppers with
similar rating behaviour.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from cartwise.config import EngineConfig
from cartwise.recommender.types import (
    REASON_FREQUENTLY_BOUGHT_TOGETHER,
    REASON_SIMILAR_TASTE,
    RecommendedProduct,
    UserPreferences,
)
from cartwise.recommender.utils import best_effort
from cartwise.store.models import COUNTED_ORDER_STATUSES, Cart
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)


class CollaborativeFilter:
    """Scores products from other shoppers' orders and ratings."""

    def __init__(self, store: RecommendationStore, config: EngineConfig):
        self.store = store
        self.config = config

    @best_effort("collaborative")
    async def recommend(
        self,
        customer_id: str,
        preferences: UserPreferences,
        cart: Optional[Cart] = None,
    ) -> List[RecommendedProduct]:
        """Get collaborative candidates for a shopper.

        Uses cart co-purchase mining when the cart has items and it yields
        candidates, and falls back to feedback similarity otherwise. A
        shopper with neither signal gets no candidates.
        """
        if cart is not None and cart.items:
            recommendations = await self.cart_co_purchase(customer_id, cart)
            if recommendations:
                return recommendations

        if not preferences.has_feedback:
            logger.debug(
                "No feedback history, skipping similarity",
                extra={"customer_id": customer_id},
            )
            return []

        return await self.feedback_similarity(customer_id, preferences.product_ratings)

    @best_effort("cart_co_purchase")
    async def cart_co_purchase(
        self,
        customer_id: str,
        cart: Cart,
    ) -> List[RecommendedProduct]:
        """Find products bought together with the latest cart item.

        Score = (order frequency / matching orders) * 10
                + ln(total quantity + 1) * 0.5
        """
        anchor = cart.latest_item
        if anchor is None:
            return []

        orders = await self.store.find_orders_containing_product(
            anchor.product_id,
            exclude_customer_id=customer_id,
            statuses=COUNTED_ORDER_STATUSES,
        )
        if not orders:
            return []

        excluded = set(cart.product_ids) | {anchor.product_id}
        lines = pd.DataFrame(
            [
                {
                    "order_id": order.id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                }
                for order in orders
                for line in order.lines
                if line.product_id not in excluded
            ],
            columns=["order_id", "product_id", "quantity"],
        )
        if lines.empty:
            return []

        table = lines.groupby("product_id").agg(
            order_frequency=("order_id", "nunique"),
            total_quantity=("quantity", "sum"),
        )
        frequency = table["order_frequency"] / len(orders)
        quantity_bonus = np.log(table["total_quantity"] + 1)
        table["score"] = (
            frequency * self.config.co_purchase_frequency_weight
            + quantity_bonus * self.config.co_purchase_quantity_weight
        )
        table = table.sort_values("score", ascending=False, kind="stable").head(
            self.config.max_candidates
        )

        logger.debug(
            "Computed co-purchase candidates",
            extra={
                "customer_id": customer_id,
                "anchor_product_id": anchor.product_id,
                "matching_orders": len(orders),
                "num_candidates": len(table),
            },
        )

        return [
            RecommendedProduct(
                product_id=str(row.Index),
                score=float(row.score),
                reason=REASON_FREQUENTLY_BOUGHT_TOGETHER,
            )
            for row in table.itertuples()
        ]

    @best_effort("feedback_similarity")
    async def feedback_similarity(
        self,
        customer_id: str,
        own_ratings: Dict[str, int],
    ) -> List[RecommendedProduct]:
        """Recommend products liked by shoppers who rate like this one.

        Similarity on a shared product is ``1 - |rating difference| / 4``,
        summed over every shared product. The most similar shoppers' liked
        products are grouped, and each needs support from at least two of
        them. Score = average rating * (1 + ln(support)).

        ``own_ratings`` is the shopper's rating per product, as already loaded
        into their preference snapshot.
        """
        if not own_ratings:
            return []

        others = await self.store.find_feedback_by_products(
            list(own_ratings), exclude_customer_id=customer_id
        )
        if not others:
            return []

        shared = pd.DataFrame(
            [(f.customer_id, f.product_id, f.rating) for f in others],
            columns=["customer_id", "product_id", "rating"],
        )
        shared["own_rating"] = shared["product_id"].map(own_ratings)
        shared["similarity"] = (
            1 - (shared["rating"] - shared["own_rating"]).abs() / self.config.rating_span
        )
        similar_customers = (
            shared.groupby("customer_id")["similarity"]
            .sum()
            .sort_values(ascending=False, kind="stable")
            .head(self.config.similar_customer_count)
        )

        liked = await self.store.find_feedback_by_customers(
            list(similar_customers.index),
            min_rating=self.config.liked_rating_threshold,
            exclude_product_ids=list(own_ratings),
        )
        if not liked:
            return []

        ratings = pd.DataFrame(
            [(f.customer_id, f.product_id, f.rating) for f in liked],
            columns=["customer_id", "product_id", "rating"],
        )
        grouped = ratings.groupby("product_id").agg(
            avg_rating=("rating", "mean"),
            support=("customer_id", "nunique"),
        )
        grouped = grouped[grouped["support"] >= self.config.min_supporting_raters].copy()
        if grouped.empty:
            return []

        grouped["score"] = grouped["avg_rating"] * (1 + np.log(grouped["support"]))
        grouped = grouped.sort_values("score", ascending=False, kind="stable").head(
            self.config.max_candidates
        )

        logger.debug(
            "Computed similar-taste candidates",
            extra={
                "customer_id": customer_id,
                "num_similar_customers": len(similar_customers),
                "num_candidates": len(grouped),
            },
        )

        return [
            RecommendedProduct(
                product_id=str(row.Index),
                score=float(row.score),
                reason=REASON_SIMILAR_TASTE,
            )
            for row in grouped.itertuples()
        ]
