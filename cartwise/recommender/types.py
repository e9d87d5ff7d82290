"""Engine-internal types for scored candidates and shopper preferences.

All of these live for a single recommendation request and own no
external resources.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from cartwise.store.models import Product

# Reasons attached to recommendations. Advisory only, never used for ranking.
REASON_FREQUENTLY_BOUGHT_TOGETHER = "Frequently bought together"
REASON_SIMILAR_TASTE = "Users with similar taste liked this"
REASON_FAVORITES_AND_WISHLIST = "Matches your favorites and wishlist"
REASON_SIMILAR_TO_LOVED = "Similar to products you loved"
REASON_BASED_ON_WISHLIST = "Based on your wishlist"
REASON_BASED_ON_INTERESTS = "Based on your interests"
REASON_HIGHLY_RECOMMENDED = "Highly recommended"
REASON_POPULAR = "Popular choice"
REASON_TRENDING = "Trending now"
REASON_NEW_ARRIVAL = "New arrival"


@dataclass
class OptionValuePayload:
    id: str
    value: str
    image: Optional[str]
    price: float
    stock: int


@dataclass
class OptionTypePayload:
    id: str
    name: str
    values: List[OptionValuePayload] = field(default_factory=list)


@dataclass
class EnrichedProduct:
    """A product hydrated with its option variants.

    Availability follows the variants when the product has any option type,
    and the product's own stock otherwise.
    """

    product: Product
    option_types: List[OptionTypePayload] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.product.id

    @property
    def has_options(self) -> bool:
        return bool(self.option_types)

    @property
    def is_available(self) -> bool:
        if self.has_options:
            return any(
                value.stock > 0
                for option_type in self.option_types
                for value in option_type.values
            )
        return self.product.stock > 0


@dataclass
class RecommendedProduct:
    """A scored candidate.

    Scores are strategy-relative until combined; higher is better.
    """

    product_id: str
    score: float
    reason: str
    product: Optional[EnrichedProduct] = None


@dataclass
class UserPreferences:
    """Snapshot of a shopper's tastes derived from feedback and wishlist."""

    customer_id: str
    liked_product_ids: List[str] = field(default_factory=list)
    wishlist_product_ids: List[str] = field(default_factory=list)
    liked_category_ids: Set[str] = field(default_factory=set)
    wishlist_category_ids: Set[str] = field(default_factory=set)
    avg_rating: float = 0.0
    price_min: float = 0.0
    price_max: float = math.inf
    # Every rating the shopper left, keyed by product id
    product_ratings: Dict[str, int] = field(default_factory=dict)
    has_feedback: bool = False
    has_wishlist: bool = False

    @property
    def has_history(self) -> bool:
        return self.has_feedback or self.has_wishlist

    @property
    def has_product_signal(self) -> bool:
        return bool(self.liked_product_ids or self.wishlist_product_ids)

    @property
    def has_price_range(self) -> bool:
        return math.isfinite(self.price_max)

    @property
    def category_ids(self) -> Set[str]:
        return self.liked_category_ids | self.wishlist_category_ids

    @property
    def price_midpoint(self) -> float:
        return (self.price_min + self.price_max) / 2
