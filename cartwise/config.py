"""Configuration for the recommendation engine and the API service.

Scoring weights are empirically chosen constants. They are kept here as
tunable parameters rather than fixed law; every field can be overridden from
the environment with the ``CARTWISE_`` prefix.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict

# Configure module logger
logger = logging.getLogger(__name__)

ENV_PREFIX = "CARTWISE_"
DEFAULT_DATA_DIR = "data"
DEFAULT_LOG_LEVEL = "INFO"


def _env(key: str, default: str = "") -> str:
    """Read env var and strip surrounding quotes/whitespace."""
    val = os.getenv(key, default)
    if val is None:
        return default
    return val.strip().strip('"').strip("'")


def _coerce(raw: str, target: Any) -> Any:
    if target is bool:
        return raw.lower() in ("1", "true", "yes", "y")
    return target(raw)


@dataclass
class EngineConfig:
    """Tunable parameters of the recommendation engine.

    Attributes:
        liked_rating_threshold: Minimum rating for a product to count as liked.
        max_candidates: Cap on candidates produced by each scoring strategy.
        collaborative_weight: Multiplier applied to collaborative scores
            before they are merged with content-based scores.
        co_purchase_frequency_weight: Weight of the order frequency ratio.
        co_purchase_quantity_weight: Weight of the log quantity bonus.
        similar_customer_count: Number of most similar shoppers kept.
        min_supporting_raters: Distinct similar shoppers needed per product.
        rating_span: Largest possible rating difference (5 - 1).
        content_base_score: Starting score for content-based candidates.
        liked_category_bonus: Bonus when a candidate shares a liked category.
        wishlist_category_bonus: Bonus when it shares a wishlisted category.
        max_price_bonus: Upper bound of the price closeness bonus.
        price_band_tolerance: Widening of the preference price band.
        similar_price_tolerance: Relative price margin around an anchor.
        popular_pool_multiplier: Order aggregation pool size per slot.
        popular_min_average_rating: Rated products at or below this average
            are dropped from Popular and Trending listings.
        trending_window_days: Sales window for Trending.
        catalog_page_multiplier: Catalog page size per slot when scanning
            for products that can be bought.
        backfill_pool_multiplier: Candidates fetched per missing slot.
        popular_backfill_score: Synthetic score of Popular backfill items.
        trending_backfill_score: Synthetic score of Trending backfill items.
        new_arrival_backfill_score: Synthetic score of New Arrival items.
    """

    liked_rating_threshold: int = 4
    max_candidates: int = 20
    collaborative_weight: float = 1.5
    co_purchase_frequency_weight: float = 10.0
    co_purchase_quantity_weight: float = 0.5
    similar_customer_count: int = 10
    min_supporting_raters: int = 2
    rating_span: float = 4.0
    content_base_score: float = 5.0
    liked_category_bonus: float = 3.0
    wishlist_category_bonus: float = 2.0
    max_price_bonus: float = 2.0
    price_band_tolerance: float = 0.3
    similar_price_tolerance: float = 0.3
    popular_pool_multiplier: int = 3
    popular_min_average_rating: float = 4.0
    trending_window_days: int = 30
    catalog_page_multiplier: int = 2
    backfill_pool_multiplier: int = 2
    popular_backfill_score: float = 3.0
    trending_backfill_score: float = 2.0
    new_arrival_backfill_score: float = 1.0

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "EngineConfig":
        """Build a config, overriding defaults from environment variables.

        ``CARTWISE_COLLABORATIVE_WEIGHT=2.0`` overrides
        ``collaborative_weight``, and so on for every field.

        Raises:
            ValueError: If an override cannot be converted to the field type.
        """
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            raw = _env(prefix + f.name.upper())
            if not raw:
                continue
            target = type(f.default)
            try:
                overrides[f.name] = _coerce(raw, target)
            except ValueError as e:
                raise ValueError(
                    f"Invalid value for {prefix + f.name.upper()}: {raw!r}"
                ) from e

        if overrides:
            logger.info(
                "Engine config overrides loaded from environment",
                extra={"overrides": sorted(overrides)},
            )
        return cls(**overrides)


@dataclass
class AppSettings:
    """Settings of the HTTP service."""

    data_dir: str = DEFAULT_DATA_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "AppSettings":
        return cls(
            data_dir=_env(prefix + "DATA_DIR", DEFAULT_DATA_DIR) or DEFAULT_DATA_DIR,
            log_level=_env(prefix + "LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
            or DEFAULT_LOG_LEVEL,
        )
