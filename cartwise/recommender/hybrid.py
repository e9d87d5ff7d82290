"""Hybrid recommendation module.

Combines collaborative filtering and content-based filtering candidates.
"""

import logging
from typing import Dict, List

from cartwise.config import EngineConfig
from cartwise.recommender.types import REASON_HIGHLY_RECOMMENDED, RecommendedProduct

# Configure module logger
logger = logging.getLogger(__name__)


def combine_recommendations(
    collaborative: List[RecommendedProduct],
    content_based: List[RecommendedProduct],
    collaborative_weight: float = EngineConfig.collaborative_weight,
) -> List[RecommendedProduct]:
    """Merge both strategies' candidates into one ranked list.

    Collaborative scores are multiplied by ``collaborative_weight``. A
    product found by both strategies gets the sum of its scores and the
    reason "Highly recommended". Equal scores keep discovery order.

    Args:
        collaborative: Collaborative filtering candidates.
        content_based: Content-based candidates.
        collaborative_weight: Boost applied to collaborative scores.

    Returns:
        Candidates sorted by descending combined score.

    Example:
        >>> combined = combine_recommendations(cf_recs, content_recs)
        >>> combined[0].score >= combined[-1].score
        True
    """
    combined: Dict[str, RecommendedProduct] = {}

    for rec in collaborative:
        combined[rec.product_id] = RecommendedProduct(
            product_id=rec.product_id,
            score=rec.score * collaborative_weight,
            reason=rec.reason,
        )

    for rec in content_based:
        existing = combined.get(rec.product_id)
        if existing is None:
            combined[rec.product_id] = RecommendedProduct(
                product_id=rec.product_id,
                score=rec.score,
                reason=rec.reason,
            )
        else:
            existing.score += rec.score
            existing.reason = REASON_HIGHLY_RECOMMENDED

    ranked = sorted(combined.values(), key=lambda r: r.score, reverse=True)

    logger.debug(
        "Combined recommendations",
        extra={
            "num_collaborative": len(collaborative),
            "num_content_based": len(content_based),
            "num_combined": len(ranked),
        },
    )
    return ranked
