"""Recommendation module for Cartwise.

This module contains the preference extractor, the collaborative and
content-based scoring strategies, the combiner, the stock-aware enricher,
the backfill engine and the public listing strategies.
"""

from cartwise.recommender.engine import RecommendationEngine

__all__ = ["RecommendationEngine"]
