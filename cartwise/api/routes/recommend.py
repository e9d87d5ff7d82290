"""Recommendation endpoints for the Cartwise API.

This module provides the personalized recommendation endpoint and the
public Popular, Trending, New Arrivals and Similar listings.
"""

import logging
import re
import time
from pathlib import Path
from typing import Dict, Optional

from fastapi import APIRouter, Depends

from cartwise.api.metrics import metrics_service
from cartwise.api.schemas import (
    ProductListResponse,
    RecommendationResponse,
    build_product_list_response,
    build_recommendation_response,
)
from cartwise.config import AppSettings, EngineConfig
from cartwise.exceptions import (
    MAX_LIMIT,
    MIN_LIMIT,
    DataLoadError,
    DataNotFoundError,
    InvalidLimitError,
    InvalidProductIdError,
)
from cartwise.recommender.engine import DEFAULT_LIMIT, RecommendationEngine
from cartwise.store.memory import load_store_from_csv_dir

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)

PRODUCT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Cache for the engine built over the loaded catalog
_engine_cache: Optional[RecommendationEngine] = None


def load_engine_if_needed(data_dir: Optional[str] = None) -> RecommendationEngine:
    """Load the catalog and build the engine if not already done.

    Uses a module-level cache to avoid reloading the catalog on every request.

    Args:
        data_dir: Directory containing catalog CSV exports. Defaults to
            ``CARTWISE_DATA_DIR`` or "data".

    Returns:
        Engine serving the loaded catalog.

    Raises:
        DataNotFoundError: If the catalog directory or products file is missing.
        DataLoadError: If the catalog files cannot be parsed.
    """
    global _engine_cache

    if _engine_cache is not None:
        logger.debug("Using cached engine")
        return _engine_cache

    data_dir = data_dir or AppSettings.from_env().data_dir
    if not Path(data_dir).is_dir():
        logger.error(f"Catalog data not found in {data_dir}")
        raise DataNotFoundError(data_dir)

    try:
        logger.info(f"Loading catalog from {data_dir}")
        store = load_store_from_csv_dir(data_dir)
    except FileNotFoundError as e:
        logger.error(f"Catalog data incomplete: {e}")
        raise DataNotFoundError(data_dir, details={"error": str(e)}) from e
    except Exception as e:
        logger.error(f"Failed to load catalog: {e}", exc_info=True)
        raise DataLoadError(data_dir, e) from e

    _engine_cache = RecommendationEngine(store, EngineConfig.from_env())
    logger.info("Engine ready")
    return _engine_cache


def get_engine() -> RecommendationEngine:
    """FastAPI dependency returning the shared engine."""
    return load_engine_if_needed()


def validate_limit(limit: int) -> int:
    if limit < MIN_LIMIT or limit > MAX_LIMIT:
        raise InvalidLimitError(limit)
    return limit


def validate_product_id(product_id: str) -> str:
    if not PRODUCT_ID_PATTERN.match(product_id):
        raise InvalidProductIdError(product_id)
    return product_id


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


@router.get("/personalized/{customer_id}", response_model=RecommendationResponse)
async def get_personalized_recommendations(
    customer_id: str,
    limit: int = DEFAULT_LIMIT,
    engine: RecommendationEngine = Depends(get_engine),
) -> RecommendationResponse:
    """Get product recommendations for a shopper.

    Combines collaborative and content-based suggestions, topped up with
    popular, trending and new products when they run short.

    Example:
        GET /recommend/personalized/c42?limit=5
        Returns up to 5 recommendations for shopper c42.
    """
    validate_limit(limit)
    start_time = time.time()

    recommendations = await engine.get_personalized_recommendations(customer_id, limit)

    metrics_service.record_request(
        "personalized", _elapsed_ms(start_time), len(recommendations)
    )
    return build_recommendation_response(recommendations, "personalized")


@router.get("/popular", response_model=ProductListResponse)
async def get_popular_products(
    limit: int = DEFAULT_LIMIT,
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    """Get best-selling products."""
    validate_limit(limit)
    start_time = time.time()
    products = await engine.get_popular(limit)
    metrics_service.record_request("popular", _elapsed_ms(start_time), len(products))
    return build_product_list_response(products)


@router.get("/trending", response_model=ProductListResponse)
async def get_trending_products(
    limit: int = DEFAULT_LIMIT,
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    """Get products selling best over the last 30 days."""
    validate_limit(limit)
    start_time = time.time()
    products = await engine.get_trending(limit)
    metrics_service.record_request("trending", _elapsed_ms(start_time), len(products))
    return build_product_list_response(products)


@router.get("/new-arrivals", response_model=ProductListResponse)
async def get_new_arrivals(
    limit: int = DEFAULT_LIMIT,
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    validate_limit(limit)
    start_time = time.time()
    products = await engine.get_new_arrivals(limit)
    metrics_service.record_request("new_arrivals", _elapsed_ms(start_time), len(products))
    return build_product_list_response(products)


@router.get("/similar/{product_id}", response_model=ProductListResponse)
async def get_similar_products(
    product_id: str,
    limit: int = DEFAULT_LIMIT,
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    """Get products in the same category at a similar price.

    Raises:
        InvalidProductIdError: If the product id is malformed (400).
        ProductNotFoundError: If the product does not exist (404).
    """
    validate_product_id(product_id)
    validate_limit(limit)
    start_time = time.time()
    products = await engine.get_similar(product_id, limit)
    metrics_service.record_request("similar", _elapsed_ms(start_time), len(products))
    return build_product_list_response(products)


@router.post("/reload-data")
def reload_data(data_dir: Optional[str] = None) -> Dict[str, str]:
    """Reload the catalog from disk.

    Drops the cached engine and rebuilds it, so freshly exported catalog
    data is served without restarting the server.
    """
    global _engine_cache

    logger.info("Reloading catalog...")
    _engine_cache = None
    load_engine_if_needed(data_dir)
    return {"status": "Catalog reloaded successfully"}
