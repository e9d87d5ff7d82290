"""Utility functions shared by the recommendation strategies.

This module provides the foreign-key grouping helper used when joining
batched query results in memory, and the best-effort convention every
scoring and listing strategy follows.
"""

import functools
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, List, TypeVar

# Configure module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
StrategyFn = TypeVar("StrategyFn", bound=Callable[..., Awaitable[List[Any]]])


def group_by_key(items: Iterable[T], key: Callable[[T], K]) -> Dict[K, List[T]]:
    """Group batch-loaded records by a foreign key.

    Preserves the relative order of records within each group.

    Args:
        items: Records returned by a single batched query.
        key: Function extracting the foreign key from a record.

    Returns:
        Dictionary mapping each key to the list of records carrying it.

    Example:
        >>> by_product = group_by_key(option_types, lambda t: t.product_id)
        >>> by_product.get("p1", [])
    """
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def best_effort(strategy: str) -> Callable[[StrategyFn], StrategyFn]:
    """Make a list-returning strategy degrade to an empty list on failure.

    The wrapped coroutine keeps its signature. Any exception raised while it
    runs is logged and the call resolves to ``[]``, so a failing strategy
    never prevents the others from contributing.

    Args:
        strategy: Strategy name reported in logs.
    """

    def decorator(func: StrategyFn) -> StrategyFn:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> List[Any]:
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Strategy failed, returning no candidates",
                    extra={
                        "strategy": strategy,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "duration_ms": round((time.time() - start_time) * 1000, 2),
                    },
                    exc_info=True,
                )
                return []

        return wrapper  # type: ignore[return-value]

    return decorator
