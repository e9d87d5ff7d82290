"""CLI script for getting product recommendations.

Useful for testing and evaluation. Loads a catalog export, runs one of the
engine's entry points and prints the result to the console.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cartwise.config import EngineConfig
from cartwise.exceptions import CartwiseException
from cartwise.recommender.engine import RecommendationEngine
from cartwise.recommender.types import EnrichedProduct, RecommendedProduct
from cartwise.store.memory import load_store_from_csv_dir

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)

MODES = ["personalized", "popular", "trending", "new-arrivals", "similar"]


async def get_results(
    engine: RecommendationEngine,
    mode: str,
    limit: int,
    target_id: Optional[str] = None,
) -> List[Union[RecommendedProduct, EnrichedProduct]]:
    """Run the engine entry point matching ``mode``.

    Args:
        engine: Engine over the loaded catalog
        mode: One of MODES
        limit: Number of products to return
        target_id: Customer id for "personalized", product id for "similar"

    Returns:
        Scored recommendations or plain products, depending on the mode
    """
    if mode == "personalized":
        return await engine.get_personalized_recommendations(target_id, limit)
    if mode == "popular":
        return await engine.get_popular(limit)
    if mode == "trending":
        return await engine.get_trending(limit)
    if mode == "new-arrivals":
        return await engine.get_new_arrivals(limit)
    return await engine.get_similar(target_id, limit)


def print_results(results: List[Union[RecommendedProduct, EnrichedProduct]]) -> None:
    for rank, item in enumerate(results, start=1):
        if isinstance(item, RecommendedProduct):
            product = item.product.product if item.product else None
            name = product.name if product else item.product_id
            print(f"  {rank:2d}. {item.product_id:<10} {name:<30} "
                  f"score={item.score:7.3f}  {item.reason}")
        else:
            product = item.product
            print(f"  {rank:2d}. {product.id:<10} {product.name:<30} "
                  f"price={product.price:.2f}")


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get product recommendations from a catalog export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py personalized --id c42
  python scripts/recommend_cli.py personalized --id c42 --limit 5
  python scripts/recommend_cli.py popular
  python scripts/recommend_cli.py similar --id p7
        """
    )

    parser.add_argument(
        "mode",
        type=str,
        choices=MODES,
        help="Which listing to compute"
    )

    parser.add_argument(
        "--id",
        dest="target_id",
        type=str,
        default=None,
        help="Customer id (personalized) or product id (similar)"
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of products to return (default: 10)"
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory containing catalog CSV files (default: data)"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    if args.mode in ("personalized", "similar") and not args.target_id:
        parser.error(f"--id is required for mode '{args.mode}'")

    try:
        store = load_store_from_csv_dir(args.data_dir)
    except FileNotFoundError as e:
        print(f"Error: Catalog not found in {args.data_dir}", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)

    engine = RecommendationEngine(store, EngineConfig.from_env())

    try:
        results = asyncio.run(get_results(engine, args.mode, args.limit, args.target_id))
    except CartwiseException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    label = f" for {args.target_id}" if args.target_id else ""
    print(f"\n{args.mode.capitalize()} results{label} ({len(results)}):")
    print_results(results)
    print()


if __name__ == "__main__":
    main()
