"""Generate a fake shop catalog for testing and development.

This module creates synthetic catalog exports in the CSV layout read by
``cartwise.store.memory.load_store_from_csv_dir``: categories, products,
option variants, ratings, wishlists, carts and order lines.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        tables = generate_fake_catalog(num_customers=20, num_products=40)
"""

import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_CUSTOMERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_ORDERS = 400
DEFAULT_NUM_RATINGS = 600
DEFAULT_DAYS_BACK = 90
SECONDS_PER_DAY = 86400

CATEGORY_NAMES = ["Electronics", "Books", "Home", "Toys", "Sports", "Beauty"]
ORDER_STATUSES = ["completed", "shipped", "processing", "pending", "cancelled"]
ORDER_STATUS_WEIGHTS = [50, 20, 15, 10, 5]
RATINGS = [1, 2, 3, 4, 5]
RATING_WEIGHTS = [5, 5, 15, 35, 40]
SIZE_VALUES = ["S", "M", "L"]


def _random_timestamp(end_date: datetime, days_back: int) -> datetime:
    return end_date - timedelta(
        days=random.randrange(days_back), seconds=random.randrange(SECONDS_PER_DAY)
    )


def generate_fake_catalog(
    num_customers: int = DEFAULT_NUM_CUSTOMERS,
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_orders: int = DEFAULT_NUM_ORDERS,
    num_ratings: int = DEFAULT_NUM_RATINGS,
    end_date: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> Dict[str, pd.DataFrame]:
    """Generate synthetic catalog tables.

    Args:
        num_customers: Number of shoppers to simulate. Must be positive.
        num_products: Number of products. Must be positive.
        num_orders: Number of orders, each with one to four lines.
        num_ratings: Number of rating records.
        end_date: Most recent timestamp. Defaults to now (UTC).
        seed: Random seed for reproducible output.

    Returns:
        Dictionary mapping CSV filename stems (``products``, ``orders``, ...)
        to DataFrames.

    Raises:
        ValueError: If any count is non-positive.
    """
    if min(num_customers, num_products, num_orders, num_ratings) <= 0:
        raise ValueError(
            "num_customers, num_products, num_orders and num_ratings must be positive"
        )

    rng_state = random.getstate()
    if seed is not None:
        random.seed(seed)

    try:
        end_date = end_date or datetime.now(timezone.utc)
        customer_ids = [f"c{i}" for i in range(1, num_customers + 1)]
        product_ids = [f"p{i}" for i in range(1, num_products + 1)]

        categories = pd.DataFrame(
            {
                "id": [f"cat{i}" for i in range(1, len(CATEGORY_NAMES) + 1)],
                "name": CATEGORY_NAMES,
            }
        )

        products = pd.DataFrame(
            [
                {
                    "id": pid,
                    "name": f"Product {pid[1:]}",
                    "price": round(random.uniform(5, 500), 2),
                    "stock": random.choice([0, 0, 3, 10, 25, 100]),
                    "category_id": random.choice(categories["id"].tolist()),
                    "img": f"https://img.example.com/{pid}.jpg",
                    "description": f"Description of product {pid[1:]}",
                    "created_at": _random_timestamp(
                        end_date, DEFAULT_DAYS_BACK * 2
                    ).isoformat(),
                    "deleted_at": (
                        _random_timestamp(end_date, 10).isoformat()
                        if random.random() < 0.03
                        else ""
                    ),
                }
                for pid in product_ids
            ]
        )

        # Roughly a fifth of the products come in sizes
        option_types = []
        option_values = []
        for pid in random.sample(product_ids, k=max(1, num_products // 5)):
            type_id = f"ot-{pid}"
            option_types.append(
                {"id": type_id, "product_id": pid, "name": "Size", "deleted_at": ""}
            )
            for size in SIZE_VALUES:
                option_values.append(
                    {
                        "id": f"ov-{pid}-{size}",
                        "option_type_id": type_id,
                        "value": size,
                        "price": random.choice([0, 0, 5, 10]),
                        "stock": random.choice([0, 0, 2, 8]),
                        "image": "",
                        "deleted_at": "",
                    }
                )

        feedback = pd.DataFrame(
            [
                {
                    "id": f"f{i}",
                    "customer_id": random.choice(customer_ids),
                    "product_id": random.choice(product_ids),
                    "rating": random.choices(RATINGS, weights=RATING_WEIGHTS)[0],
                    "comment": "",
                    "created_at": _random_timestamp(
                        end_date, DEFAULT_DAYS_BACK
                    ).isoformat(),
                }
                for i in range(1, num_ratings + 1)
            ]
        )

        wishlists = pd.DataFrame(
            [
                {"customer_id": cid, "product_id": pid}
                for cid in random.sample(customer_ids, k=max(1, num_customers // 2))
                for pid in random.sample(product_ids, k=random.randint(1, 5))
            ]
        )

        carts = pd.DataFrame(
            [
                {"customer_id": cid, "product_id": pid, "quantity": random.randint(1, 3)}
                for cid in random.sample(customer_ids, k=max(1, num_customers // 3))
                for pid in random.sample(product_ids, k=random.randint(1, 3))
            ]
        )

        order_lines = []
        for i in range(1, num_orders + 1):
            customer_id = random.choice(customer_ids)
            status = random.choices(ORDER_STATUSES, weights=ORDER_STATUS_WEIGHTS)[0]
            created_at = _random_timestamp(end_date, DEFAULT_DAYS_BACK).isoformat()
            for pid in random.sample(product_ids, k=random.randint(1, 4)):
                order_lines.append(
                    {
                        "order_id": f"o{i}",
                        "customer_id": customer_id,
                        "status": status,
                        "created_at": created_at,
                        "product_id": pid,
                        "quantity": random.randint(1, 3),
                        "price": products.loc[products["id"] == pid, "price"].iloc[0],
                    }
                )
        orders = pd.DataFrame(order_lines)

        return {
            "categories": categories,
            "products": products,
            "option_types": pd.DataFrame(option_types),
            "option_values": pd.DataFrame(option_values),
            "feedback": feedback,
            "wishlists": wishlists,
            "carts": carts,
            "orders": orders,
        }
    finally:
        if seed is not None:
            random.setstate(rng_state)


def save_catalog(tables: Dict[str, pd.DataFrame], output_dir: str) -> Path:
    """Write catalog tables as ``<name>.csv`` files into ``output_dir``."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    for name, df in tables.items():
        df.to_csv(output_path / f"{name}.csv", index=False)
    return output_path


def main() -> None:
    """Generate a default catalog into data/ and print a summary."""
    print(f"Generating fake catalog...")
    print(
        f"Customers: {DEFAULT_NUM_CUSTOMERS}, Products: {DEFAULT_NUM_PRODUCTS}, "
        f"Orders: {DEFAULT_NUM_ORDERS}"
    )

    try:
        tables = generate_fake_catalog()
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    save_catalog(tables, str(data_dir))

    print(f"\nCatalog generated successfully!")
    print(f"Saved to: {data_dir}")
    print(f"\nCatalog summary:")
    for name, df in tables.items():
        print(f"  {name}: {len(df)} rows")
    orders = tables["orders"]
    print(f"  Distinct orders: {orders['order_id'].nunique()}")
    print(f"  Date range: {orders['created_at'].min()} to {orders['created_at'].max()}")


if __name__ == "__main__":
    main()
