"""In-memory store adapter backed by pandas DataFrames.

Serves the `RecommendationStore` port from catalog data held in memory,
typically loaded from a directory of CSV exports. Order-line and feedback
aggregations run as pandas group-bys, the same way the production document
store runs them as aggregation pipelines.
"""

import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import Collection, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from cartwise.store.models import (
    Cart,
    CartItem,
    Category,
    CategoryId,
    Feedback,
    OptionType,
    OptionValue,
    Order,
    OrderLine,
    OrderStatus,
    Product,
    ProductFilter,
    ProductSort,
    Wishlist,
)
from cartwise.store.ports import RecommendationStore

# Configure module logger
logger = logging.getLogger(__name__)

# Catalog export filenames
CATEGORIES_FILENAME = "categories.csv"
PRODUCTS_FILENAME = "products.csv"
OPTION_TYPES_FILENAME = "option_types.csv"
OPTION_VALUES_FILENAME = "option_values.csv"
FEEDBACK_FILENAME = "feedback.csv"
WISHLISTS_FILENAME = "wishlists.csv"
CARTS_FILENAME = "carts.csv"
ORDERS_FILENAME = "orders.csv"

PRODUCT_COLUMNS = [
    "id",
    "price",
    "stock",
    "category_id",
    "created_at",
    "deleted",
    "position",
]
ORDER_LINE_COLUMNS = [
    "order_id",
    "customer_id",
    "status",
    "created_at",
    "product_id",
    "quantity",
]
FEEDBACK_COLUMNS = ["customer_id", "product_id", "rating", "position"]


def _as_utc(value: Optional[datetime]) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts


class InMemoryStore(RecommendationStore):
    """Serves the store port from in-memory catalog entities.

    Entities are indexed into DataFrames once at construction; queries are
    boolean masks and group-bys over those frames.
    """

    def __init__(
        self,
        categories: Iterable[Category] = (),
        products: Iterable[Product] = (),
        option_types: Iterable[OptionType] = (),
        option_values: Iterable[OptionValue] = (),
        feedback: Iterable[Feedback] = (),
        wishlists: Iterable[Wishlist] = (),
        carts: Iterable[Cart] = (),
        orders: Iterable[Order] = (),
    ):
        self._categories: Dict[str, Category] = {c.id: c for c in categories}
        self._products: Dict[str, Product] = {p.id: p for p in products}
        self._option_types: List[OptionType] = list(option_types)
        self._option_values: List[OptionValue] = list(option_values)
        self._feedback: List[Feedback] = list(feedback)
        self._wishlists: Dict[str, Wishlist] = {w.customer_id: w for w in wishlists}
        self._carts: Dict[str, Cart] = {c.customer_id: c for c in carts}
        self._orders: Dict[str, Order] = {o.id: o for o in orders}

        self._products_df = self._build_products_frame()
        self._order_lines_df = self._build_order_lines_frame()
        self._feedback_df = self._build_feedback_frame()

        logger.info(
            "Initialized InMemoryStore",
            extra={
                "num_products": len(self._products),
                "num_orders": len(self._orders),
                "num_feedback": len(self._feedback),
                "num_option_types": len(self._option_types),
            },
        )

    # ----- frame construction -----

    def _build_products_frame(self) -> pd.DataFrame:
        rows = [
            {
                "id": p.id,
                "price": p.price,
                "stock": p.stock,
                "category_id": p.category_id,
                "created_at": p.created_at,
                "deleted": p.is_deleted,
                "position": position,
            }
            for position, p in enumerate(self._products.values())
        ]
        df = pd.DataFrame(rows, columns=PRODUCT_COLUMNS)
        df = df.astype({"price": float, "stock": int, "deleted": bool, "position": int})
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        return df

    def _build_order_lines_frame(self) -> pd.DataFrame:
        rows = [
            {
                "order_id": order.id,
                "customer_id": order.customer_id,
                "status": OrderStatus(order.status).value,
                "created_at": order.created_at,
                "product_id": line.product_id,
                "quantity": line.quantity,
            }
            for order in self._orders.values()
            for line in order.lines
        ]
        df = pd.DataFrame(rows, columns=ORDER_LINE_COLUMNS)
        df = df.astype({"quantity": int})
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        return df

    def _build_feedback_frame(self) -> pd.DataFrame:
        rows = [
            {
                "customer_id": f.customer_id,
                "product_id": f.product_id,
                "rating": f.rating,
                "position": position,
            }
            for position, f in enumerate(self._feedback)
        ]
        df = pd.DataFrame(rows, columns=FEEDBACK_COLUMNS)
        return df.astype({"rating": int, "position": int})

    # ----- helpers -----

    def _populate(self, product: Product) -> Product:
        category_id = product.category_id
        if isinstance(product.category, CategoryId) and category_id in self._categories:
            return dataclasses.replace(product, category=self._categories[category_id])
        return product

    def _feedback_at(self, positions: Iterable[int]) -> List[Feedback]:
        return [self._feedback[int(i)] for i in positions]

    # ----- feedback -----

    async def find_feedback_by_customer(
        self,
        customer_id: str,
        populate_products: bool = False,
    ) -> List[Feedback]:
        df = self._feedback_df
        entries = self._feedback_at(df.loc[df["customer_id"] == customer_id, "position"])
        if not populate_products:
            return entries
        populated = []
        for entry in entries:
            product = self._products.get(entry.product_id)
            populated.append(
                dataclasses.replace(
                    entry, product=self._populate(product) if product else None
                )
            )
        return populated

    async def find_feedback_by_products(
        self,
        product_ids: Collection[str],
        exclude_customer_id: Optional[str] = None,
    ) -> List[Feedback]:
        df = self._feedback_df
        mask = df["product_id"].isin(list(product_ids))
        if exclude_customer_id is not None:
            mask &= df["customer_id"] != exclude_customer_id
        return self._feedback_at(df.loc[mask, "position"])

    async def find_feedback_by_customers(
        self,
        customer_ids: Collection[str],
        min_rating: int = 1,
        exclude_product_ids: Collection[str] = (),
    ) -> List[Feedback]:
        df = self._feedback_df
        mask = df["customer_id"].isin(list(customer_ids)) & (df["rating"] >= min_rating)
        if exclude_product_ids:
            mask &= ~df["product_id"].isin(list(exclude_product_ids))
        return self._feedback_at(df.loc[mask, "position"])

    async def aggregate_average_rating_by_product(
        self,
        product_ids: Collection[str],
    ) -> List[Tuple[str, float]]:
        df = self._feedback_df
        rated = df[df["product_id"].isin(list(product_ids))]
        averages = rated.groupby("product_id")["rating"].mean()
        return [(str(pid), float(avg)) for pid, avg in averages.items()]

    # ----- wishlist / cart -----

    async def find_wishlist_by_customer(
        self,
        customer_id: str,
        populate_products: bool = False,
    ) -> Optional[Wishlist]:
        wishlist = self._wishlists.get(customer_id)
        if wishlist is None or not populate_products:
            return wishlist
        products = [
            self._populate(self._products[pid])
            for pid in wishlist.product_ids
            if pid in self._products
        ]
        return dataclasses.replace(wishlist, products=products)

    async def find_cart_by_customer(self, customer_id: str) -> Optional[Cart]:
        return self._carts.get(customer_id)

    # ----- orders -----

    async def find_orders_containing_product(
        self,
        product_id: str,
        exclude_customer_id: Optional[str],
        statuses: Collection[OrderStatus],
    ) -> List[Order]:
        df = self._order_lines_df
        mask = (df["product_id"] == product_id) & df["status"].isin(
            [OrderStatus(s).value for s in statuses]
        )
        if exclude_customer_id is not None:
            mask &= df["customer_id"] != exclude_customer_id
        order_ids = df.loc[mask, "order_id"].drop_duplicates()
        return [self._orders[oid] for oid in order_ids]

    async def aggregate_order_lines_by_product(
        self,
        statuses: Collection[OrderStatus],
        since: Optional[datetime] = None,
        exclude_product_ids: Collection[str] = (),
        limit: Optional[int] = None,
    ) -> List[Tuple[str, int]]:
        df = self._order_lines_df
        mask = df["status"].isin([OrderStatus(s).value for s in statuses])
        if since is not None:
            mask &= df["created_at"] >= _as_utc(since)
        if exclude_product_ids:
            mask &= ~df["product_id"].isin(list(exclude_product_ids))

        totals = (
            df[mask]
            .groupby("product_id")["quantity"]
            .sum()
            .sort_values(ascending=False, kind="stable")
        )
        if limit is not None:
            totals = totals.head(limit)
        return [(str(pid), int(qty)) for pid, qty in totals.items()]

    # ----- products -----

    async def find_products(
        self,
        product_filter: ProductFilter,
        sort: Optional[ProductSort] = None,
        limit: Optional[int] = None,
        populate_category: bool = False,
    ) -> List[Product]:
        df = self._products_df
        f = product_filter
        mask = pd.Series(True, index=df.index)

        if not f.include_deleted:
            mask &= ~df["deleted"]
        if f.ids_in is not None:
            mask &= df["id"].isin(list(f.ids_in))
        if f.ids_not_in:
            mask &= ~df["id"].isin(list(f.ids_not_in))
        if f.category_ids_in is not None:
            mask &= df["category_id"].isin(list(f.category_ids_in))
        if f.min_price is not None:
            mask &= df["price"] >= f.min_price
        if f.max_price is not None:
            mask &= df["price"] <= f.max_price
        if f.min_stock is not None:
            mask &= df["stock"] >= f.min_stock

        selected = df[mask]
        if sort == ProductSort.NEWEST:
            selected = selected.sort_values(
                ["created_at", "position"],
                ascending=[False, True],
                na_position="last",
            )
        if limit is not None:
            selected = selected.head(limit)

        products = [self._products[pid] for pid in selected["id"]]
        if populate_category:
            products = [self._populate(p) for p in products]
        return products

    async def get_product(self, product_id: str) -> Optional[Product]:
        product = self._products.get(product_id)
        return self._populate(product) if product else None

    async def find_option_types_by_products(
        self,
        product_ids: Collection[str],
    ) -> List[OptionType]:
        wanted = set(product_ids)
        return [
            t for t in self._option_types
            if t.product_id in wanted and t.deleted_at is None
        ]

    async def find_option_values_by_option_types(
        self,
        option_type_ids: Collection[str],
    ) -> List[OptionValue]:
        wanted = set(option_type_ids)
        return [
            v for v in self._option_values
            if v.option_type_id in wanted and v.deleted_at is None
        ]


# ----- CSV loading -----


def _read_csv(path: Path) -> List[Dict[str, str]]:
    if not path.exists():
        logger.debug(f"Optional catalog file {path} not found, using empty table")
        return []
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return df.to_dict("records")


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.to_pydatetime()


def _parse_optional(value: str) -> Optional[str]:
    return value or None


def load_store_from_csv_dir(data_dir: str) -> InMemoryStore:
    """Load catalog CSV exports from a directory into an `InMemoryStore`.

    ``products.csv`` is required; every other file is optional and treated
    as an empty table when absent. Wishlist and cart rows keep file order,
    so the last cart row of a shopper is the most recently added item.
    Orders are given one row per order line.

    Args:
        data_dir: Directory containing the CSV exports.

    Returns:
        Store serving the loaded catalog.

    Raises:
        FileNotFoundError: If the directory or ``products.csv`` is missing.
        ValueError: If a numeric or timestamp column cannot be parsed.

    Example:
        >>> store = load_store_from_csv_dir("data")
        >>> engine = RecommendationEngine(store)
    """
    base = Path(data_dir)
    products_path = base / PRODUCTS_FILENAME
    if not base.is_dir() or not products_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {products_path}")

    logger.info(f"Loading catalog from {data_dir}")

    categories = [
        Category(id=row["id"], name=row["name"])
        for row in _read_csv(base / CATEGORIES_FILENAME)
    ]
    products = [
        Product(
            id=row["id"],
            name=row["name"],
            price=float(row["price"]),
            stock=int(row["stock"] or 0),
            category=CategoryId(row["category_id"]) if row.get("category_id") else None,
            img=row.get("img", ""),
            description=row.get("description", ""),
            created_at=_parse_timestamp(row.get("created_at", "")),
            deleted_at=_parse_timestamp(row.get("deleted_at", "")),
        )
        for row in _read_csv(products_path)
    ]
    option_types = [
        OptionType(
            id=row["id"],
            product_id=row["product_id"],
            name=row["name"],
            deleted_at=_parse_timestamp(row.get("deleted_at", "")),
        )
        for row in _read_csv(base / OPTION_TYPES_FILENAME)
    ]
    option_values = [
        OptionValue(
            id=row["id"],
            option_type_id=row["option_type_id"],
            value=row["value"],
            price=float(row.get("price") or 0),
            stock=int(row.get("stock") or 0),
            image=_parse_optional(row.get("image", "")),
            deleted_at=_parse_timestamp(row.get("deleted_at", "")),
        )
        for row in _read_csv(base / OPTION_VALUES_FILENAME)
    ]
    feedback = [
        Feedback(
            id=row["id"],
            customer_id=row["customer_id"],
            product_id=row["product_id"],
            rating=int(row["rating"]),
            comment=row.get("comment", ""),
            created_at=_parse_timestamp(row.get("created_at", "")),
        )
        for row in _read_csv(base / FEEDBACK_FILENAME)
    ]

    wishlists: Dict[str, Wishlist] = {}
    for row in _read_csv(base / WISHLISTS_FILENAME):
        wishlist = wishlists.setdefault(
            row["customer_id"], Wishlist(customer_id=row["customer_id"])
        )
        wishlist.product_ids.append(row["product_id"])

    carts: Dict[str, Cart] = {}
    for row in _read_csv(base / CARTS_FILENAME):
        cart = carts.setdefault(row["customer_id"], Cart(customer_id=row["customer_id"]))
        cart.items.append(
            CartItem(product_id=row["product_id"], quantity=int(row.get("quantity") or 1))
        )

    orders: Dict[str, Order] = {}
    for row in _read_csv(base / ORDERS_FILENAME):
        order = orders.setdefault(
            row["order_id"],
            Order(
                id=row["order_id"],
                customer_id=row["customer_id"],
                status=OrderStatus(row["status"]),
                created_at=_parse_timestamp(row.get("created_at", "")),
            ),
        )
        order.lines.append(
            OrderLine(
                product_id=row["product_id"],
                quantity=int(row.get("quantity") or 1),
                price=float(row.get("price") or 0),
            )
        )

    logger.info(
        "Catalog loaded",
        extra={
            "data_dir": data_dir,
            "num_categories": len(categories),
            "num_products": len(products),
            "num_orders": len(orders),
            "num_feedback": len(feedback),
        },
    )

    return InMemoryStore(
        categories=categories,
        products=products,
        option_types=option_types,
        option_values=option_values,
        feedback=feedback,
        wishlists=wishlists.values(),
        carts=carts.values(),
        orders=orders.values(),
    )
