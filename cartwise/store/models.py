"""Catalog entities read by the recommendation engine.

These mirror the documents kept by the surrounding shop application. The
engine never writes them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Collection, List, Optional, Union


@dataclass(frozen=True)
class Category:
    """A populated category reference."""

    id: str
    name: str


@dataclass(frozen=True)
class CategoryId:
    """An unpopulated category reference (foreign key only)."""

    id: str


CategoryRef = Union[Category, CategoryId]


def category_id_of(ref: Optional[CategoryRef]) -> Optional[str]:
    """Return the category id behind either reference shape."""
    if isinstance(ref, Category):
        return ref.id
    if isinstance(ref, CategoryId):
        return ref.id
    return None


def category_label_of(ref: Optional[CategoryRef]) -> Optional[str]:
    """Return the display label: the name when populated, else the raw id."""
    if isinstance(ref, Category):
        return ref.name
    return category_id_of(ref)


@dataclass
class Product:
    id: str
    name: str
    price: float
    stock: int = 0
    category: Optional[CategoryRef] = None
    img: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def category_id(self) -> Optional[str]:
        return category_id_of(self.category)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass
class OptionType:
    """A variant axis of a product (size, color, ...)."""

    id: str
    product_id: str
    name: str
    deleted_at: Optional[datetime] = None


@dataclass
class OptionValue:
    """A variant choice with its own price delta and stock."""

    id: str
    option_type_id: str
    value: str
    price: float = 0.0
    stock: int = 0
    image: Optional[str] = None
    deleted_at: Optional[datetime] = None


@dataclass
class Feedback:
    """A shopper's rating of a product.

    ``product`` is only set when the store was asked to populate it.
    """

    id: str
    customer_id: str
    product_id: str
    rating: int
    comment: str = ""
    created_at: Optional[datetime] = None
    product: Optional[Product] = None


@dataclass
class Wishlist:
    customer_id: str
    product_ids: List[str] = field(default_factory=list)
    products: Optional[List[Product]] = None


@dataclass
class CartItem:
    product_id: str
    quantity: int = 1


@dataclass
class Cart:
    """A shopper's cart. Items are kept in the order they were added."""

    customer_id: str
    items: List[CartItem] = field(default_factory=list)

    @property
    def product_ids(self) -> List[str]:
        return [item.product_id for item in self.items]

    @property
    def latest_item(self) -> Optional[CartItem]:
        return self.items[-1] if self.items else None


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Only these statuses count toward popularity and co-purchase signals
COUNTED_ORDER_STATUSES = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.SHIPPED, OrderStatus.PROCESSING}
)


@dataclass
class OrderLine:
    product_id: str
    quantity: int = 1
    price: float = 0.0


@dataclass
class Order:
    id: str
    customer_id: str
    status: OrderStatus
    lines: List[OrderLine] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def product_ids(self) -> List[str]:
        return [line.product_id for line in self.lines]


@dataclass
class ProductFilter:
    """Query filter for ``RecommendationStore.find_products``.

    ``ids_in`` and ``category_ids_in`` left as ``None`` do not restrict the
    query; an empty collection matches nothing. Soft-deleted products are
    excluded unless ``include_deleted`` is set.
    """

    ids_in: Optional[Collection[str]] = None
    ids_not_in: Collection[str] = ()
    category_ids_in: Optional[Collection[str]] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_stock: Optional[int] = None
    include_deleted: bool = False


class ProductSort(str, Enum):
    NEWEST = "newest"
