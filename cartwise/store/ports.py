"""Store port: the read interface the recommendation engine depends on.

Implementations are supplied by the surrounding application and injected
into the engine's constructor.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Collection, List, Optional, Tuple

from cartwise.store.models import (
    Cart,
    Feedback,
    OptionType,
    OptionValue,
    Order,
    OrderStatus,
    Product,
    ProductFilter,
    ProductSort,
    Wishlist,
)


class RecommendationStore(ABC):
    """Abstraction over the document store holding the shop catalog."""

    @abstractmethod
    async def find_feedback_by_customer(
        self,
        customer_id: str,
        populate_products: bool = False,
    ) -> List[Feedback]:
        """Return every rating left by a shopper.

        With ``populate_products`` each entry carries its product with the
        category populated.
        """
        ...

    @abstractmethod
    async def find_feedback_by_products(
        self,
        product_ids: Collection[str],
        exclude_customer_id: Optional[str] = None,
    ) -> List[Feedback]:
        """Return ratings on any of the given products."""
        ...

    @abstractmethod
    async def find_feedback_by_customers(
        self,
        customer_ids: Collection[str],
        min_rating: int = 1,
        exclude_product_ids: Collection[str] = (),
    ) -> List[Feedback]:
        """Return ratings left by any of the given shoppers."""
        ...

    @abstractmethod
    async def find_wishlist_by_customer(
        self,
        customer_id: str,
        populate_products: bool = False,
    ) -> Optional[Wishlist]:
        ...

    @abstractmethod
    async def find_cart_by_customer(self, customer_id: str) -> Optional[Cart]:
        ...

    @abstractmethod
    async def find_orders_containing_product(
        self,
        product_id: str,
        exclude_customer_id: Optional[str],
        statuses: Collection[OrderStatus],
    ) -> List[Order]:
        ...

    @abstractmethod
    async def aggregate_order_lines_by_product(
        self,
        statuses: Collection[OrderStatus],
        since: Optional[datetime] = None,
        exclude_product_ids: Collection[str] = (),
        limit: Optional[int] = None,
    ) -> List[Tuple[str, int]]:
        """Sum ordered quantities per product, best sellers first."""
        ...

    @abstractmethod
    async def find_products(
        self,
        product_filter: ProductFilter,
        sort: Optional[ProductSort] = None,
        limit: Optional[int] = None,
        populate_category: bool = False,
    ) -> List[Product]:
        ...

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        """Return a product by id, soft-deleted ones included."""
        ...

    @abstractmethod
    async def find_option_types_by_products(
        self,
        product_ids: Collection[str],
    ) -> List[OptionType]:
        """Return the non-deleted option types of the given products."""
        ...

    @abstractmethod
    async def find_option_values_by_option_types(
        self,
        option_type_ids: Collection[str],
    ) -> List[OptionValue]:
        """Return the non-deleted option values of the given option types."""
        ...

    @abstractmethod
    async def aggregate_average_rating_by_product(
        self,
        product_ids: Collection[str],
    ) -> List[Tuple[str, float]]:
        """Return the average rating of each rated product among the ids."""
        ...
