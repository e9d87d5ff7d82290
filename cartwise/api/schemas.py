"""Response models for the recommendation endpoints."""

from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from cartwise.recommender.types import (
    REASON_POPULAR,
    EnrichedProduct,
    OptionTypePayload,
    RecommendedProduct,
)
from cartwise.store.models import category_label_of


class OptionValueItem(BaseModel):
    id: str
    value: str
    image: Optional[str] = None
    price: float
    stock: int


class OptionTypeItem(BaseModel):
    id: str
    name: str
    values: List[OptionValueItem] = Field(default_factory=list)


class ProductItem(BaseModel):
    """A product as shown in listings.

    Attributes:
        id: Product ID.
        name: Product name.
        price: Base price.
        img: Image URL.
        category: Category name, or the raw category ID when unavailable.
        stock: Product-level stock.
        option_types: Option variants, zero-stock values included.
    """

    id: str
    name: str
    price: float
    img: str = ""
    category: Optional[str] = None
    stock: int
    option_types: List[OptionTypeItem] = Field(default_factory=list)


class RecommendationItem(ProductItem):
    reason: str = Field(default=REASON_POPULAR, description="Why this is suggested")
    score: float = Field(default=0.0, description="Ranking score, higher is better")


class RecommendationResponse(BaseModel):
    recommendations: List[RecommendationItem]
    type: Literal["personalized", "popular"] = "personalized"
    count: int


class ProductListResponse(BaseModel):
    products: List[ProductItem]
    count: int


def _option_types(option_types: List[OptionTypePayload]) -> List[OptionTypeItem]:
    return [
        OptionTypeItem(
            id=t.id,
            name=t.name,
            values=[
                OptionValueItem(
                    id=v.id, value=v.value, image=v.image, price=v.price, stock=v.stock
                )
                for v in t.values
            ],
        )
        for t in option_types
    ]


def _product_fields(item: EnrichedProduct) -> dict:
    product = item.product
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "img": product.img,
        "category": category_label_of(product.category),
        "stock": product.stock,
        "option_types": _option_types(item.option_types),
    }


def build_recommendation_response(
    recommendations: Sequence[RecommendedProduct],
    kind: Literal["personalized", "popular"] = "personalized",
) -> RecommendationResponse:
    """Build the response body for scored recommendations.

    Recommendations without a hydrated product are skipped.
    """
    items = [
        RecommendationItem(
            **_product_fields(rec.product),
            reason=rec.reason or REASON_POPULAR,
            score=rec.score or 0.0,
        )
        for rec in recommendations
        if rec.product is not None
    ]
    return RecommendationResponse(recommendations=items, type=kind, count=len(items))


def build_product_list_response(
    products: Sequence[EnrichedProduct],
) -> ProductListResponse:
    """Build the response body for plain product listings."""
    items = [ProductItem(**_product_fields(p)) for p in products]
    return ProductListResponse(products=items, count=len(items))
