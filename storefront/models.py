"""Data models for storefront entities.

The backend speaks camelCase JSON; these dataclasses hold the same data
under Python names and are built with the ``from_api`` constructors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from storefront.config import DEFAULT_CURRENCY_SYMBOL

__all__ = [
    "ResourceKind",
    "ResourceIdentifier",
    "ProductImage",
    "Review",
    "Product",
    "Category",
    "unwrap_entity",
    "unwrap_list",
]

Number = Union[int, float, str]


class ResourceKind(str, Enum):
    """How a backend entity is addressed."""

    PRODUCT_BY_ID = "product_by_id"
    PRODUCT_BY_SLUG = "product_by_slug"
    PRODUCT_BY_ARTICLE = "product_by_article"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"

    @property
    def is_product(self) -> bool:
        return self in (
            ResourceKind.PRODUCT_BY_ID,
            ResourceKind.PRODUCT_BY_SLUG,
            ResourceKind.PRODUCT_BY_ARTICLE,
        )


@dataclass(frozen=True)
class ResourceIdentifier:
    """A resolved reference to one backend entity for the current page."""

    kind: ResourceKind
    value: str

    @property
    def is_product(self) -> bool:
        return self.kind.is_product


@dataclass
class ProductImage:
    src: str
    thumb: Optional[str] = None
    alt: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProductImage":
        return cls(src=data.get("src") or "", thumb=data.get("thumb"), alt=data.get("alt"))


@dataclass
class Review:
    rating: Number
    author: str = ""
    date: str = ""
    comment: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            rating=data.get("rating", 0),
            author=data.get("author") or "",
            date=data.get("date") or "",
            comment=data.get("comment") or "",
        )


@dataclass
class Product:
    """A product as returned by the catalog backend."""

    name: str
    slug: Optional[str] = None
    id: Optional[str] = None
    article_number: Optional[str] = None
    price: Optional[Number] = None
    original_price: Optional[Number] = None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    designer: Optional[str] = None
    country_of_origin: Optional[str] = None
    importer_packer_marketer: Optional[str] = None
    dimensions: Optional[str] = None
    materials: Optional[str] = None
    finish: Optional[str] = None
    description: Optional[str] = None
    features: Optional[str] = None
    images: List[ProductImage] = field(default_factory=list)
    reviews: List[Review] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            name=data.get("name") or "",
            slug=data.get("slug"),
            id=data.get("_id") or data.get("id"),
            article_number=data.get("articleNumber"),
            price=data.get("price"),
            original_price=data.get("originalPrice"),
            currency_symbol=data.get("currencySymbol") or DEFAULT_CURRENCY_SYMBOL,
            designer=data.get("designer"),
            country_of_origin=data.get("countryOfOrigin"),
            importer_packer_marketer=data.get("importerPackerMarketer"),
            dimensions=data.get("dimensions"),
            materials=data.get("materials"),
            finish=data.get("finish"),
            description=data.get("description"),
            features=data.get("features"),
            images=[ProductImage.from_api(i) for i in data.get("images") or [] if isinstance(i, dict)],
            reviews=[Review.from_api(r) for r in data.get("reviews") or [] if isinstance(r, dict)],
        )


@dataclass
class Category:
    """A category or subcategory; both share the same page fields."""

    name: str
    slug: Optional[str] = None
    id: Optional[str] = None
    h1_tag: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    header_description: Optional[str] = None
    description: Optional[str] = None
    images: List[ProductImage] = field(default_factory=list)
    faqs: List[Dict[str, Any]] = field(default_factory=list)
    buying_guidance: List[Dict[str, Any]] = field(default_factory=list)
    is_subcategory: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any], is_subcategory: bool = False) -> "Category":
        return cls(
            name=data.get("name") or "",
            slug=data.get("slug"),
            id=data.get("_id") or data.get("id"),
            h1_tag=data.get("h1Tag"),
            meta_title=data.get("metaTitle"),
            meta_description=data.get("metaDescription"),
            header_description=data.get("headerDescription"),
            description=data.get("description"),
            images=[ProductImage.from_api(i) for i in data.get("images") or [] if isinstance(i, dict)],
            faqs=list(data.get("faqs") or []),
            buying_guidance=list(data.get("buyingGuidance") or []),
            is_subcategory=is_subcategory,
        )

    @property
    def display_title(self) -> str:
        return self.h1_tag or self.name or ""

    @property
    def preferred_description(self) -> str:
        return self.header_description or self.description or ""


def unwrap_entity(payload: Any, key: str) -> Dict[str, Any]:
    """Return payload[key] when the backend wrapped the entity, else the payload."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    if isinstance(payload, dict):
        return payload
    return {}


def unwrap_list(payload: Any) -> List[Dict[str, Any]]:
    """Normalize a listing response: a bare list or a {success, data} envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and payload.get("data") is not None:
        data = payload["data"]
        return data if isinstance(data, list) else [data]
    return []
