"""Patch backend entities into a bound page template.

Every function here takes a :class:`ViewBinding` and writes only to anchors
that exist on the page; absent anchors are skipped.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional, Sequence, Tuple

from bs4 import Tag
from bs4.element import Script, Stylesheet

from storefront.config import DEFAULT_CURRENCY_SYMBOL, EXPLORE_PRODUCT_LIMIT, SITE_NAME
from storefront.fragments import (
    EXPLORE_PRODUCT_ITEM_CLASS,
    EXPLORE_PRODUCTS_STYLE,
    render_fragment,
)
from storefront.logging_config import get_logger
from storefront.models import Category, Product, Review
from storefront.view_binding import (
    GALLERY_IMAGES,
    ViewBinding,
    set_inner_html,
    set_paragraph_text,
    set_text,
)

__all__ = [
    "ReviewSummary",
    "format_amount",
    "page_title",
    "render_price_html",
    "star_percent",
    "summarize_reviews",
    "format_review_date",
    "render_reviews",
    "apply_product_data",
    "apply_category_data",
    "insert_breadcrumb_schema",
    "render_category_products",
    "render_explore_products",
    "ensure_explore_styles",
]

logger = get_logger("render")

TITLE_SEPARATOR = " – "


@dataclass(frozen=True)
class ReviewSummary:
    average: float
    count: int

    @property
    def display(self) -> str:
        """One decimal place, halves rounded up (4.25 -> "4.3")."""
        return str(Decimal(repr(self.average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    @property
    def percent(self) -> float:
        return star_percent(self.average)


def format_amount(value: Any) -> str:
    """Print a number the way the theme does: 80 not 80.0, 12.5 stays 12.5."""
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def page_title(name: str) -> str:
    return f"{name}{TITLE_SEPARATOR}{SITE_NAME}"


def render_price_html(product: Product) -> str:
    """Price block markup; a struck-through original price when on sale."""
    symbol = product.currency_symbol or DEFAULT_CURRENCY_SYMBOL
    if product.original_price:
        return render_fragment(
            "price_sale",
            symbol=symbol,
            price=format_amount(product.price),
            original_price=format_amount(product.original_price),
        )
    return render_fragment("price_regular", symbol=symbol, price=format_amount(product.price))


def star_percent(rating: float) -> float:
    return (float(rating) / 5) * 100


def summarize_reviews(reviews: Sequence[Review]) -> Optional[ReviewSummary]:
    """Mean rating (unrounded) over all reviews; None for no reviews."""
    if not reviews:
        return None
    total = sum(float(r.rating) for r in reviews)
    return ReviewSummary(average=total / len(reviews), count=len(reviews))


def format_review_date(value: str) -> Tuple[str, str]:
    """Return (ISO-8601 UTC timestamp, long US date) for a review date.

    Unparseable dates come back as ("", value) so the raw text still shows.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return "", value or ""

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)

    iso = parsed.strftime("%Y-%m-%dT%H:%M:%S") + f".{parsed.microsecond // 1000:03d}Z"
    display = f"{parsed:%B} {parsed.day}, {parsed.year}"
    return iso, display


def render_reviews(binding: ViewBinding, reviews: Sequence[Review]) -> None:
    """Replace the review list and the rating summary."""
    container = binding.get("review_list")
    if container is None:
        return

    container.clear()
    for index, review in enumerate(reviews):
        parity = "even" if index % 2 == 0 else "odd"
        iso_date, display_date = format_review_date(review.date)

        item = binding.soup.new_tag("li")
        item["class"] = ["review", parity, f"thread-{parity}", "depth-1"]
        item["id"] = f"li-comment-{index + 1}"
        set_inner_html(item, render_fragment(
            "review_item",
            number=index + 1,
            rating=format_amount(review.rating),
            percent=format_amount(star_percent(review.rating)),
            author=review.author,
            iso_date=iso_date,
            display_date=display_date,
            comment=review.comment,
        ))
        container.append(item)

    summary = summarize_reviews(reviews)
    summary_el = binding.get("review_summary")
    if summary_el is not None and summary is not None:
        set_inner_html(summary_el, render_fragment(
            "review_summary",
            average=summary.display,
            percent=format_amount(summary.percent),
            count=summary.count,
        ))


def _set_attr(tag: Optional[Tag], attr: str, value: Optional[str]) -> None:
    if tag is not None:
        tag[attr] = value or ""


def _update_detail(binding: ViewBinding, name: str, value: Optional[str]) -> None:
    element = binding.get(name)
    if element is not None and value:
        set_paragraph_text(element, str(value))


def _apply_gallery(binding: ViewBinding, product: Product) -> None:
    for img, image in zip(binding.get_all(GALLERY_IMAGES), product.images):
        label = image.alt or product.name
        img["src"] = image.src
        img["alt"] = label
        img["title"] = label
        if image.thumb:
            img["data-thumb-image"] = image.thumb
        if image.src:
            img["data-full-image"] = image.src
        if img.get("width"):
            img["srcset"] = f"{image.src} {img['width']}w"

    first = product.images[0]
    og_image = binding.get("og_image")
    if og_image is not None:
        og_image["content"] = first.src
    item_image = binding.get("item_image")
    if item_image is not None:
        item_image["href"] = first.src


def apply_product_data(binding: ViewBinding, product: Product) -> None:
    """Write a product into the product page anchors."""
    name_el = binding.get("product_name")
    if name_el is not None:
        set_text(name_el, product.name)
    else:
        logger.warning("product name anchor not found on page")

    binding.set_title(page_title(product.name))
    _set_attr(binding.get("og_title"), "content", product.name)
    _set_attr(binding.get("og_description"), "content", product.features)

    features_el = binding.get("features")
    if features_el is not None:
        set_paragraph_text(features_el, product.features or "")

    price_el = binding.get("price")
    if price_el is not None:
        set_inner_html(price_el, render_price_html(product))

    _update_detail(binding, "designer", product.designer)
    _update_detail(binding, "country_of_origin", product.country_of_origin)
    _update_detail(binding, "importer_packer_marketer", product.importer_packer_marketer)
    _update_detail(binding, "article_number", product.article_number)

    # Short description: the <p> inside if any, else the element itself
    description_el = binding.get("description")
    if description_el is not None and product.description:
        paragraph = description_el.select_one("p")
        set_text(paragraph if paragraph is not None else description_el, product.description)

    _update_detail(binding, "dimensions", product.dimensions)
    _update_detail(binding, "materials", product.materials)
    _update_detail(binding, "finish", product.finish)

    if product.images:
        _apply_gallery(binding, product)

    if product.reviews:
        render_reviews(binding, product.reviews)


def insert_breadcrumb_schema(binding: ViewBinding, name: str, slug: str, origin: str) -> None:
    """Replace the page's BreadcrumbList JSON-LD with Home > category."""
    schema = {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": 1, "name": "Home", "item": origin},
            {
                "@type": "ListItem",
                "position": 2,
                "name": name,
                "item": f"{origin}/index_decor/category/{slug}",
            },
        ],
    }

    existing = binding.get("breadcrumb_schema")
    if existing is not None:
        existing.decompose()

    script = binding.soup.new_tag("script", attrs={"type": "application/ld+json", "id": "breadcrumb-schema"})
    script.string = Script(json.dumps(schema, ensure_ascii=False))
    if not binding.append_to_head(script):
        logger.debug("no <head>, breadcrumb schema not inserted")


def apply_category_data(binding: ViewBinding, category: Category, slug: str, origin: str) -> None:
    """Write a category or subcategory into the category page anchors."""
    display_title = category.display_title

    title_el = binding.get("category_title")
    if title_el is not None and display_title:
        set_text(title_el, display_title)

    if display_title and slug:
        insert_breadcrumb_schema(binding, display_title, slug, origin)

    binding.set_title(page_title(category.meta_title or category.name or ""))

    description = category.preferred_description
    description_el = binding.get("category_description")
    if description_el is not None and description:
        paragraph = None if description_el.name == "p" else description_el.select_one("p")
        set_text(paragraph if paragraph is not None else description_el, description)

    meta_description = binding.get("meta_description")
    if meta_description is not None and category.meta_description:
        meta_description["content"] = category.meta_description

    og_description = binding.get("og_description")
    if og_description is not None and (category.meta_description or description):
        og_description["content"] = category.meta_description or description

    og_title = binding.get("og_title")
    if og_title is not None and (category.meta_title or display_title):
        og_title["content"] = category.meta_title or display_title


def render_category_products(binding: ViewBinding, products: Sequence[Product]) -> bool:
    """Fill the category product grid. Returns False when the page has none."""
    grid = binding.get("product_grid")
    if grid is None:
        logger.warning("no product grid found on category page")
        return False

    if not products:
        set_inner_html(grid, "<p>No products found in this category.</p>")
        return True

    # Build every card first so a bad product leaves the template grid intact
    items = []
    for product in products:
        item = binding.soup.new_tag("li", attrs={"class": "product"})
        set_inner_html(item, render_fragment(
            "category_product_card",
            link=f"/product/{product.slug}",
            image=product.images[0] if product.images else None,
            name=product.name,
            symbol=product.currency_symbol or DEFAULT_CURRENCY_SYMBOL,
            price=format_amount(product.price),
        ))
        items.append(item)

    grid.clear()
    for item in items:
        grid.append(item)
    return True


def ensure_explore_styles(binding: ViewBinding) -> None:
    """Add the explore card style block to <head> unless it is already there."""
    if binding.has("explore_styles"):
        return
    style = binding.soup.new_tag("style", attrs={"id": "explore-products-styles"})
    style.string = Stylesheet(EXPLORE_PRODUCTS_STYLE)
    binding.append_to_head(style)


def render_explore_products(
    binding: ViewBinding,
    products: Sequence[Product],
    limit: int = EXPLORE_PRODUCT_LIMIT,
) -> List[Product]:
    """Fill the home page explore grid with the first ``limit`` products.

    Returns the products actually rendered.
    """
    grid = binding.get("explore_grid")
    if grid is None:
        return []

    ensure_explore_styles(binding)

    shown = list(products[:limit])
    items = []
    for product in shown:
        first = product.images[0] if product.images else None
        second = product.images[1] if len(product.images) > 1 else first

        item = binding.soup.new_tag("li", attrs={"class": EXPLORE_PRODUCT_ITEM_CLASS})
        set_inner_html(item, render_fragment(
            "explore_product_card",
            productLink=f"/product/{product.slug}",
            productName=product.name,
            imageSrc1=first.src if first else "",
            imageSrc2=second.src if second else "",
            currencySymbol=product.currency_symbol or DEFAULT_CURRENCY_SYMBOL,
            price=format_amount(product.price),
        ))
        items.append(item)

    grid.clear()
    for item in items:
        grid.append(item)
    return shown
