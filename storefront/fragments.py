"""Markup fragments written into theme pages.

The fragments copy the theme's own WooCommerce markup so injected content
looks and reads (screen readers included) like the server-rendered pages.
Placeholders are Jinja expressions; values are autoescaped.
"""

from typing import Any

from jinja2 import DictLoader, Environment

__all__ = [
    "EXPLORE_PRODUCTS_STYLE",
    "EXPLORE_PRODUCT_ITEM_CLASS",
    "render_fragment",
]

PRICE_REGULAR = (
    '<span class="woocommerce-Price-amount amount"><bdi>'
    '<span class="woocommerce-Price-currencySymbol">{{ symbol }}</span>{{ price }}'
    "</bdi></span>"
)

PRICE_SALE = (
    '<del aria-hidden="true"><span class="woocommerce-Price-amount amount"><bdi>'
    '<span class="woocommerce-Price-currencySymbol">{{ symbol }}</span>{{ original_price }}'
    "</bdi></span></del> "
    '<span class="screen-reader-text">Original price was: {{ symbol }}{{ original_price }}.</span>'
    '<ins aria-hidden="true"><span class="woocommerce-Price-amount amount"><bdi>'
    '<span class="woocommerce-Price-currencySymbol">{{ symbol }}</span>{{ price }}'
    "</bdi></span></ins>"
    '<span class="screen-reader-text">Current price is: {{ symbol }}{{ price }}.</span>'
)

REVIEW_ITEM = """
<div id="comment-{{ number }}" class="comment_container">
  <div class="comment-text">
    <div class="star-rating" role="img" aria-label="Rated {{ rating }} out of 5">
      <span style="width:{{ percent }}%">Rated <strong class="rating">{{ rating }}</strong> out of 5</span>
    </div>
    <p class="meta">
      <strong class="woocommerce-review__author">{{ author }}</strong>
      <span class="woocommerce-review__dash">–</span>
      <time class="woocommerce-review__published-date" datetime="{{ iso_date }}">{{ display_date }}</time>
    </p>
    <div class="description">
      <p>{{ comment }}</p>
    </div>
  </div>
</div>
"""

REVIEW_SUMMARY = """
<div class="star-rating" role="img" aria-label="Rated {{ average }} out of 5" style="font-size: 1.2em;">
  <span style="width:{{ percent }}%">Rated <strong class="rating">{{ average }}</strong> out of 5</span>
</div>
<p style="margin-top: 0.5em; color: #646360;">Based on {{ count }} review{{ "" if count == 1 else "s" }}</p>
"""

CATEGORY_PRODUCT_CARD = """
<a href="{{ link }}" class="woocommerce-LoopProduct-link woocommerce-loop-product__link">
{% if image %}
  <img width="300" height="300" src="{{ image.src }}" class="attachment-woocommerce_thumbnail size-woocommerce_thumbnail" alt="{{ image.alt or name }}" />
{% endif %}
  <h2 class="woocommerce-loop-product__title">{{ name }}</h2>
  <span class="price">
    <span class="woocommerce-Price-amount amount">
      <bdi><span class="woocommerce-Price-currencySymbol">{{ symbol }}</span>{{ price }}</bdi>
    </span>
  </span>
</a>
"""

EXPLORE_PRODUCT_ITEM_CLASS = (
    "product type-product status-publish instock has-post-thumbnail featured "
    "shipping-taxable purchasable product-type-simple"
)

EXPLORE_PRODUCT_CARD = """
<div class="lb-element lb-element-woocommerce-product-row lb-element-woocommerce-product-row-53a2a62b8b visible-always visible-md-always visible-xl-always row">
    <div class="lb-element lb-element-woocommerce-product-column lb-element-woocommerce-product-column-fb57d1a6ea visible-always visible-md-always visible-xl-always col col-auto-grow col-md-auto-grow col-xl-auto-grow">
        <div class="lb-element lb-element-woocommerce-product-images lb-element-woocommerce-product-images-496bcb030c visible-always visible-md-always visible-xl-always">
            <div class="image-set image-set--hover-transition-fade">
                <div class="image-set__entry image-set__entry--hover-invisible">
                    <a href="{{ productLink }}" aria-label="{{ productName }}">
                        <span class="image-placeholder loop-product-image" style="--k-ratio:0.666667">
                            <img loading="lazy" decoding="async" width="800" height="1200" src="{{ imageSrc1 }}" class="attachment-woocommerce_thumbnail size-woocommerce_thumbnail" alt="{{ productName }}" />
                        </span>
                    </a>
                </div>
                <div class="image-set__entry image-set__entry--overlay image-set__entry--hover-visible">
                    <a href="{{ productLink }}" aria-label="{{ productName }}">
                        <span class="image-placeholder loop-product-image" style="--k-ratio:0.666667">
                            <img loading="lazy" decoding="async" width="800" height="1200" src="{{ imageSrc2 }}" class="attachment-woocommerce_thumbnail size-woocommerce_thumbnail" alt="{{ productName }}" />
                        </span>
                    </a>
                </div>
            </div>
        </div>
        <div class="lb-element lb-element-woocommerce-product-row lb-element-woocommerce-product-row-3068b4958c visible-always visible-md-always visible-xl-always row">
            <div class="lb-element lb-element-woocommerce-product-column lb-element-woocommerce-product-column-a715305e66 visible-always visible-md-always visible-xl-always col col-10 col-md-10 col-xl-10">
                <h3 class="lb-element lb-element-woocommerce-product-title lb-element-woocommerce-product-title-6e814bb413 visible-always visible-md-always visible-xl-always link-plain">
                    <a href="{{ productLink }}" class="woocommerce-LoopProduct-link woocommerce-loop-product__link">{{ productName }}</a>
                </h3>
                <div class="lb-element lb-element-woocommerce-product-swap-on-hover lb-element-woocommerce-product-swap-on-hover-9084dc5655 visible-always visible-md-always visible-xl-always swap-on-hover" data-hover-attach="product-hover">
                    <div class="lb-element lb-element-woocommerce-product-price lb-element-woocommerce-product-price-485f9e8dfb visible-always visible-md-always visible-xl-always">
                        <span class="price">
                            <span class="woocommerce-Price-amount amount">
                                <bdi><span class="woocommerce-Price-currencySymbol">{{ currencySymbol }}</span>{{ price }}</bdi>
                            </span>
                        </span>
                    </div>
                    <div class="lb-element lb-element-woocommerce-product-add-to-cart lb-element-woocommerce-product-add-to-cart-7b2c999c7c visible-always visible-md-hover visible-xl-hover visible-hover--animate visible-hover--animate-fast visible-hover--fade">
                        <a href="{{ productLink }}" class="add-to-cart link-button product_type_simple" aria-label="View details for {{ productName }}">
                            <span class="link-button__content link-button__content--icon">
                                <span class="button-icon"><i class="kalium-icon-plus"></i></span>
                                <span class="link-button__loading"></span>
                            </span>
                            <span class="link-button__content link-button__content--text">View Details</span>
                        </a>
                    </div>
                </div>
            </div>
            <div class="lb-element lb-element-woocommerce-product-column lb-element-woocommerce-product-column-71d730a90d d-flex justify-content-end justify-content-md-end justify-content-xl-end visible-always visible-md-always visible-xl-always col col-auto-grow col-md-auto-grow col-xl-auto-grow">
                <div class="lb-element lb-element-woocommerce-product-wishlist lb-element-woocommerce-product-wishlist-ad1269863e visible-hover visible-md-hover visible-xl-hover visible-hover--animate visible-hover--animate-fast visible-hover--fade">
                    <a href="#" class="add-to-wishlist link-button" rel="nofollow" data-tooltip="Add to wishlist" data-tooltip-placement="top">
                        <span class="link-button__content link-button__content--icon">
                            <span class="button-icon"><i class="kalium-icon-add-to-wishlist"></i></span>
                        </span>
                    </a>
                </div>
            </div>
        </div>
    </div>
</div>
"""

EXPLORE_PRODUCTS_STYLE = """
.product .lb-element-woocommerce-product-row-53a2a62b8b {
    height: 100%;
    background-color: var(--k-color-7);
}
.product .lb-element-woocommerce-product-images-496bcb030c {
    margin-bottom: 1.5rem;
}
.product .lb-element-woocommerce-product-images-496bcb030c .image-set__navigation-button {
    border-radius: 50%;
}
.product .lb-element-woocommerce-product-images-496bcb030c img {
    aspect-ratio: 8/9;
}
.product .lb-element-woocommerce-product-title-6e814bb413 {
    margin-bottom: 0.25em;
}
.product .lb-element-woocommerce-product-swap-on-hover-9084dc5655 {
    font-size: 0.875em;
}
.product .lb-element-woocommerce-product-add-to-cart-7b2c999c7c .add-to-cart {
    color: var(--k-color-3);
}
.product .lb-element-woocommerce-product-add-to-cart-7b2c999c7c .add-to-cart:hover {
    color: var(--k-color-2);
}
.product .lb-element-woocommerce-product-wishlist-ad1269863e {
    top: 1em;
    right: 1.25em;
}
.product .lb-element-woocommerce-product-wishlist-ad1269863e .add-to-wishlist {
    color: var(--k-color-3);
}
.product .lb-element-woocommerce-product-wishlist-ad1269863e .add-to-wishlist:hover {
    color: var(--k-color-4);
}
"""

_env = Environment(
    loader=DictLoader({
        "price_regular": PRICE_REGULAR,
        "price_sale": PRICE_SALE,
        "review_item": REVIEW_ITEM,
        "review_summary": REVIEW_SUMMARY,
        "category_product_card": CATEGORY_PRODUCT_CARD,
        "explore_product_card": EXPLORE_PRODUCT_CARD,
    }),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_fragment(template_name: str, /, **context: Any) -> str:
    """Render one of the named fragments above.

    The template name is positional-only so fragments can use ``name`` as a
    placeholder.
    """
    return _env.get_template(template_name).render(**context)
