"""Shared fixtures for the storefront test suite."""

from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from storefront.api_client import ApiClient
from storefront.models import Category, Product, ProductImage, Review
from storefront.view_binding import ViewBinding


PRODUCT_PAGE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Product template</title>
  <meta property="og:title" content="">
  <meta property="og:description" content="">
  <meta property="og:image" content="">
  <link itemprop="image" href="">
</head>
<body>
  <h1 id="dynamic-product-name">Placeholder product</h1>
  <div id="dynamic-product-features"><p>Template features</p></div>
  <p id="dynamic-product-price"><span>$0</span></p>
  <div id="dynamic-designer-name"><p>Template designer</p></div>
  <div id="dynamic-country-origin"></div>
  <div id="dynamic-product-description"><p>Template description</p></div>
  <div id="dynamic-dimensions"><p>0 x 0</p></div>
  <div id="dynamic-product-gallery">
    <img class="dynamic-product-image" width="600" src="template-1.jpg">
    <img class="dynamic-product-image" src="template-2.jpg">
  </div>
  <div class="woocommerce-review-rating-summary"></div>
  <div id="comments"><ol class="commentlist"><li>Template review</li></ol></div>
  <a id="staging" href="https://sites.kaliumtheme.com/furniture/product/oak-table/" onclick="go()">Oak</a>
</body>
</html>
"""

CATEGORY_PAGE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Category template</title>
  <meta name="description" content="">
  <meta property="og:title" content="">
  <meta property="og:description" content="">
  <script type="application/ld+json" id="breadcrumb-schema">{"old": true}</script>
</head>
<body>
  <h1 id="dynamic-category-title">Template category</h1>
  <div id="dynamic-category-description"><p>Template category text</p></div>
  <ul id="dynamic-product-grid"><li>Template product</li></ul>
</body>
</html>
"""

HOME_PAGE_HTML = """<!DOCTYPE html>
<html>
<head><title>Furnistør</title></head>
<body>
  <ul id="explore-products-grid"><li>Template product</li></ul>
</body>
</html>
"""


@pytest.fixture
def product_page_html():
    return PRODUCT_PAGE_HTML


@pytest.fixture
def category_page_html():
    return CATEGORY_PAGE_HTML


@pytest.fixture
def home_page_html():
    return HOME_PAGE_HTML


def bind_html(html):
    """Parse a page and return (soup, binding)."""
    soup = BeautifulSoup(html, "html.parser")
    return soup, ViewBinding.bind(soup)


@pytest.fixture
def product_binding(product_page_html):
    return bind_html(product_page_html)


@pytest.fixture
def category_binding(category_page_html):
    return bind_html(category_page_html)


@pytest.fixture
def home_binding(home_page_html):
    return bind_html(home_page_html)


@pytest.fixture
def product_payload():
    """A product as the backend returns it."""
    return {
        "_id": "64f0c0ffee",
        "name": "Tact Mirror",
        "slug": "tact-mirror",
        "articleNumber": "TACT-001",
        "price": 999,
        "originalPrice": 1200,
        "currencySymbol": "$",
        "designer": "Thomas Bentzen",
        "countryOfOrigin": "Denmark",
        "dimensions": "60 x 90 cm",
        "description": "A round wall mirror with an oak frame.",
        "features": "Oak frame, beveled glass",
        "images": [
            {"src": "https://cdn.test/tact-1.webp", "thumb": "https://cdn.test/tact-1-thumb.webp", "alt": "Tact front"},
            {"src": "https://cdn.test/tact-2.webp"},
        ],
        "reviews": [
            {"rating": 5, "author": "Ana", "date": "2024-01-05", "comment": "Lovely."},
            {"rating": 3, "author": "Ben", "date": "2024-03-10T12:30:00Z", "comment": "Fine."},
        ],
    }


@pytest.fixture
def product(product_payload):
    return Product.from_api(product_payload)


@pytest.fixture
def category():
    return Category(
        name="Armchairs",
        slug="armchairs",
        h1_tag="Designer Armchairs",
        meta_title="Armchairs | Shop",
        meta_description="Comfortable armchairs.",
        header_description="Sit back in style.",
        description="Long description.",
    )


def make_product(index, images=2, price=100):
    """Small listing product with ``images`` images."""
    return Product(
        name=f"Product {index}",
        slug=f"product-{index}",
        price=price,
        images=[ProductImage(src=f"https://cdn.test/p{index}-{n}.webp") for n in range(images)],
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def mock_client():
    """ApiClient double with empty listings by default."""
    client = MagicMock(spec=ApiClient)
    client.base_url = "http://api.test/api"
    client.fetch_products.return_value = []
    client.fetch_categories.return_value = []
    return client


@pytest.fixture
def reviews():
    return [Review(rating=5, author="Ana"), Review(rating=3, author="Ben")]
