"""Furnistør storefront: page hydration and admin forms over the catalog API."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from storefront.api_client import ApiClient, FetchFailure
from storefront.config import detect_api_base_url
from storefront.forms import (
    CategoryFormController,
    FileValidationError,
    RepeatableRowGroup,
    SubcategoryFormController,
)
from storefront.links import LinkInterceptor, rewrite_staging_href
from storefront.locator import (
    PageLocation,
    resolve_category_slug,
    resolve_product_identifier,
)
from storefront.models import Category, Product, ResourceIdentifier, ResourceKind
from storefront.page import PageInitializer, hydrate_page

__all__ = [
    # Version
    "__version__",
    # Config
    "detect_api_base_url",
    # Models
    "Product",
    "Category",
    "ResourceIdentifier",
    "ResourceKind",
    # Backend
    "ApiClient",
    "FetchFailure",
    # Page rendering
    "PageLocation",
    "resolve_category_slug",
    "resolve_product_identifier",
    "PageInitializer",
    "hydrate_page",
    "LinkInterceptor",
    "rewrite_staging_href",
    # Admin forms
    "CategoryFormController",
    "SubcategoryFormController",
    "RepeatableRowGroup",
    "FileValidationError",
]
