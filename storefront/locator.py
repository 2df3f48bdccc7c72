"""Work out which backend entity a page URL represents.

Both resolvers are ordered lists of small matcher functions. Each matcher
looks at a :class:`PageLocation` and returns a value or ``None``; the first
non-``None`` result wins.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence
from urllib.parse import parse_qs, unquote, urlparse

from storefront.config import LEGACY_PAGE_IDENTIFIERS, NON_PRODUCT_SLUGS
from storefront.logging_config import get_logger
from storefront.models import ResourceIdentifier, ResourceKind

__all__ = [
    "PageLocation",
    "CATEGORY_SLUG_MATCHERS",
    "PRODUCT_IDENTIFIER_MATCHERS",
    "resolve_category_slug",
    "resolve_category_identifier",
    "resolve_product_identifier",
]

logger = get_logger("locator")

CATEGORY_PATH_RE = re.compile(r"/category/([^/]+)")
INDEX_PREFIX_PATH_RE = re.compile(r"/[^/]*index[^/]*\.html/([^/]+)")
INDEX_FILENAME_RE = re.compile(r"index_([^/]+)\.html")
PRODUCT_PATH_RE = re.compile(r"/product/([^/]+)")
PRODUCT_FILENAME_RE = re.compile(r"^index_(.+)\.html$")


@dataclass(frozen=True)
class PageLocation:
    """The parts of a page URL the resolvers care about."""

    href: str
    scheme: str = "http"
    hostname: Optional[str] = None
    port: Optional[str] = None
    path: str = "/"
    query: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str) -> "PageLocation":
        parsed = urlparse(url)
        return cls(
            href=url,
            scheme=parsed.scheme or "http",
            hostname=parsed.hostname,
            port=str(parsed.port) if parsed.port else None,
            path=parsed.path or "/",
            query=parse_qs(parsed.query, keep_blank_values=True),
        )

    @property
    def origin(self) -> str:
        netloc = self.hostname or ""
        if self.port:
            netloc = f"{netloc}:{self.port}"
        return f"{self.scheme}://{netloc}"

    @property
    def segments(self) -> List[str]:
        return [s for s in self.path.split("/") if s]

    @property
    def filename(self) -> str:
        """Last path segment, or index.html for the site root."""
        segments = self.segments
        return segments[-1] if segments else "index.html"

    def param(self, name: str) -> Optional[str]:
        """First value of a query parameter; None when absent."""
        values = self.query.get(name)
        return values[0] if values else None


# =============================================================================
# Category slug
# =============================================================================

def slug_from_query(location: PageLocation) -> Optional[str]:
    return location.param("category") or None


def slug_from_category_path(location: PageLocation) -> Optional[str]:
    match = CATEGORY_PATH_RE.search(location.path)
    return unquote(match.group(1)) if match else None


def slug_from_index_prefix(location: PageLocation) -> Optional[str]:
    # index_decor.html/living, index.html/sofas
    match = INDEX_PREFIX_PATH_RE.search(location.path)
    return unquote(match.group(1)) if match else None


def slug_from_last_segment(location: PageLocation) -> Optional[str]:
    segments = location.segments
    if segments and ".html" not in segments[-1]:
        return unquote(segments[-1])
    return None


def slug_from_index_filename(location: PageLocation) -> Optional[str]:
    match = INDEX_FILENAME_RE.search(location.path)
    return unquote(match.group(1)) if match else None


CategoryMatcher = Callable[[PageLocation], Optional[str]]

CATEGORY_SLUG_MATCHERS: Sequence[CategoryMatcher] = (
    slug_from_query,
    slug_from_category_path,
    slug_from_index_prefix,
    slug_from_last_segment,
    slug_from_index_filename,
)


def resolve_category_slug(location: PageLocation) -> Optional[str]:
    """Category slug for the page, or None when the URL carries none."""
    for matcher in CATEGORY_SLUG_MATCHERS:
        slug = matcher(location)
        if slug:
            logger.debug(f"category slug {slug!r} from {matcher.__name__}")
            return slug
    logger.debug(f"no category slug in {location.href}")
    return None


def resolve_category_identifier(location: PageLocation) -> Optional[ResourceIdentifier]:
    """Category identifier; an explicit ?subcategory= takes over the slug."""
    subcategory = location.param("subcategory")
    if subcategory:
        return ResourceIdentifier(ResourceKind.SUBCATEGORY, subcategory)

    slug = resolve_category_slug(location)
    if slug is None:
        return None
    return ResourceIdentifier(ResourceKind.CATEGORY, slug)


# =============================================================================
# Product identifier
# =============================================================================

_LEGACY_KINDS = {
    "slug": ResourceKind.PRODUCT_BY_SLUG,
    "article": ResourceKind.PRODUCT_BY_ARTICLE,
    "category": ResourceKind.CATEGORY,
}


def product_from_path(location: PageLocation) -> Optional[ResourceIdentifier]:
    match = PRODUCT_PATH_RE.search(location.path)
    if match:
        return ResourceIdentifier(ResourceKind.PRODUCT_BY_SLUG, unquote(match.group(1)))
    return None


def product_from_article_param(location: PageLocation) -> Optional[ResourceIdentifier]:
    value = location.param("article")
    return ResourceIdentifier(ResourceKind.PRODUCT_BY_ARTICLE, value) if value else None


def product_from_slug_param(location: PageLocation) -> Optional[ResourceIdentifier]:
    value = location.param("slug")
    return ResourceIdentifier(ResourceKind.PRODUCT_BY_SLUG, value) if value else None


def product_from_id_param(location: PageLocation) -> Optional[ResourceIdentifier]:
    value = location.param("id")
    return ResourceIdentifier(ResourceKind.PRODUCT_BY_ID, value) if value else None


def product_from_legacy_page(location: PageLocation) -> Optional[ResourceIdentifier]:
    entry = LEGACY_PAGE_IDENTIFIERS.get(location.filename)
    if not entry:
        return None
    key, value = next(iter(entry.items()))
    return ResourceIdentifier(_LEGACY_KINDS[key], value)


def product_from_filename(location: PageLocation) -> Optional[ResourceIdentifier]:
    match = PRODUCT_FILENAME_RE.match(location.filename)
    if match and match.group(1) not in NON_PRODUCT_SLUGS:
        return ResourceIdentifier(ResourceKind.PRODUCT_BY_SLUG, match.group(1))
    return None


ProductMatcher = Callable[[PageLocation], Optional[ResourceIdentifier]]

PRODUCT_IDENTIFIER_MATCHERS: Sequence[ProductMatcher] = (
    product_from_path,
    product_from_article_param,
    product_from_slug_param,
    product_from_id_param,
    product_from_legacy_page,
    product_from_filename,
)


def resolve_product_identifier(location: PageLocation) -> Optional[ResourceIdentifier]:
    """Product identifier for the page, or None when no product should be fetched.

    A legacy listing page (a category entry in the lookup table) stops the
    search: it is never treated as a product page.
    """
    for matcher in PRODUCT_IDENTIFIER_MATCHERS:
        identifier = matcher(location)
        if identifier is None:
            continue
        logger.debug(f"{identifier} from {matcher.__name__}")
        if not identifier.is_product:
            logger.debug(f"{location.filename} is a listing page, no product fetch")
            return None
        return identifier
    return None
