"""Page initialization: resolve, fetch and patch one storefront page.

Three independent sections run in order: product page, category page,
explore grid. A failing section is logged and reported, never raised, so the
page keeps its static template content for that part.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from bs4 import BeautifulSoup

from storefront.api_client import ApiClient, FetchFailure
from storefront.config import EXPLORE_PRODUCT_LIMIT, INIT_DELAY
from storefront.links import rewrite_staging_links
from storefront.locator import (
    PageLocation,
    resolve_category_identifier,
    resolve_category_slug,
    resolve_product_identifier,
)
from storefront.logging_config import get_logger, log_page_event
from storefront.models import Category, Product, ResourceIdentifier, ResourceKind
from storefront.render import (
    apply_category_data,
    apply_product_data,
    ensure_explore_styles,
    render_category_products,
    render_explore_products,
)
from storefront.view_binding import ViewBinding

__all__ = [
    "RENDERED",
    "SKIPPED",
    "FAILED",
    "InitReport",
    "PageInitializer",
    "fetch_product",
    "fetch_category_with_fallback",
    "hydrate_page",
]

logger = get_logger("page")

RENDERED = "rendered"
SKIPPED = "skipped"
FAILED = "failed"

SECTIONS = ("product", "category", "explore")


@dataclass
class InitReport:
    """Outcome per section of one initialization run."""

    trigger: str
    sections: Dict[str, str] = field(default_factory=dict)
    deduplicated: bool = False

    @property
    def failed(self) -> bool:
        return FAILED in self.sections.values()


def fetch_product(client: ApiClient, identifier: ResourceIdentifier) -> Product:
    if identifier.kind is ResourceKind.PRODUCT_BY_SLUG:
        return client.fetch_product_by_slug(identifier.value)
    if identifier.kind is ResourceKind.PRODUCT_BY_ARTICLE:
        return client.fetch_product_by_article(identifier.value)
    if identifier.kind is ResourceKind.PRODUCT_BY_ID:
        return client.fetch_product_by_id(identifier.value)
    raise ValueError(f"Not a product identifier: {identifier}")


def fetch_category_with_fallback(
    client: ApiClient,
    identifier: ResourceIdentifier,
) -> Optional[Category]:
    """Fetch the slug as a category, then once as a subcategory.

    Category always goes first, ``?subcategory=`` included. Returns None when
    both fetches fail. Never more than two requests.
    """
    order: Tuple[Callable[[str], Category], ...] = (
        client.fetch_category_by_slug,
        client.fetch_subcategory_by_slug,
    )

    for attempt, fetch in enumerate(order):
        try:
            return fetch(identifier.value)
        except FetchFailure as e:
            if attempt == 0:
                logger.info(f"{identifier.value!r} not found as a category "
                            f"(status {e.status}), trying subcategory")
            else:
                logger.error(f"Both category and subcategory fetches failed for {identifier.value!r}")
                log_page_event("category_fetch_failed", {
                    "slug": identifier.value,
                    "status": e.status,
                }, level=logging.WARNING, logger_name="page")
    return None


class PageInitializer:
    """Runs the three page sections against one parsed document.

    The page load fires two triggers (DOMContentLoaded, then load); the
    second run is skipped by the ``initialized`` guard.
    """

    def __init__(
        self,
        client: ApiClient,
        soup: BeautifulSoup,
        location: PageLocation,
        delay: float = INIT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        explore_limit: int = EXPLORE_PRODUCT_LIMIT,
    ):
        self.client = client
        self.soup = soup
        self.location = location
        self.binding = ViewBinding.bind(soup)
        self.delay = delay
        self.sleep = sleep
        self.explore_limit = explore_limit
        self.initialized = False

    def run(self, trigger: str = "DOMContentLoaded") -> InitReport:
        report = InitReport(trigger=trigger)
        if self.initialized:
            logger.debug(f"Already initialized, ignoring {trigger}")
            report.deduplicated = True
            return report
        self.initialized = True

        logger.info(f"Initializing {self.location.href} on {trigger}")
        if self.delay > 0:
            self.sleep(self.delay)

        steps = {
            "product": self.initialize_product_page,
            "category": self.initialize_category_page,
            "explore": self.render_explore_grid,
        }
        for section in SECTIONS:
            report.sections[section] = self._run_section(section, steps[section])
        return report

    def _run_section(self, section: str, step: Callable[[], str]) -> str:
        try:
            return step()
        except FetchFailure as e:
            logger.error(f"{section} section failed: {e} ({e.url})")
            log_page_event("section_failed", {
                "section": section,
                "url": e.url,
                "status": e.status,
                "page": self.location.href,
            }, level=logging.ERROR, logger_name="page")
        except Exception as e:
            logger.exception(f"{section} section failed: {e}")
            log_page_event("section_failed", {
                "section": section,
                "error": str(e),
                "page": self.location.href,
            }, level=logging.ERROR, logger_name="page")
        return FAILED

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def initialize_product_page(self) -> str:
        identifier = resolve_product_identifier(self.location)
        if identifier is None:
            logger.debug("No product identifier for this page")
            return SKIPPED

        logger.info(f"Fetching product {identifier.kind.value}={identifier.value}")
        product = fetch_product(self.client, identifier)
        apply_product_data(self.binding, product)
        return RENDERED

    def initialize_category_page(self) -> str:
        if not (self.binding.has("category_title") or self.binding.has("category_description")):
            logger.debug("No category elements found, skipping")
            return SKIPPED

        identifier = resolve_category_identifier(self.location)
        if identifier is None:
            logger.debug("No valid category slug found")
            return SKIPPED

        category = fetch_category_with_fallback(self.client, identifier)
        if category is None:
            return FAILED

        # Listing uses the URL's category slug, not the ?subcategory= override
        listing_slug = resolve_category_slug(self.location)
        try:
            render_category_products(self.binding, self.client.fetch_products(listing_slug))
        except FetchFailure as e:
            logger.error(f"Could not load category products for {listing_slug!r}: {e}")

        apply_category_data(self.binding, category, identifier.value, self.location.origin)
        return RENDERED

    def render_explore_grid(self) -> str:
        if not self.binding.has("explore_grid"):
            return SKIPPED

        # Styles go in even when the product fetch fails
        ensure_explore_styles(self.binding)
        products = self.client.fetch_products()
        shown = render_explore_products(self.binding, products, limit=self.explore_limit)
        logger.info(f"Explore grid rendered with {len(shown)} products")
        return RENDERED


def hydrate_page(
    client: ApiClient,
    html: str,
    url: str,
    delay: float = INIT_DELAY,
    rewrite_links: bool = True,
) -> Tuple[str, InitReport]:
    """Parse a page template, run both load triggers, return the patched HTML."""
    soup = BeautifulSoup(html, "html.parser")
    initializer = PageInitializer(client, soup, PageLocation.from_url(url), delay=delay)

    report = initializer.run("DOMContentLoaded")
    initializer.run("load")

    if rewrite_links:
        rewrite_staging_links(soup)
    return str(soup), report
