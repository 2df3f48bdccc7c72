"""Rewrite links that point at the theme's staging site.

Some page content was authored against the theme demo domain. Those links
are mapped onto the equivalent local pages instead of leaving the site.
"""

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from storefront.config import STAGING_DOMAIN
from storefront.logging_config import get_logger

__all__ = [
    "ClickOutcome",
    "LinkInterceptor",
    "rewrite_staging_href",
    "rewrite_staging_links",
]

logger = get_logger("links")


def rewrite_staging_href(href: str) -> Optional[str]:
    """Local path for a staging-domain URL, or None for any other link."""
    try:
        parsed = urlparse(href)
    except ValueError:
        return None

    if not parsed.hostname or STAGING_DOMAIN not in parsed.hostname:
        return None

    path = parsed.path or "/"
    if path.endswith("/"):
        path = path[:-1]
    parts = [p for p in path.split("/") if p]

    if "product" in parts:
        index = parts.index("product")
        if len(parts) > index + 1:
            return f"index_{parts[index + 1]}.html"
    if "product-category" in parts:
        index = parts.index("product-category")
        if len(parts) > index + 1:
            return f"/index_decor/category/{parts[index + 1]}"
    if "/products" in path:
        return "index_decor.html"
    return "/"


@dataclass(frozen=True)
class ClickOutcome:
    default_prevented: bool
    target: Optional[str] = None


class LinkInterceptor:
    """Click handler for anchors.

    Staging links get their href rewritten and inline onclick removed, the
    default navigation is cancelled and ``navigate`` is called with the
    local target instead. Other links pass through untouched.
    """

    def __init__(self, navigate: Optional[Callable[[str], None]] = None):
        self.navigate = navigate

    def handle_click(self, anchor: Tag) -> ClickOutcome:
        href = anchor.get("href")
        if not href:
            return ClickOutcome(default_prevented=False)

        target = rewrite_staging_href(str(href))
        if target is None:
            return ClickOutcome(default_prevented=False)

        if anchor.has_attr("onclick"):
            del anchor["onclick"]
        anchor["href"] = target

        if self.navigate is not None:
            try:
                self.navigate(target)
            except Exception as e:
                logger.error(f"Navigation to local target {target} failed: {e}")
        return ClickOutcome(default_prevented=True, target=target)


def rewrite_staging_links(soup: BeautifulSoup) -> int:
    """Rewrite every staging anchor in a document. Returns how many changed."""
    interceptor = LinkInterceptor()
    rewritten = 0
    for anchor in soup.find_all("a", href=True):
        if interceptor.handle_click(anchor).default_prevented:
            rewritten += 1
    if rewritten:
        logger.debug(f"rewrote {rewritten} staging links")
    return rewritten
