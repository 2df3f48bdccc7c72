"""View binding: named anchors of a page template.

The same templates are reused across many pages and each page has only a
few of the anchors, so lookups return ``None`` (or an empty list) instead of
failing.
"""

from typing import Dict, List, Mapping, Optional

from bs4 import BeautifulSoup, Tag

__all__ = [
    "PRODUCT_ANCHORS",
    "CATEGORY_ANCHORS",
    "GRID_ANCHORS",
    "GALLERY_IMAGES",
    "ViewBinding",
    "set_text",
    "set_inner_html",
    "set_paragraph_text",
]

PRODUCT_ANCHORS: Dict[str, str] = {
    "product_name": "#dynamic-product-name",
    "features": "#dynamic-product-features",
    "price": "#dynamic-product-price",
    "designer": "#dynamic-designer-name",
    "country_of_origin": "#dynamic-country-origin",
    "importer_packer_marketer": "#dynamic-importer-packer",
    "article_number": "#dynamic-article-number",
    "description": "#dynamic-product-description",
    "dimensions": "#dynamic-dimensions",
    "materials": "#dynamic-materials",
    "finish": "#dynamic-finish",
    "og_title": 'meta[property="og:title"]',
    "og_description": 'meta[property="og:description"]',
    "og_image": 'meta[property="og:image"]',
    "item_image": 'link[itemprop="image"]',
    "review_list": "#comments .commentlist",
    "review_summary": ".woocommerce-review-rating-summary",
}

CATEGORY_ANCHORS: Dict[str, str] = {
    "category_title": "#dynamic-category-title",
    "category_description": "#dynamic-category-description",
    "meta_description": 'meta[name="description"]',
    "og_description": 'meta[property="og:description"]',
    "og_title": 'meta[property="og:title"]',
    "breadcrumb_schema": "#breadcrumb-schema",
}

GRID_ANCHORS: Dict[str, str] = {
    "product_grid": "#dynamic-product-grid",
    "explore_grid": "#explore-products-grid",
    "explore_styles": "#explore-products-styles",
}

# Anchors that address several elements
GALLERY_IMAGES = "#dynamic-product-gallery .dynamic-product-image"


class ViewBinding:
    """Logical field name -> element of one parsed page.

    Built once per page with :meth:`bind`; render functions only ever talk to
    the document through it.

    Only selectors are stored. Every :meth:`get` queries the document again,
    because rendering swaps nodes out (the breadcrumb script is replaced,
    grids are cleared and refilled) and a cached element would go stale.
    """

    def __init__(self, soup: BeautifulSoup, anchors: Mapping[str, str]):
        self.soup = soup
        self.anchors = dict(anchors)

    @classmethod
    def bind(cls, soup: BeautifulSoup, *anchor_maps: Mapping[str, str]) -> "ViewBinding":
        anchors: Dict[str, str] = {}
        for mapping in anchor_maps or (PRODUCT_ANCHORS, CATEGORY_ANCHORS, GRID_ANCHORS):
            anchors.update(mapping)
        return cls(soup, anchors)

    def get(self, name: str) -> Optional[Tag]:
        selector = self.anchors.get(name)
        if selector is None:
            raise KeyError(f"Unknown anchor: {name}")
        return self.soup.select_one(selector)

    def get_all(self, selector: str) -> List[Tag]:
        return list(self.soup.select(selector))

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def head(self) -> Optional[Tag]:
        return self.soup.head

    def set_title(self, title: str) -> None:
        """Equivalent of assigning document.title; creates <title> if needed."""
        if self.soup.title is not None:
            self.soup.title.string = title
            return
        if self.head is not None:
            title_tag = self.soup.new_tag("title")
            title_tag.string = title
            self.head.append(title_tag)

    def append_to_head(self, tag: Tag) -> bool:
        if self.head is None:
            return False
        self.head.append(tag)
        return True


def set_text(tag: Tag, text: str) -> None:
    """Replace all children with a single text node (textContent)."""
    tag.clear()
    tag.string = text


def set_inner_html(tag: Tag, html: str) -> None:
    """Replace all children with parsed markup (innerHTML)."""
    tag.clear()
    fragment = BeautifulSoup(html, "html.parser")
    for child in list(fragment.contents):
        tag.append(child.extract())


def set_paragraph_text(tag: Tag, text: str) -> None:
    """Write into the first <p> of tag, or make tag hold exactly one <p>."""
    paragraph = tag.select_one("p")
    if paragraph is not None:
        set_text(paragraph, text)
        return
    set_inner_html(tag, "<p></p>")
    tag.p.string = text
