"""Tests for page initialization across the three sections."""

from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from storefront.api_client import FetchFailure
from storefront.locator import PageLocation
from storefront.models import Category, Product, ResourceIdentifier, ResourceKind
from storefront.page import (
    FAILED,
    RENDERED,
    SKIPPED,
    PageInitializer,
    fetch_category_with_fallback,
    fetch_product,
    hydrate_page,
)


def not_found(url="http://api.test/api/x"):
    return FetchFailure("HTTP error! status: 404", url=url, status=404)


def make_initializer(client, html, url, **kwargs):
    soup = BeautifulSoup(html, "html.parser")
    kwargs.setdefault("sleep", MagicMock())
    return soup, PageInitializer(client, soup, PageLocation.from_url(url), **kwargs)


class TestFetchProduct:
    @pytest.mark.parametrize("kind, method", [
        (ResourceKind.PRODUCT_BY_SLUG, "fetch_product_by_slug"),
        (ResourceKind.PRODUCT_BY_ARTICLE, "fetch_product_by_article"),
        (ResourceKind.PRODUCT_BY_ID, "fetch_product_by_id"),
    ])
    def test_dispatch(self, mock_client, kind, method):
        fetch_product(mock_client, ResourceIdentifier(kind, "x"))
        getattr(mock_client, method).assert_called_once_with("x")

    def test_rejects_category_identifier(self, mock_client):
        with pytest.raises(ValueError):
            fetch_product(mock_client, ResourceIdentifier(ResourceKind.CATEGORY, "rugs"))


class TestCategoryFallback:
    """Category/subcategory fallback: at most two fetches."""

    def test_category_found_first(self, mock_client, category):
        mock_client.fetch_category_by_slug.return_value = category

        result = fetch_category_with_fallback(mock_client, ResourceIdentifier(ResourceKind.CATEGORY, "armchairs"))

        assert result is category
        mock_client.fetch_subcategory_by_slug.assert_not_called()

    def test_falls_back_to_subcategory_once(self, mock_client):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge Chairs")

        result = fetch_category_with_fallback(
            mock_client, ResourceIdentifier(ResourceKind.CATEGORY, "lounge-chairs")
        )

        assert result.name == "Lounge Chairs"
        mock_client.fetch_category_by_slug.assert_called_once_with("lounge-chairs")
        mock_client.fetch_subcategory_by_slug.assert_called_once_with("lounge-chairs")

    def test_subcategory_identifier_still_tries_category_first(self, mock_client):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge")

        result = fetch_category_with_fallback(mock_client, ResourceIdentifier(ResourceKind.SUBCATEGORY, "lounge"))

        assert result.name == "Lounge"
        mock_client.fetch_category_by_slug.assert_called_once_with("lounge")
        mock_client.fetch_subcategory_by_slug.assert_called_once_with("lounge")

    def test_subcategory_identifier_prefers_existing_category(self, mock_client, category):
        mock_client.fetch_category_by_slug.return_value = category
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge")

        result = fetch_category_with_fallback(mock_client, ResourceIdentifier(ResourceKind.SUBCATEGORY, "lounge"))

        assert result is category
        mock_client.fetch_subcategory_by_slug.assert_not_called()

    def test_both_fail(self, mock_client):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.side_effect = not_found()

        assert fetch_category_with_fallback(mock_client, ResourceIdentifier(ResourceKind.CATEGORY, "x")) is None
        assert mock_client.fetch_category_by_slug.call_count == 1
        assert mock_client.fetch_subcategory_by_slug.call_count == 1


class TestProductSection:
    def test_path_slug_used_over_id(self, mock_client, product_page_html, product):
        mock_client.fetch_product_by_slug.return_value = product
        soup, initializer = make_initializer(mock_client, product_page_html, "http://localhost/product/abc?id=42")

        report = initializer.run()

        mock_client.fetch_product_by_slug.assert_called_once_with("abc")
        mock_client.fetch_product_by_id.assert_not_called()
        assert report.sections["product"] == RENDERED
        assert soup.select_one("#dynamic-product-name").get_text() == "Tact Mirror"

    def test_failure_keeps_template(self, mock_client, product_page_html):
        mock_client.fetch_product_by_slug.side_effect = not_found()
        soup, initializer = make_initializer(mock_client, product_page_html, "http://localhost/product/gone")

        report = initializer.run()

        assert report.sections["product"] == FAILED
        assert report.failed
        assert soup.select_one("#dynamic-product-name").get_text() == "Placeholder product"

    def test_listing_page_skips_product(self, mock_client, category_page_html):
        _, initializer = make_initializer(mock_client, category_page_html, "http://localhost/index_decor.html")
        mock_client.fetch_category_by_slug.return_value = Category(name="Decor")

        report = initializer.run()

        assert report.sections["product"] == SKIPPED
        mock_client.fetch_product_by_slug.assert_not_called()


class TestCategorySection:
    """Tests for the category page section."""

    def test_subcategory_fallback_renders(self, mock_client, category_page_html, product_factory):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge Chairs", h1_tag="Lounge")
        mock_client.fetch_products.return_value = [product_factory(1)]
        soup, initializer = make_initializer(
            mock_client, category_page_html, "http://localhost/index_decor/category/lounge-chairs"
        )

        report = initializer.run()

        assert report.sections["category"] == RENDERED
        assert mock_client.fetch_subcategory_by_slug.call_count == 1
        assert soup.select_one("#dynamic-category-title").get_text() == "Lounge"
        mock_client.fetch_products.assert_called_once_with("lounge-chairs")
        assert len(soup.select("#dynamic-product-grid > li.product")) == 1

    def test_both_fetches_fail(self, mock_client, category_page_html):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.side_effect = not_found()
        soup, initializer = make_initializer(
            mock_client, category_page_html, "http://localhost/index_decor/category/nothing"
        )

        report = initializer.run()

        assert report.sections["category"] == FAILED
        assert soup.select_one("#dynamic-category-title").get_text() == "Template category"
        mock_client.fetch_products.assert_not_called()

    def test_listing_failure_still_patches_category(self, mock_client, category_page_html, category):
        mock_client.fetch_category_by_slug.return_value = category
        mock_client.fetch_products.side_effect = FetchFailure("Failed to reach x", url="x")
        soup, initializer = make_initializer(
            mock_client, category_page_html, "http://localhost/index_decor/category/armchairs"
        )

        report = initializer.run()

        assert report.sections["category"] == RENDERED
        assert soup.select_one("#dynamic-category-title").get_text() == "Designer Armchairs"

    def test_subcategory_parameter(self, mock_client, category_page_html):
        mock_client.fetch_category_by_slug.side_effect = not_found()
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge")
        _, initializer = make_initializer(
            mock_client,
            category_page_html,
            "http://localhost/index_decor/category/armchairs?subcategory=lounge",
        )

        initializer.run()

        mock_client.fetch_category_by_slug.assert_called_once_with("lounge")
        mock_client.fetch_subcategory_by_slug.assert_called_once_with("lounge")
        mock_client.fetch_products.assert_called_once_with("armchairs")

    def test_subcategory_parameter_renders_category_when_both_exist(self, mock_client, category_page_html, category):
        mock_client.fetch_category_by_slug.return_value = category
        mock_client.fetch_subcategory_by_slug.return_value = Category(name="Lounge", h1_tag="Lounge")
        soup, initializer = make_initializer(
            mock_client,
            category_page_html,
            "http://localhost/index_decor/category/armchairs?subcategory=lounge",
        )

        initializer.run()

        assert soup.select_one("#dynamic-category-title").get_text() == "Designer Armchairs"
        mock_client.fetch_subcategory_by_slug.assert_not_called()

    def test_products_and_category_data_both_render(self, mock_client, category_page_html, category, product_factory):
        mock_client.fetch_category_by_slug.return_value = category
        mock_client.fetch_products.return_value = [product_factory(1), product_factory(2)]
        soup, initializer = make_initializer(
            mock_client, category_page_html, "http://localhost/index_decor/category/armchairs"
        )

        report = initializer.run()

        assert report.sections["category"] == RENDERED
        cards = soup.select("#dynamic-product-grid > li.product")
        assert [c.select_one("h2").get_text() for c in cards] == ["Product 1", "Product 2"]
        assert soup.select_one("#dynamic-category-title").get_text() == "Designer Armchairs"
        assert soup.title.get_text().startswith("Armchairs | Shop")

    def test_page_without_category_anchors(self, mock_client, home_page_html):
        _, initializer = make_initializer(mock_client, home_page_html, "http://localhost/shop/tables")

        report = initializer.run()

        assert report.sections["category"] == SKIPPED
        mock_client.fetch_category_by_slug.assert_not_called()


class TestExploreSection:
    def test_explore_grid(self, mock_client, home_page_html, product_factory):
        mock_client.fetch_products.return_value = [product_factory(i) for i in range(20)]
        soup, initializer = make_initializer(mock_client, home_page_html, "http://localhost/")

        report = initializer.run()

        assert report.sections == {"product": SKIPPED, "category": SKIPPED, "explore": RENDERED}
        mock_client.fetch_products.assert_called_once_with()
        assert len(soup.select("#explore-products-grid > li")) == 12

    def test_product_failure_does_not_block_explore(self, mock_client, product_page_html, product_factory):
        html = product_page_html.replace(
            "</body>", '<ul id="explore-products-grid"></ul></body>'
        )
        mock_client.fetch_product_by_slug.side_effect = not_found()
        mock_client.fetch_products.return_value = [product_factory(1)]
        soup, initializer = make_initializer(mock_client, html, "http://localhost/product/gone")

        report = initializer.run()

        assert report.sections["product"] == FAILED
        assert report.sections["explore"] == RENDERED
        assert len(soup.select("#explore-products-grid > li")) == 1

    def test_styles_injected_when_fetch_fails(self, mock_client, home_page_html):
        mock_client.fetch_products.side_effect = not_found()
        soup, initializer = make_initializer(mock_client, home_page_html, "http://localhost/")

        report = initializer.run()

        assert report.sections["explore"] == FAILED
        assert len(soup.head.select("style#explore-products-styles")) == 1

    def test_unexpected_error_is_contained(self, mock_client, home_page_html):
        mock_client.fetch_products.side_effect = RuntimeError("boom")
        _, initializer = make_initializer(mock_client, home_page_html, "http://localhost/")

        assert initializer.run().sections["explore"] == FAILED


class TestInitializationOrder:
    """Delay and the two load triggers."""

    def test_second_trigger_is_deduplicated(self, mock_client, home_page_html):
        _, initializer = make_initializer(mock_client, home_page_html, "http://localhost/")

        first = initializer.run("DOMContentLoaded")
        second = initializer.run("load")

        assert first.deduplicated is False
        assert second.deduplicated is True
        assert second.sections == {}
        assert mock_client.fetch_products.call_count == 1

    def test_delay_before_fetching(self, mock_client, home_page_html):
        sleep = MagicMock()
        _, initializer = make_initializer(mock_client, home_page_html, "http://localhost/", delay=0.1, sleep=sleep)

        initializer.run()

        sleep.assert_called_once_with(0.1)

    def test_no_delay(self, mock_client, home_page_html):
        sleep = MagicMock()
        _, initializer = make_initializer(mock_client, home_page_html, "http://localhost/", delay=0, sleep=sleep)

        initializer.run()

        sleep.assert_not_called()


class TestHydratePage:
    def test_returns_patched_html(self, mock_client, product_page_html):
        mock_client.fetch_product_by_slug.return_value = Product(name="Oak Table", price=450)

        html, report = hydrate_page(mock_client, product_page_html, "http://localhost/product/oak-table", delay=0)

        assert report.trigger == "DOMContentLoaded"
        assert mock_client.fetch_product_by_slug.call_count == 1
        soup = BeautifulSoup(html, "html.parser")
        assert soup.title.get_text() == "Oak Table – Furnistør"
        staging = soup.select_one("#staging")
        assert staging["href"] == "index_oak-table.html"
        assert not staging.has_attr("onclick")

    def test_staging_links_can_be_kept(self, mock_client, home_page_html):
        html = home_page_html.replace(
            "</body>", '<a id="staging" href="https://sites.kaliumtheme.com/about/">About</a></body>'
        )

        result, _ = hydrate_page(mock_client, html, "http://localhost/", delay=0, rewrite_links=False)

        assert "https://sites.kaliumtheme.com/about/" in result
