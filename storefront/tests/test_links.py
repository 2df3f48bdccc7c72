"""Tests for rewriting links to the theme staging site."""

from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from storefront.links import LinkInterceptor, rewrite_staging_href, rewrite_staging_links


def anchor(html):
    return BeautifulSoup(html, "html.parser").a


class TestRewriteHref:
    @pytest.mark.parametrize("href, expected", [
        ("https://sites.kaliumtheme.com/product/oak-table", "index_oak-table.html"),
        ("https://sites.kaliumtheme.com/furniture/product/oak-table/", "index_oak-table.html"),
        ("https://sites.kaliumtheme.com/furniture/product-category/chairs/", "/index_decor/category/chairs"),
        ("https://sites.kaliumtheme.com/furniture/products", "index_decor.html"),
        ("https://sites.kaliumtheme.com/furniture/about-us/", "/"),
        ("https://sites.kaliumtheme.com/product/", "/"),
    ])
    def test_staging_links(self, href, expected):
        assert rewrite_staging_href(href) == expected

    @pytest.mark.parametrize("href", [
        "https://example.com/product/oak-table",
        "/index_decor.html",
        "#reviews",
        "mailto:hello@furnistor.test",
    ])
    def test_other_links_untouched(self, href):
        assert rewrite_staging_href(href) is None


class TestLinkInterceptor:
    """Tests for the click handler."""

    def test_staging_click_is_redirected(self):
        navigate = MagicMock()
        a = anchor('<a href="https://sites.kaliumtheme.com/product/oak-table" onclick="track()">Oak</a>')

        outcome = LinkInterceptor(navigate).handle_click(a)

        assert outcome.default_prevented is True
        assert outcome.target == "index_oak-table.html"
        assert a["href"] == "index_oak-table.html"
        assert not a.has_attr("onclick")
        navigate.assert_called_once_with("index_oak-table.html")

    def test_other_click_passes_through(self):
        navigate = MagicMock()
        a = anchor('<a href="https://example.com/" onclick="track()">Out</a>')

        outcome = LinkInterceptor(navigate).handle_click(a)

        assert outcome.default_prevented is False
        assert a["href"] == "https://example.com/"
        assert a.has_attr("onclick")
        navigate.assert_not_called()

    def test_anchor_without_href(self):
        assert LinkInterceptor().handle_click(anchor("<a>x</a>")).default_prevented is False

    def test_navigation_error_is_logged_not_raised(self):
        navigate = MagicMock(side_effect=RuntimeError("blocked"))
        a = anchor('<a href="https://sites.kaliumtheme.com/about/">About</a>')

        outcome = LinkInterceptor(navigate).handle_click(a)

        assert outcome.default_prevented is True
        assert a["href"] == "/"


class TestRewriteDocument:
    def test_counts_rewritten_links(self):
        soup = BeautifulSoup(
            '<a href="https://sites.kaliumtheme.com/product/a">a</a>'
            '<a href="https://example.com/">b</a>'
            '<a href="https://sites.kaliumtheme.com/product-category/rugs/">c</a>',
            "html.parser",
        )

        assert rewrite_staging_links(soup) == 2
        assert [a["href"] for a in soup.find_all("a")] == [
            "index_a.html",
            "https://example.com/",
            "/index_decor/category/rugs",
        ]
