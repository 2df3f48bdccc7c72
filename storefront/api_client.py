"""REST client for the furniture catalog backend."""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests  # type: ignore[import-untyped]

from storefront.config import HEADERS, REQUEST_TIMEOUT
from storefront.logging_config import get_logger, log_page_event
from storefront.models import Category, Product, unwrap_entity, unwrap_list

__all__ = [
    "ApiClient",
    "FetchFailure",
    "create_session",
]

logger = get_logger("api")

# (field name, (filename, content, content type)) as accepted by requests
FilePart = Tuple[str, Tuple[str, Any, Optional[str]]]


class FetchFailure(Exception):
    """Raised when a backend call returns non-2xx or never gets a response."""

    def __init__(
        self,
        message: str,
        url: str,
        status: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.url = url
        self.status = status
        self.server_message = server_message


def create_session() -> requests.Session:
    """Create a requests Session with the storefront's default headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    return session


def _server_message(resp: requests.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        return str(message) if message else None
    return None


class ApiClient:
    """One object per backend; owns the base URL and the HTTP session.

    Every ``fetch_*`` call issues a single request and raises
    :class:`FetchFailure` on a non-2xx status, a transport error or an
    undecodable body. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"ApiClient({self.base_url!r})"

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Any:
        url = self._url(path)
        logger.debug(f"{method} {url} params={params}")

        try:
            resp = self.session.request(method, url, params=params, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {method} {url}: {e}")
            log_page_event("fetch_failed", {"url": url, "method": method, "error": str(e)},
                           logger_name="api")
            raise FetchFailure(f"Failed to reach {url}: {e}", url=url) from e

        if not resp.ok:
            server_message = _server_message(resp)
            logger.error(f"HTTP error {resp.status_code} for {method} {url}")
            log_page_event("fetch_failed", {
                "url": url,
                "method": method,
                "status": resp.status_code,
                "server_message": server_message,
            }, logger_name="api")
            raise FetchFailure(
                f"HTTP error! status: {resp.status_code}",
                url=url,
                status=resp.status_code,
                server_message=server_message,
            )

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {method} {url}: {e}")
            raise FetchFailure(f"Invalid JSON from {url}", url=url, status=resp.status_code) from e

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def check_health(self) -> bool:
        """Probe /health. Logs the outcome and never raises."""
        url = self._url("/health")
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Backend server is not reachable at {self.base_url}: {e}")
            return False

        if resp.ok:
            logger.info("Backend server is reachable")
            return True
        logger.warning(f"Backend server returned error status: {resp.status_code}")
        return False

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def fetch_product_by_id(self, product_id: str) -> Product:
        return Product.from_api(self.get_json(f"/products/{quote(str(product_id), safe='')}"))

    def fetch_product_by_slug(self, slug: str) -> Product:
        return Product.from_api(self.get_json(f"/products/slug/{quote(slug, safe='')}"))

    def fetch_product_by_article(self, article_number: str) -> Product:
        return Product.from_api(self.get_json(f"/products/article/{quote(article_number, safe='')}"))

    def fetch_products(self, category: Optional[str] = None) -> List[Product]:
        """Active products, optionally limited to one category slug."""
        params: Dict[str, Any] = {"isActive": "true"}
        if category:
            params["category"] = category
        products = unwrap_list(self.get_json("/products", params=params))
        logger.debug(f"fetch_products result length: {len(products)}")
        return [Product.from_api(p) for p in products if isinstance(p, dict)]

    def fetch_product_faq_by_id(self, product_id: str) -> Any:
        return self.get_json(f"/products/{quote(str(product_id), safe='')}/faq")

    def fetch_product_faq_by_slug(self, slug: str) -> Any:
        return self.get_json(f"/products/slug/{quote(slug, safe='')}/faq")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def fetch_categories(
        self,
        is_active: Optional[bool] = True,
        search: str = "",
        sort: str = "-createdAt",
    ) -> List[Dict[str, Any]]:
        """Category listing as raw dicts (admin pages need ``_id``)."""
        params: Dict[str, Any] = {}
        if is_active is not None:
            params["isActive"] = "true" if is_active else "false"
        if search.strip():
            params["search"] = search
        params["sort"] = sort

        categories = unwrap_list(self.get_json("/categories", params=params))
        logger.info(f"Fetched {len(categories)} categories from backend")
        return categories

    def fetch_category_by_slug(self, slug: str) -> Category:
        payload = self.get_json(f"/categories/{quote(slug, safe='')}")
        return Category.from_api(unwrap_entity(payload, "category"))

    def fetch_subcategory_by_slug(self, slug: str) -> Category:
        payload = self.get_json(f"/subcategories/{quote(slug, safe='')}")
        return Category.from_api(unwrap_entity(payload, "subcategory"), is_subcategory=True)

    # -------------------------------------------------------------------------
    # Admin creation endpoints (multipart)
    # -------------------------------------------------------------------------

    def post_multipart(
        self,
        path: str,
        data: Sequence[Tuple[str, str]],
        files: Sequence[FilePart] = (),
    ) -> Dict[str, Any]:
        """POST form fields and files as multipart/form-data.

        Plain fields go in as filename-less parts so the body stays
        multipart even when no file is attached.
        """
        parts: List[Any] = [(name, (None, value)) for name, value in data]
        parts.extend(files)
        body = self._request("POST", path, files=parts)
        return body if isinstance(body, dict) else {"data": body}

    def create_category(self, data: Sequence[Tuple[str, str]], files: Sequence[FilePart] = ()) -> Dict[str, Any]:
        return self.post_multipart("/categories", data, files)

    def create_subcategory(self, data: Sequence[Tuple[str, str]], files: Sequence[FilePart] = ()) -> Dict[str, Any]:
        return self.post_multipart("/subcategories", data, files)
