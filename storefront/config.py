"""Configuration and constants for the storefront hydrator."""

import os
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from dotenv import load_dotenv

__all__ = [
    "LOCAL_API_BASE_URL",
    "REMOTE_API_BASE_URL",
    "LIVE_PREVIEW_PORTS",
    "LOOPBACK_HOSTS",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "INIT_DELAY",
    "EXPLORE_PRODUCT_LIMIT",
    "SITE_NAME",
    "DEFAULT_CURRENCY_SYMBOL",
    "STAGING_DOMAIN",
    "LEGACY_PAGE_IDENTIFIERS",
    "NON_PRODUCT_SLUGS",
    "ALLOWED_IMAGE_TYPES",
    "ALLOWED_IMAGE_EXTENSIONS",
    "MAX_IMAGE_FILES",
    "CATEGORY_PLACEHOLDER_THUMB",
    "FLASK_HOST",
    "FLASK_PORT",
    "FLASK_DEBUG",
    "detect_api_base_url",
]

_PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Backend locations
LOCAL_API_BASE_URL = "http://localhost:5000/api"
REMOTE_API_BASE_URL = "https://furniture-backend-1-nvv3.onrender.com/api"

# Editor "live preview" servers run the static pages on these ports
LIVE_PREVIEW_PORTS: FrozenSet[str] = frozenset({"5500", "5501"})
LOOPBACK_HOSTS: FrozenSet[str] = frozenset({"localhost", "127.0.0.1"})

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "furnistor-storefront/0.1",
}

# Request timeout (seconds)
REQUEST_TIMEOUT = float(os.getenv("STOREFRONT_REQUEST_TIMEOUT", "15"))

# Delay before page initialization runs (seconds)
INIT_DELAY = float(os.getenv("STOREFRONT_INIT_DELAY", "0.1"))

# Home page "explore products" grid size
EXPLORE_PRODUCT_LIMIT = 12

SITE_NAME = "Furnistør"
DEFAULT_CURRENCY_SYMBOL = "$"

# Content authored against the theme demo links here
STAGING_DOMAIN = "sites.kaliumtheme.com"


# =============================================================================
# Legacy mirrored pages
# =============================================================================
# Filename -> (kind, value). Kinds: "slug", "article", "category".
# A "category" entry marks a listing page: no product is fetched for it.

LEGACY_PAGE_IDENTIFIERS: Dict[str, Dict[str, str]] = {
    "index_tact-mirror.html": {"slug": "tact-mirror"},
    "index_tact.html": {"slug": "tact-mirror"},
    "index_mirrors.html": {"category": "mirrors"},
    "index_rugs.html": {"category": "rugs"},
    "index_decor.html": {"category": "decor"},
    "index_newzealand-wool.html": {"article": "NZ-WOOL-RUNNER-001"},
}

# index_<slug>.html pages that are never product pages
NON_PRODUCT_SLUGS: FrozenSet[str] = frozenset({
    "decor",
    "mirrors",
    "rugs",
    "tact",
    "tact-mirror",
})


# =============================================================================
# Admin forms
# =============================================================================

ALLOWED_IMAGE_TYPES: FrozenSet[str] = frozenset({"image/avif", "image/webp"})
ALLOWED_IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({"avif", "webp"})
MAX_IMAGE_FILES = 1

CATEGORY_PLACEHOLDER_THUMB = "https://via.placeholder.com/44x44.png?text=Cat"

# Flask admin app settings (allow env overrides; default debug off)
FLASK_HOST = os.getenv("FLASK_HOST", "127.0.0.1")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5050")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"


def detect_api_base_url(hostname: Optional[str], port: Optional[str] = None) -> str:
    """Pick the backend base URL for a page served from hostname:port.

    STOREFRONT_API_BASE_URL in the environment wins over detection.
    Live preview ports talk to the hosted backend, loopback hosts to a
    local one, everything else to the hosted backend.
    """
    override = os.getenv("STOREFRONT_API_BASE_URL")
    if override:
        return override.rstrip("/")

    if port is not None and str(port) in LIVE_PREVIEW_PORTS:
        return REMOTE_API_BASE_URL
    if hostname in LOOPBACK_HOSTS:
        return LOCAL_API_BASE_URL
    return REMOTE_API_BASE_URL
