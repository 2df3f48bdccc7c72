"""Command-line interface for the storefront hydrator."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

# Add parent directory to path to allow imports when run as script
sys.path.insert(0, str(Path(__file__).parent.parent))

__all__ = ["main", "parse_args", "build_client", "hydrate_file", "list_categories"]

from storefront.api_client import ApiClient, FetchFailure
from storefront.config import FLASK_DEBUG, FLASK_HOST, FLASK_PORT, INIT_DELAY, detect_api_base_url
from storefront.logging_config import get_logger, setup_logging
from storefront.page import hydrate_page

logger = get_logger("cli")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fill Furnistør page templates with catalog data from the REST backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render a product page template as it would appear at /product/tact-mirror
  python -m storefront.cli --input pages/product.html --url http://localhost/product/tact-mirror

  # Category page, written to a file
  python -m storefront.cli --input pages/index_decor.html \\
      --url "http://localhost/index_decor.html?category=armchairs" --output out.html

  # Check that the backend answers
  python -m storefront.cli --health

  # Run the admin forms
  python -m storefront.cli --serve-admin
        """,
    )

    parser.add_argument("--input", metavar="PATH", help="Page template to hydrate")
    parser.add_argument("--url", help="URL the page is served at (drives what gets fetched)")
    parser.add_argument("--output", metavar="PATH", help="Write hydrated HTML here (default: stdout)")
    parser.add_argument(
        "--api-base",
        help="Backend base URL (default: detected from --url host/port, or STOREFRONT_API_BASE_URL)",
    )
    parser.add_argument("--no-delay", action="store_true", help="Skip the initialization delay")
    parser.add_argument(
        "--keep-staging-links",
        action="store_true",
        help="Do not rewrite links to the theme staging domain",
    )

    parser.add_argument("--health", action="store_true", help="Check backend health and exit")
    parser.add_argument("--list-categories", action="store_true", help="List backend categories and exit")
    parser.add_argument("--serve-admin", action="store_true", help="Run the admin forms web app")

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write the JSONL log file")

    return parser.parse_args(argv)


def build_client(api_base: Optional[str], page_url: Optional[str]) -> ApiClient:
    """Client for an explicit base URL or the one detected for the page URL."""
    if api_base:
        return ApiClient(api_base)
    parsed = urlparse(page_url or "http://localhost/")
    port = str(parsed.port) if parsed.port else None
    return ApiClient(detect_api_base_url(parsed.hostname, port))


def hydrate_file(
    client: ApiClient,
    input_path: str,
    url: str,
    output_path: Optional[str] = None,
    delay: float = INIT_DELAY,
    rewrite_links: bool = True,
) -> int:
    """Hydrate one template file. Returns a process exit code."""
    html = Path(input_path).read_text(encoding="utf-8")
    result, report = hydrate_page(client, html, url, delay=delay, rewrite_links=rewrite_links)

    if output_path:
        Path(output_path).write_text(result, encoding="utf-8")
        logger.info(f"Wrote {output_path}")
    else:
        sys.stdout.write(result)

    for section, outcome in report.sections.items():
        logger.info(f"  {section}: {outcome}")
    return 1 if report.failed else 0


def list_categories(client: ApiClient) -> int:
    try:
        categories = client.fetch_categories()
    except FetchFailure as e:
        print(f"Error fetching categories: {e}")
        return 1

    print(f"Categories ({len(categories)}):")
    for cat in categories:
        print(f"  {cat.get('slug', '?')}: {cat.get('name', '')}")
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    client = build_client(args.api_base, args.url)
    logger.info(f"API base URL: {client.base_url}")

    if args.health:
        return 0 if client.check_health() else 1

    if args.list_categories:
        return list_categories(client)

    if args.serve_admin:
        from storefront.admin import create_app

        create_app(client).run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
        return 0

    if not args.input or not args.url:
        print("Both --input and --url are required to hydrate a page (see --help)")
        return 2

    return hydrate_file(
        client,
        args.input,
        args.url,
        output_path=args.output,
        delay=0 if args.no_delay else INIT_DELAY,
        rewrite_links=not args.keep_staging_links,
    )


if __name__ == "__main__":
    sys.exit(main())
