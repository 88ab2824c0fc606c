"""
Command-line entry point: scrape one apartment search page into a JSON document.
"""
import argparse
import asyncio
import os
import sys
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError

from .config import SITES, SiteConfig, get_site, load_site_config
from .core import run_scrape, scrape_html_file
from .export import (
    build_failure_document,
    build_result_document,
    save_output_document,
    save_output_rows,
)
from .models import Listing
from .scraper import NavigationError
from .utils import init_logger, now_iso


def parse_args(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Apartment search page scraper with heuristic listing extraction")
    ap.add_argument("--site", choices=sorted(SITES), default=os.getenv("APTSCOUT_SITE", "generic"),
                    help="Built-in site preset (default from env APTSCOUT_SITE or 'generic')")
    ap.add_argument("--site-config", type=str, default="", help="Path to a JSON site config (overrides --site)")
    ap.add_argument("--url", type=str, default="", help="Search URL (overrides the site's URL)")
    ap.add_argument("--html", type=str, default="", help="Extract from a saved HTML page instead of a browser")
    ap.add_argument("--out", type=str, default=os.getenv("APTSCOUT_OUT", "results.json"),
                    help="Path of the JSON result document")
    ap.add_argument("--export", type=str, default="", help="Also save listings as CSV/XLSX")
    ap.add_argument("--headless", action=argparse.BooleanOptionalAction, default=True,
                    help="Run the browser without UI")
    ap.add_argument("--min-price", type=float, default=None, help="Lower bound of the accepted price band")
    ap.add_argument("--max-price", type=float, default=None, help="Upper bound of the accepted price band")
    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=os.getenv("LOG_CONSOLE", "INFO"),
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=os.getenv("LOG_FILE", "DEBUG"),
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=os.getenv("LOG_FILE_PATH", "aptscout.log"),
                    help="Path to log file (default from env LOG_FILE_PATH or aptscout.log).")
    ap.add_argument("--no-file-log", action="store_true",
                    help="Disable file logging (only console output).")

    return ap.parse_args(argv)


def resolve_site(args) -> SiteConfig:
    """Pick the site preset or config file and apply command-line overrides."""
    site = load_site_config(args.site_config) if args.site_config else get_site(args.site)

    if args.min_price is not None or args.max_price is not None:
        low, high = site.price_range
        site = site.with_overrides(price_range=(
            args.min_price if args.min_price is not None else low,
            args.max_price if args.max_price is not None else high,
        ))
    site = site.with_overrides(url=args.url or None)
    site.validate()
    return site


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    logger = init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    logger.info(
        f"Logger initialized: console={eff_console}, "
        f"file={'DISABLED' if args.no_file_log else eff_file}, "
        f"path={'N/A' if args.no_file_log else args.log_file_path}"
    )
    logger.info(f">>> Run started at {now_iso()}")

    source = args.site
    try:
        site = resolve_site(args)
        source = site.source

        listings: List[Listing]
        if args.html:
            listings = scrape_html_file(args.html, site, base_url=args.url or None, logger=logger)
        else:
            listings = asyncio.run(run_scrape(site, headless=args.headless, logger=logger))
    except (NavigationError, PlaywrightError, OSError, ValueError) as e:
        logger.error(f"Critical error during scraping: {e}")
        save_output_document(build_failure_document(source, str(e)), args.out, logger=logger)
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error during scraping: {e}")
        save_output_document(build_failure_document(source, f"{type(e).__name__}: {e}"), args.out, logger=logger)
        return 1

    save_output_document(build_result_document(listings, site.source), args.out, logger=logger)
    if args.export:
        save_output_rows(listings, args.export, logger=logger)

    for i, x in enumerate(listings, 1):
        logger.info(f"{i}. {x.price.display()} | {x.size.display() if x.size else 'N/A'} | "
                    f"{x.rooms.display() if x.rooms else 'N/A'} | {x.title} | {x.link}")
    logger.info(f">>> Scraping completed: {len(listings)} listings from {site.source}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
