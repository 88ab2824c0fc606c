"""
Core scraping orchestration and browser management.
"""
import os
from typing import List, Optional

from playwright.async_api import async_playwright

from .config import SiteConfig
from .export import build_listings
from .extractor import extract_candidates
from .models import Listing
from .scraper import prepare_and_capture
from .snapshot import PageSnapshot, snapshot_from_file


async def fetch_snapshot(site: SiteConfig, url: Optional[str] = None, headless: bool = True,
                         logger=None) -> PageSnapshot:
    """
    Load the site's search page in Chromium and return a static snapshot.

    Raises NavigationError when the page cannot be loaded.
    """
    url = url or site.url
    if not url:
        raise ValueError(f"No search URL configured for site '{site.name}'")

    is_headless = bool(headless) or os.getenv("HEADLESS", "").strip().lower() in ("1", "true")
    launch_args = ["--disable-blink-features=AutomationControlled"]
    if is_headless:
        launch_args += ["--disable-dev-shm-usage", "--no-sandbox", "--disable-gpu"]

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=is_headless, args=launch_args)
        if logger:
            logger.info(f">>> Headless mode: {is_headless}")

        try:
            context = await browser.new_context(
                viewport={"width": 1920, "height": 1080},
                user_agent=(
                    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                    "AppleWebKit/537.36 (KHTML, like Gecko) "
                    "Chrome/124.0.0.0 Safari/537.36"
                ),
                locale="de-DE",
            )
            context.set_default_timeout(30_000)
            context.set_default_navigation_timeout(45_000)

            page = await context.new_page()
            snapshot = await prepare_and_capture(page, site, url)
            await context.close()
        finally:
            await browser.close()

    if logger:
        logger.info(f">>> Snapshot captured: {len(snapshot)} elements from {snapshot.base_url}")
    return snapshot


def extract_listings(snapshot: PageSnapshot, site: SiteConfig, logger=None) -> List[Listing]:
    """Pure extraction over a snapshot, formatted as Listing records."""
    candidates = extract_candidates(snapshot, site)
    listings = build_listings(candidates, site)
    if logger:
        logger.info(f">>> Extracted {len(listings)} listings from {site.source}")
    return listings


async def run_scrape(site: SiteConfig, url: Optional[str] = None, headless: bool = True,
                     logger=None) -> List[Listing]:
    """Main scraping entry point: render the search page, then extract listings."""
    snapshot = await fetch_snapshot(site, url=url, headless=headless, logger=logger)
    return extract_listings(snapshot, site, logger=logger)


def scrape_html_file(path: str, site: SiteConfig, base_url: Optional[str] = None,
                     logger=None) -> List[Listing]:
    """Extract listings from a saved HTML page instead of a live browser."""
    snapshot = snapshot_from_file(path, base_url=base_url or site.url)
    if logger:
        logger.info(f">>> Loaded {path}: {len(snapshot)} elements")
    return extract_listings(snapshot, site, logger=logger)
