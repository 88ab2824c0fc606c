"""
Apartment Search Page Scraper Package
"""
from .models import Listing, RawCandidate, Measure, LINK_UNAVAILABLE
from .config import SiteConfig, SITES, get_site, load_site_config
from .snapshot import PageSnapshot, snapshot_from_file
from .extractor import extract_candidates
from .core import run_scrape, extract_listings, scrape_html_file
from .export import (
    build_listings,
    build_result_document,
    build_failure_document,
    save_output_document,
    save_output_rows
)
from .utils import init_logger, now_iso

__version__ = "1.0.0"

__all__ = [
    "Listing",
    "RawCandidate",
    "Measure",
    "LINK_UNAVAILABLE",
    "SiteConfig",
    "SITES",
    "get_site",
    "load_site_config",
    "PageSnapshot",
    "snapshot_from_file",
    "extract_candidates",
    "run_scrape",
    "extract_listings",
    "scrape_html_file",
    "build_listings",
    "build_result_document",
    "build_failure_document",
    "save_output_document",
    "save_output_rows",
    "init_logger",
    "now_iso"
]
