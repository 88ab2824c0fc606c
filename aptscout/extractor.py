"""
Listing extraction pipeline over a static page snapshot.

discover -> extract fields -> validate -> deduplicate -> associate links -> order
"""
import logging
from typing import List, Sequence

from .config import SiteConfig
from .dedup import deduplicate_on_page
from .discovery import discover_containers
from .fields import extract_candidate
from .links import associate_links
from .models import RawCandidate
from .promo import filter_candidates, find_promo_sections
from .snapshot import PageSnapshot

logger = logging.getLogger(__name__)


def extract_fields(snapshot: PageSnapshot, containers: Sequence[int], site: SiteConfig) -> List[RawCandidate]:
    """Run field extraction per container; one bad container never aborts the pass."""
    candidates = []
    for h in containers:
        try:
            candidate = extract_candidate(snapshot, h, site)
        except Exception as e:
            logger.warning(f"Skipping container <{snapshot.tag(h)}> #{h}: {e}")
            continue
        if candidate is not None:
            candidates.append(candidate)
    logger.info(f">>> Fields: {len(candidates)}/{len(containers)} containers carry an in-range price")
    return candidates


def sort_by_price(candidates: Sequence[RawCandidate]) -> List[RawCandidate]:
    return sorted(candidates, key=lambda c: c.price.value if c.price else float("inf"))


def extract_candidates(snapshot: PageSnapshot, site: SiteConfig) -> List[RawCandidate]:
    """Turn one rendered page into validated, linked, deduplicated candidates."""
    promo_sections = find_promo_sections(snapshot, site)
    if promo_sections:
        logger.info(f">>> Excluding {len(promo_sections)} promotional section(s)")

    containers = discover_containers(snapshot, site, promo_sections=promo_sections)
    candidates = extract_fields(snapshot, containers, site)
    candidates = filter_candidates(candidates, site)
    candidates = deduplicate_on_page(candidates, snapshot, site)
    candidates = associate_links(candidates, snapshot, site)
    if site.sort_by_price:
        candidates = sort_by_price(candidates)

    for c in candidates:
        logger.info(
            f"Found listing: {c.price.display()} | "
            f"{c.size.display() if c.size else 'N/A'} | "
            f"{c.rooms.display() if c.rooms else 'N/A'} | {c.title} | {c.link}"
        )
    return candidates
