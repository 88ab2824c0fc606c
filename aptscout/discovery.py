"""
Container discovery: find DOM subtrees that each look like one listing.
"""
import logging
from typing import List, Optional, Sequence

from .config import SiteConfig
from .fields import has_price, has_size
from .promo import find_promo_sections, in_sections
from .snapshot import PageSnapshot

logger = logging.getLogger(__name__)


class DiscoveryStrategy:
    """One way of locating candidate containers on a page."""

    name = "strategy"

    def discover(self, snapshot: PageSnapshot, site: SiteConfig) -> List[int]:
        raise NotImplementedError


def collapse_nested(snapshot: PageSnapshot, handles: Sequence[int]) -> List[int]:
    """
    Reduce nested matches of one selector to one container per listing.

    A match directly enclosing two or more other matches is a list wrapper
    and is dropped; of the rest, matches inside another match are fragments
    of it (".result-price" inside ".result-item") and are dropped too.
    """
    matched = set(handles)
    direct = {h: 0 for h in handles}
    for h in handles:
        owner = next((a for a in snapshot.ancestors(h) if a in matched), None)
        if owner is not None:
            direct[owner] += 1

    kept = [h for h in handles if direct[h] < 2]
    kept_set = set(kept)
    return [h for h in kept if not any(a in kept_set for a in snapshot.ancestors(h))]


class SelectorStrategy(DiscoveryStrategy):
    """Containers are the elements matching a site-specific CSS selector."""

    def __init__(self, selector: str):
        self.selector = selector
        self.name = f"selector {selector!r}"

    def discover(self, snapshot: PageSnapshot, site: SiteConfig) -> List[int]:
        return collapse_nested(snapshot, snapshot.select(self.selector))


class GenericScanStrategy(DiscoveryStrategy):
    """
    Scan every element for text that carries both a price and an area.

    Of nested qualifying elements only the deepest are kept: a qualifying
    ancestor usually spans several listings.
    """

    name = "generic scan"

    def qualifies(self, text: str, site: SiteConfig) -> bool:
        return (
            site.min_text_length <= len(text) <= site.max_text_length
            and has_price(text)
            and has_size(text)
        )

    def discover(self, snapshot: PageSnapshot, site: SiteConfig) -> List[int]:
        qualifying = [h for h in snapshot.elements() if self.qualifies(snapshot.text(h), site)]

        enclosing = set()
        for h in qualifying:
            enclosing.update(snapshot.ancestors(h))
        return [h for h in qualifying if h not in enclosing]


def build_strategies(site: SiteConfig) -> List[DiscoveryStrategy]:
    """Selector strategies in configured priority order, then the generic scan."""
    strategies: List[DiscoveryStrategy] = [SelectorStrategy(s) for s in site.container_selectors]
    strategies.append(GenericScanStrategy())
    return strategies


def discover_containers(
    snapshot: PageSnapshot,
    site: SiteConfig,
    promo_sections: Optional[Sequence[int]] = None,
    strategies: Optional[Sequence[DiscoveryStrategy]] = None,
) -> List[int]:
    """
    Return container handles from the first strategy that finds any.

    Results of different strategies are never merged. Containers inside
    promotional sections do not count as matches.
    """
    if promo_sections is None:
        promo_sections = find_promo_sections(snapshot, site)
    if strategies is None:
        strategies = build_strategies(site)

    for strategy in strategies:
        found = [
            h for h in strategy.discover(snapshot, site)
            if not in_sections(snapshot, h, promo_sections)
        ]
        if found:
            logger.info(f">>> Discovery: {strategy.name} matched {len(found)} containers")
            return found
        logger.debug(f"Discovery: {strategy.name} matched nothing")

    logger.info(">>> Discovery: no candidate containers on page")
    return []
