"""
Link association: attach a detail-page URL to each listing candidate.
"""
import dataclasses
import logging
import re
from typing import List, Optional, Sequence, Set

from .config import SiteConfig
from .models import LINK_UNAVAILABLE, Anchor, RawCandidate
from .snapshot import PageSnapshot

logger = logging.getLogger(__name__)

DETAIL_HINTS = ("detail", "mehr", "more", "view", "ansehen", "anzeigen", "exposé", "expose")


def is_detail_link(href: str, patterns: Sequence[str]) -> bool:
    return any(re.search(p, href) for p in patterns)


def detail_anchors(snapshot: PageSnapshot, site: SiteConfig) -> List[Anchor]:
    """All anchors on the page that point at a listing's detail page."""
    return [a for a in snapshot.anchors() if is_detail_link(a.href, site.detail_link_patterns)]


def anchors_for_container(snapshot: PageSnapshot, container: int, anchors: Sequence[Anchor]) -> List[Anchor]:
    """Anchors inside the container, or wrapping it (cards rendered as one big <a>)."""
    return [
        a for a in anchors
        if a.handle == container
        or snapshot.contains(container, a.handle)
        or snapshot.contains(a.handle, container)
    ]


def pick_contained(anchors: Sequence[Anchor]) -> Optional[Anchor]:
    """Prefer an anchor labelled like a details link, otherwise the first in DOM order."""
    for a in anchors:
        text = a.text.lower()
        if any(hint in text for hint in DETAIL_HINTS):
            return a
    return anchors[0] if anchors else None


def nearest_anchor(position: float, anchors: Sequence[Anchor], max_distance: float) -> Optional[Anchor]:
    """Closest positioned anchor by vertical distance, within `max_distance` pixels."""
    best = None
    best_distance = None
    for a in anchors:
        if a.position is None:
            continue
        distance = abs(a.position - position)
        if distance > max_distance:
            continue
        if best_distance is None or distance < best_distance:
            best, best_distance = a, distance
    return best


def own_link(snapshot: PageSnapshot, candidate: RawCandidate, anchors: Sequence[Anchor]) -> Optional[str]:
    """Detail link resolvable from the candidate's own container, without claiming it."""
    chosen = pick_contained(anchors_for_container(snapshot, candidate.container_ref, anchors))
    return chosen.href if chosen else None


def associate_links(
    candidates: Sequence[RawCandidate],
    snapshot: PageSnapshot,
    site: SiteConfig,
) -> List[RawCandidate]:
    """
    Assign each candidate a detail URL: containment first, then the nearest
    unused anchor on the page. A URL is handed out at most once per run;
    candidates left without one get LINK_UNAVAILABLE.
    """
    anchors = detail_anchors(snapshot, site)
    used: Set[str] = set()
    linked = []

    for c in candidates:
        available = [a for a in anchors if a.href not in used]
        chosen = pick_contained(anchors_for_container(snapshot, c.container_ref, available))
        how = "contained"
        if chosen is None and c.position is not None:
            chosen = nearest_anchor(c.position, available, site.max_link_distance)
            how = "nearest"

        if chosen is not None:
            used.add(chosen.href)
            linked.append(dataclasses.replace(c, link=chosen.href))
            logger.debug(f"Link ({how}) for {c.title!r}: {chosen.href}")
        else:
            linked.append(dataclasses.replace(c, link=LINK_UNAVAILABLE))
            logger.debug(f"No link for {c.title!r}")

    with_link = sum(1 for c in linked if c.link != LINK_UNAVAILABLE)
    logger.info(f">>> Links: {with_link}/{len(linked)} listings linked ({len(anchors)} detail anchors on page)")
    return linked
