"""
Promotional-content detection ("Top Objekte", "Premium", ...).

Featured sections bypass the page's own price filter, so their listings are
excluded twice: their subtrees at discovery time, and any candidate whose
text still carries a marker phrase at validation time.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from .config import SiteConfig
from .fields import has_price
from .models import RawCandidate
from .snapshot import PageSnapshot

logger = logging.getLogger(__name__)

PAGE_ROOT_TAGS = ("body", "html")


def mentions_any(text: str, phrases: Iterable[str]) -> bool:
    """Case-insensitive substring match against a phrase set."""
    lowered = text.lower()
    return any(p.lower() in lowered for p in phrases)


def _enclosing_section(snapshot: PageSnapshot, handle: int, max_length: int) -> Optional[int]:
    # Nearest ancestor-or-self that also holds listing content (a price).
    node = handle
    while node >= 0:
        if snapshot.tag(node) in PAGE_ROOT_TAGS:
            return None
        text = snapshot.text(node)
        if len(text) > max_length:
            return None
        if has_price(text):
            return node
        node = snapshot.parent(node)
    return None


def _marker_head(snapshot: PageSnapshot, handle: int) -> int:
    # Outermost ancestor-or-self carrying exactly the marker element's text
    text = snapshot.text(handle)
    head = handle
    parent = snapshot.parent(head)
    while parent >= 0 and snapshot.tag(parent) not in PAGE_ROOT_TAGS and snapshot.text(parent) == text:
        head = parent
        parent = snapshot.parent(head)
    return head


def _headed_block(snapshot: PageSnapshot, handle: int) -> List[int]:
    """
    A marker heading plus the siblings that follow it, up to the next heading.

    Used when no single element around the marker qualifies as a
    promotional card, e.g. a featured block holding several listings.
    """
    head = _marker_head(snapshot, handle)
    if not snapshot.is_heading(head):
        return []
    block = [head]
    for sib in snapshot.next_siblings(head):
        if snapshot.is_heading(sib):
            break
        block.append(sib)
    if not any(has_price(snapshot.text(h)) for h in block):
        return []
    return block


def find_promo_sections(snapshot: PageSnapshot, site: SiteConfig) -> List[int]:
    """Root handles of promotional subtrees, in document order."""
    if not site.promo_markers:
        return []

    sections: List[int] = []
    for h in snapshot.elements():
        own = snapshot.own_text(h)
        if not own or not mentions_any(own, site.promo_markers):
            continue
        section = _enclosing_section(snapshot, h, site.promo_max_text_length)
        found = [section] if section is not None else _headed_block(snapshot, h)

        for section in found:
            # A section inside an already-found one adds nothing
            if in_sections(snapshot, section, sections):
                continue
            logger.debug(f"Promotional section <{snapshot.tag(section)}> marked by {own[:40]!r}")
            sections.append(section)
    return sorted(sections)


def in_sections(snapshot: PageSnapshot, handle: int, sections: Sequence[int]) -> bool:
    """True when the element is a section root or lies inside one."""
    return any(handle == s or snapshot.contains(s, handle) for s in sections)


def filter_candidates(candidates: Sequence[RawCandidate], site: SiteConfig) -> List[RawCandidate]:
    """Validation pass: drop candidates carrying promotional or site-chrome text."""
    kept = []
    for c in candidates:
        if mentions_any(c.text, site.promo_markers):
            logger.debug(f"Dropped promotional candidate: {c.title}")
            continue
        if mentions_any(c.text, site.noise_phrases):
            logger.debug(f"Dropped navigation/noise candidate: {c.text[:60]}")
            continue
        kept.append(c)
    return kept
