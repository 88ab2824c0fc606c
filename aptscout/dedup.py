"""
Candidate deduplication.

One key policy is used everywhere: the detail link the candidate's own
container already holds, when it has one; otherwise the composite of
price, size and a short prefix of the container text.
"""
import logging
from typing import Callable, Hashable, List, Optional, Sequence

from .config import SiteConfig
from .links import detail_anchors, own_link
from .models import RawCandidate
from .snapshot import PageSnapshot
from .utils import clean_text

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 60


def fingerprint(text: str) -> str:
    return clean_text(text).lower()[:FINGERPRINT_LENGTH]


def candidate_key(candidate: RawCandidate, link: Optional[str] = None) -> Hashable:
    if link:
        return ("link", link)
    return (
        "fields",
        candidate.price.value if candidate.price else None,
        candidate.size.value if candidate.size else None,
        fingerprint(candidate.text),
    )


def deduplicate(
    candidates: Sequence[RawCandidate],
    key: Callable[[RawCandidate], Hashable] = candidate_key,
) -> List[RawCandidate]:
    """Keep the first candidate per key, preserving discovery order."""
    seen = set()
    unique = []
    for c in candidates:
        k = key(c)
        if k in seen:
            logger.debug(f"Duplicate removed: {c.title!r}")
            continue
        seen.add(k)
        unique.append(c)
    return unique


def deduplicate_on_page(
    candidates: Sequence[RawCandidate],
    snapshot: PageSnapshot,
    site: SiteConfig,
) -> List[RawCandidate]:
    """Deduplicate with the link-first key resolved against the snapshot."""
    anchors = detail_anchors(snapshot, site)
    unique = deduplicate(candidates, key=lambda c: candidate_key(c, own_link(snapshot, c, anchors)))
    if len(unique) != len(candidates):
        logger.info(f">>> Dedup: {len(candidates)} -> {len(unique)} candidates")
    return unique
