"""
Field extraction: price, size, room count and title from container text.
"""
import logging
import re
from typing import List, Optional, Tuple

from .config import SiteConfig
from .models import MAX_CANDIDATE_TEXT, Measure, RawCandidate
from .snapshot import PageSnapshot
from .utils import clean_text, parse_number, truncate

logger = logging.getLogger(__name__)

PRICE_UNIT = "€"
SIZE_UNIT = "m²"
ROOMS_UNIT = "Zimmer"

TITLE_MAX_LENGTH = 100
HEADING_MIN_LENGTH = 5
LINE_MIN_LENGTH = 10

# Grouped thousands ("1.250", "1 250", "1,250.00") or a plain number with up to two decimals
_NUMBER = r"(?<![\d.,])(\d{1,3}(?:[.,\s]\d{3})+(?:[.,]\d{1,2})?|\d+(?:[.,]\d{1,2})?)"
_CURRENCY = r"(?:€|EUR\b|Euro\b)"

PRICE_SUFFIX_RE = re.compile(_NUMBER + r"(?!\d)\s*" + _CURRENCY, re.I)
PRICE_PREFIX_RE = re.compile(
    _CURRENCY + r"\s*" + _NUMBER + r"(?![\d.,]*\s*(?:m²|m2\b|qm\b|zimmer|zi\.))", re.I
)
SIZE_RE = re.compile(r"(?<![\d.,])(\d+(?:[.,]\d+)?)\s*(?:m²|m2\b|qm\b|m\^2|sqm\b)", re.I)
ROOMS_RE = re.compile(
    r"(?<![\d.,])(\d+(?:[.,]\d)?)\s*-?\s*(?:Zimmer|Zi\.|Zi\b|Räume|Raum\b|rooms?\b)", re.I
)

STREET_RE = re.compile(
    r"(stra(?:ß|ss)e\b|str\.|weg\b|platz\b|allee\b|chaussee\b|damm\b|ring\b|ufer\b|gasse\b)", re.I
)
POSTAL_CITY_RE = re.compile(r"\b\d{5}\s+[A-ZÄÖÜ][a-zäöüß]+")


def has_price(text: str) -> bool:
    return bool(PRICE_SUFFIX_RE.search(text) or PRICE_PREFIX_RE.search(text))


def has_size(text: str) -> bool:
    return bool(SIZE_RE.search(text))


def extract_price(text: str) -> Optional[Measure]:
    """First number directly adjacent to a currency marker, either side."""
    matches = [m for m in (PRICE_SUFFIX_RE.search(text), PRICE_PREFIX_RE.search(text)) if m]
    if not matches:
        return None
    first = min(matches, key=lambda m: m.start())
    value = parse_number(first.group(1))
    if value is None:
        return None
    return Measure(value, PRICE_UNIT)


def extract_size(text: str) -> Optional[Measure]:
    m = SIZE_RE.search(text)
    if not m:
        return None
    value = parse_number(m.group(1))
    return Measure(value, SIZE_UNIT) if value is not None else None


def extract_rooms(text: str) -> Optional[Measure]:
    m = ROOMS_RE.search(text)
    if not m:
        return None
    value = parse_number(m.group(1))
    return Measure(value, ROOMS_UNIT) if value is not None else None


def in_range(value: float, bounds: Tuple[float, float]) -> bool:
    """Closed, inclusive range check."""
    low, high = bounds
    return low <= value <= high


def is_address_like(line: str, city_names=()) -> bool:
    """Line mentions a known city, a street-type suffix, or a postal code + city."""
    lowered = line.lower()
    if any(re.search(rf"\b{re.escape(city.lower())}\b", lowered) for city in city_names):
        return True
    return bool(STREET_RE.search(line) or POSTAL_CITY_RE.search(line))


def pick_title(
    headings: List[str],
    lines: List[str],
    price: Measure,
    city_names=(),
    skip_phrases=(),
) -> str:
    """
    Choose a display title for a listing.

    Preference: a short heading, an address-like line, the first reasonably
    long line, and finally a title synthesized from the price.
    """
    def usable(line: str) -> bool:
        lowered = line.lower()
        return not any(p.lower() in lowered for p in skip_phrases)

    title = ""
    for h in headings:
        h = clean_text(h)
        if HEADING_MIN_LENGTH <= len(h) <= TITLE_MAX_LENGTH and usable(h):
            title = h
            break

    if not title:
        for line in lines:
            if LINE_MIN_LENGTH <= len(line) <= TITLE_MAX_LENGTH and usable(line) \
                    and is_address_like(line, city_names):
                title = line
                break

    if not title:
        title = next((l for l in lines if len(l) >= LINE_MIN_LENGTH and usable(l)), "")

    if not title:
        title = f"{price.display()} Apartment"

    return truncate(title, TITLE_MAX_LENGTH)


def extract_candidate(snapshot: PageSnapshot, handle: int, site: SiteConfig) -> Optional[RawCandidate]:
    """
    Build a RawCandidate from one container, or None when it must be dropped.

    A container without a price, or with a price outside the site's
    acceptance band, is dropped; size and rooms are optional.
    """
    text = snapshot.text(handle)[:MAX_CANDIDATE_TEXT]

    price = extract_price(text)
    if price is None:
        return None
    if not in_range(price.value, site.price_range):
        logger.debug(f"Price out of range {site.price_range}: {price.display()}")
        return None

    size = extract_size(text)
    if size is not None and site.size_range and not in_range(size.value, site.size_range):
        logger.debug(f"Size out of range {site.size_range}: {size.display()}")
        return None

    title = pick_title(
        headings=[snapshot.text(h) for h in snapshot.headings(handle)],
        lines=snapshot.lines(handle),
        price=price,
        city_names=site.city_names,
        skip_phrases=site.promo_markers,
    )

    return RawCandidate(
        container_ref=handle,
        text=text,
        price=price,
        size=size,
        rooms=extract_rooms(text),
        title=title,
        position=snapshot.position(handle),
    )
