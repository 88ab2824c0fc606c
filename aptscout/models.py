"""
Data models for apartment listing extraction.
"""
from dataclasses import dataclass
from typing import Optional

from .utils import format_number


# Output marker for values that could not be found on the page
NOT_AVAILABLE = "N/A"
LINK_UNAVAILABLE = NOT_AVAILABLE

# Candidate text is capped so a container spanning the page cannot swallow it
MAX_CANDIDATE_TEXT = 2000


@dataclass(frozen=True)
class Measure:
    """A parsed numeric value with its unit label."""

    value: float
    unit: str

    def display(self) -> str:
        return f"{format_number(self.value)} {self.unit}"


@dataclass(frozen=True)
class Anchor:
    """A link found in a page snapshot."""

    handle: int
    href: str
    text: str
    position: Optional[float] = None


@dataclass(frozen=True)
class RawCandidate:
    """A not-yet-validated detection of a listing within one page snapshot."""

    # Handle into the PageSnapshot the candidate was taken from
    container_ref: int
    text: str
    price: Optional[Measure] = None
    size: Optional[Measure] = None
    rooms: Optional[Measure] = None
    title: str = ""
    position: Optional[float] = None
    link: Optional[str] = None


@dataclass(frozen=True)
class Listing:
    """Represents a validated apartment listing ready for output."""

    id: str
    price: Measure
    title: str
    link: str
    description: str
    source: str
    scraped_at: str
    size: Optional[Measure] = None
    rooms: Optional[Measure] = None

    def to_dict(self) -> dict:
        """Convert the listing to the flat string schema of the output document."""
        return {
            "id": self.id,
            "price": self.price.display(),
            "size": self.size.display() if self.size else NOT_AVAILABLE,
            "rooms": self.rooms.display() if self.rooms else NOT_AVAILABLE,
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "source": self.source,
            "scrapedAt": self.scraped_at,
        }
