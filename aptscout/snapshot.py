"""
Static page snapshot: the rendered DOM detached from the browser.

Elements are addressed by integer handles assigned in document order, so
stages can keep references to containers without holding live nodes.
"""
import logging
from typing import Dict, Iterator, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from soupsieve import SelectorSyntaxError

from .models import Anchor
from .utils import clean_text

logger = logging.getLogger(__name__)

# Attribute the browser layer writes with each element's page-relative top offset
POSITION_ATTR = "data-aptscout-y"

DROPPED_TAGS = ("script", "style", "noscript", "template", "svg", "iframe")

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "html", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
HEADING_CLASS_HINTS = ("title", "headline")

SKIPPED_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "#")


class PageSnapshot:
    """Indexed view over a parsed HTML document."""

    def __init__(self, soup: BeautifulSoup, base_url: str = ""):
        self._soup = soup
        self.base_url = self._resolve_base(soup, base_url)

        self._tags: List[Tag] = []
        self._parent: List[int] = []
        self._depth: List[int] = []
        self._handles: Dict[int, int] = {}
        for node in soup.descendants:
            if not isinstance(node, Tag):
                continue
            handle = len(self._tags)
            parent = self._handles.get(id(node.parent), -1)
            self._handles[id(node)] = handle
            self._tags.append(node)
            self._parent.append(parent)
            self._depth.append(self._depth[parent] + 1 if parent >= 0 else 0)

        # Pre-order layout: a subtree is the contiguous range [handle, end)
        self._end = [h + 1 for h in range(len(self._tags))]
        for h in range(len(self._tags) - 1, -1, -1):
            p = self._parent[h]
            if p >= 0 and self._end[h] > self._end[p]:
                self._end[p] = self._end[h]

        self._raw: Optional[List[str]] = None
        self._text: Dict[int, str] = {}
        self._anchors: Optional[List[Anchor]] = None

    @classmethod
    def from_html(cls, html: str, base_url: str = "") -> "PageSnapshot":
        """Parse rendered HTML into a snapshot."""
        soup = BeautifulSoup(html, "lxml")
        for el in soup.find_all(list(DROPPED_TAGS)):
            el.decompose()
        return cls(soup, base_url)

    @staticmethod
    def _resolve_base(soup: BeautifulSoup, base_url: str) -> str:
        base = soup.find("base", href=True)
        if base:
            return urljoin(base_url, base["href"])
        return base_url

    def __len__(self) -> int:
        return len(self._tags)

    def elements(self) -> range:
        """All element handles in document order."""
        return range(len(self._tags))

    def element(self, handle: int) -> Tag:
        return self._tags[handle]

    def tag(self, handle: int) -> str:
        return self._tags[handle].name

    def parent(self, handle: int) -> int:
        """Parent handle, or -1 for top-level elements."""
        return self._parent[handle]

    def depth(self, handle: int) -> int:
        return self._depth[handle]

    def ancestors(self, handle: int) -> Iterator[int]:
        """Yield ancestor handles from the parent upwards."""
        p = self._parent[handle]
        while p >= 0:
            yield p
            p = self._parent[p]

    def descendants(self, handle: int) -> range:
        return range(handle + 1, self._end[handle])

    def children(self, handle: int) -> List[int]:
        """Direct child element handles, in document order."""
        return [h for h in self.descendants(handle) if self._parent[h] == handle]

    def next_siblings(self, handle: int) -> List[int]:
        """Element siblings after `handle`, in document order."""
        p = self._parent[handle]
        if p < 0:
            return []
        return [h for h in self.children(p) if h > handle]

    def contains(self, outer: int, inner: int) -> bool:
        """True when `inner` lies strictly inside the subtree of `outer`."""
        return outer < inner < self._end[outer]

    def select(self, selector: str) -> List[int]:
        """Handles of elements matching a CSS selector, in document order."""
        try:
            found = self._soup.select(selector)
        except SelectorSyntaxError as e:
            logger.warning(f"Invalid selector {selector!r}: {e}")
            return []
        handles = [self._handles[id(el)] for el in found if id(el) in self._handles]
        return sorted(handles)

    def _build_raw_text(self) -> List[str]:
        # Children have larger handles than their parents, so walking backwards
        # always finds child text already assembled.
        raw = [""] * len(self._tags)
        for h in range(len(self._tags) - 1, -1, -1):
            parts = []
            for child in self._tags[h].children:
                if isinstance(child, Tag):
                    ch = self._handles.get(id(child))
                    if ch is None:
                        continue
                    if child.name == "br":
                        parts.append("\n")
                    elif child.name in BLOCK_TAGS:
                        parts.append("\n" + raw[ch] + "\n")
                    else:
                        parts.append(raw[ch])
                elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                    parts.append(str(child))
            raw[h] = "".join(parts)
        return raw

    def raw_text(self, handle: int) -> str:
        """Text content with line breaks at block-element boundaries."""
        if self._raw is None:
            self._raw = self._build_raw_text()
        return self._raw[handle]

    def text(self, handle: int) -> str:
        """Flattened, whitespace-collapsed text content."""
        cached = self._text.get(handle)
        if cached is None:
            cached = clean_text(self.raw_text(handle))
            self._text[handle] = cached
        return cached

    def lines(self, handle: int) -> List[str]:
        """Non-empty visual lines of an element's text."""
        return [line for line in (clean_text(x) for x in self.raw_text(handle).split("\n")) if line]

    def own_text(self, handle: int) -> str:
        """Text of the element's direct text children only."""
        parts = [
            str(c) for c in self._tags[handle].children
            if isinstance(c, NavigableString) and not isinstance(c, PreformattedString)
        ]
        return clean_text(" ".join(parts))

    def position(self, handle: int) -> Optional[float]:
        """Page-relative vertical offset recorded by the browser, if any."""
        value = self._tags[handle].get(POSITION_ATTR)
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def is_heading(self, handle: int) -> bool:
        el = self._tags[handle]
        if el.name in HEADING_TAGS:
            return True
        classes = " ".join(el.get("class") or []).lower()
        return any(hint in classes for hint in HEADING_CLASS_HINTS)

    def headings(self, handle: int) -> List[int]:
        """Heading-like elements inside a container, in document order."""
        return [h for h in self.descendants(handle) if self.is_heading(h)]

    def anchors(self) -> List[Anchor]:
        """Every followable link on the page with its absolute URL."""
        if self._anchors is None:
            anchors = []
            for h, el in enumerate(self._tags):
                if el.name != "a":
                    continue
                href = (el.get("href") or "").strip()
                if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
                    continue
                anchors.append(Anchor(
                    handle=h,
                    href=urljoin(self.base_url, href),
                    text=self.text(h),
                    position=self.position(h),
                ))
            self._anchors = anchors
        return self._anchors


def snapshot_from_file(path: str, base_url: str = "") -> PageSnapshot:
    """Load a saved HTML page as a snapshot."""
    with open(path, encoding="utf-8", errors="replace") as f:
        html = f.read()
    return PageSnapshot.from_html(html, base_url=base_url)
