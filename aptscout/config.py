"""
Site configuration and built-in presets for the supported search pages.
"""
import dataclasses
import json
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple


DEFAULT_PROMO_MARKERS = (
    "Top Objekt",
    "Top-Objekt",
    "Premium",
    "Highlight",
    "Empfohlen",
    "Empfehlung",
    "Gesponsert",
)

DEFAULT_NOISE_PHRASES = ("Cookie", "Datenschutz", "Impressum")

DEFAULT_COOKIE_SELECTORS = (
    "#uc-btn-accept-banner",
    "button[data-testid='uc-accept-all-button']",
    "button[data-testid*='accept']",
    "button[id*='accept']",
    "button[class*='accept']",
    "button[class*='cookie']",
    "button[id*='consent']",
    "button:has-text('Alle akzeptieren')",
    "button:has-text('Akzeptieren')",
    "button:has-text('Accept all')",
)


@dataclass(frozen=True)
class SiteConfig:
    """Extraction settings for one target site / search run."""

    name: str
    source: str
    url: str = ""
    # Tried in order, first selector with matches wins
    container_selectors: Tuple[str, ...] = ()
    # Regexes an absolute href must match to count as a detail-page link
    detail_link_patterns: Tuple[str, ...] = (r"/\d{4,}",)
    price_range: Tuple[float, float] = (150.0, 600.0)
    size_range: Optional[Tuple[float, float]] = None
    promo_markers: Tuple[str, ...] = DEFAULT_PROMO_MARKERS
    noise_phrases: Tuple[str, ...] = DEFAULT_NOISE_PHRASES
    city_names: Tuple[str, ...] = ("Berlin",)
    min_text_length: int = 20
    max_text_length: int = 2000
    promo_max_text_length: int = 1500
    max_link_distance: float = 1000.0
    sort_by_price: bool = True
    ready_selector: str = "body"
    cookie_selectors: Tuple[str, ...] = DEFAULT_COOKIE_SELECTORS

    @property
    def id_prefix(self) -> str:
        return self.name.replace("-", "_")

    def with_overrides(self, **changes) -> "SiteConfig":
        """Return a copy with the given non-None fields replaced."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        """Validate configuration values."""
        low, high = self.price_range
        if low > high:
            raise ValueError(f"Invalid price range for {self.name}: {low} > {high}")
        if self.size_range and self.size_range[0] > self.size_range[1]:
            raise ValueError(f"Invalid size range for {self.name}: {self.size_range}")
        if self.min_text_length > self.max_text_length:
            raise ValueError(f"Invalid text length bounds for {self.name}")


SITES: Dict[str, SiteConfig] = {
    "gewobag": SiteConfig(
        name="gewobag",
        source="gewobag.de",
        url=(
            "https://www.gewobag.de/fuer-mietinteressentinnen/mietangebote/"
            "?objekttyp%5B%5D=wohnung&gesamtmiete_von=&gesamtmiete_bis=450"
            "&gesamtflaeche_von=&gesamtflaeche_bis=&zimmer_von=&zimmer_bis=&sort-by="
        ),
        container_selectors=(
            ".object-item",
            ".listing-item",
            ".property-item",
            ".apartment-item",
            ".offer-item",
            "[class*='object']",
            "[class*='listing']",
            "[class*='property']",
            "[class*='apartment']",
        ),
        detail_link_patterns=(r"/objekt/", r"/detail/", r"/mietangebote/[\w-]+-\d+"),
        price_range=(150.0, 450.0),
    ),
    "stadtundland": SiteConfig(
        name="stadtundland",
        source="stadtundland.de",
        url="https://stadtundland.de/wohnungssuche?district=all&maxRate=450",
        detail_link_patterns=(r"/wohnungssuche/\d+",),
        price_range=(150.0, 450.0),
    ),
    "immowelt": SiteConfig(
        name="immowelt",
        source="immowelt.de",
        url=(
            "https://www.immowelt.de/classified-search?distributionTypes=Rent"
            "&estateTypes=House,Apartment&locations=AD08DE8634"
            "&locationsInBuildingExcluded=Groundfloor&priceMax=450"
            "&projectTypes=Stock,Flatsharing&order=PriceDesc"
        ),
        container_selectors=(
            "[data-testid*='classified-card']",
            "[data-testid*='property']",
            "[data-testid*='object']",
            ".property-item",
            ".result-item",
            ".listitem",
            ".estate-object",
        ),
        detail_link_patterns=(r"/expose/", r"/classified/"),
        price_range=(200.0, 500.0),
        ready_selector="a[href*='/expose/']",
    ),
    "immobilien": SiteConfig(
        name="immobilien",
        source="immobilien.de",
        url=(
            "https://www.immobilien.de/Wohnen/Suchergebnisse-51797.html?search._digest=true"
            "&search._filter=wohnen&search.objektart=wohnung&search.preis_bis=450"
            "&search.typ=mieten&search.umkreis=10&search.wo=city%3A6444"
        ),
        detail_link_patterns=(r"/wohnen/\d+",),
        price_range=(200.0, 450.0),
        min_text_length=100,
        max_text_length=1500,
        promo_max_text_length=500,
    ),
    "generic": SiteConfig(
        name="generic",
        source="generic",
        container_selectors=(
            "[class*='result']",
            "[class*='listing']",
            "[class*='property']",
            "article",
        ),
    ),
}


def get_site(name: str) -> SiteConfig:
    """Look up a built-in site preset by name."""
    try:
        return SITES[name]
    except KeyError:
        raise ValueError(f"Unknown site '{name}', choose one of: {', '.join(sorted(SITES))}") from None


_TEXT_FIELDS = ("name", "source", "url", "ready_selector")
_TEXT_LIST_FIELDS = (
    "container_selectors", "detail_link_patterns", "promo_markers",
    "noise_phrases", "city_names", "cookie_selectors",
)
_NUMBER_FIELDS = ("min_text_length", "max_text_length", "promo_max_text_length", "max_link_distance")
_RANGE_FIELDS = ("price_range", "size_range")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_types(data: dict) -> None:
    """Reject values of the wrong JSON type before they reach SiteConfig."""
    for key, value in data.items():
        if key in _TEXT_FIELDS:
            ok = isinstance(value, str)
        elif key in _TEXT_LIST_FIELDS:
            ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
        elif key in _NUMBER_FIELDS:
            ok = _is_number(value)
        elif key in _RANGE_FIELDS:
            ok = (value is None and key == "size_range") or (
                isinstance(value, list) and len(value) == 2 and all(_is_number(v) for v in value)
            )
        elif key == "sort_by_price":
            ok = isinstance(value, bool)
        else:
            ok = True
        if not ok:
            raise ValueError(f"Invalid site config value for '{key}': {value!r}")


def site_from_dict(data: dict) -> SiteConfig:
    """Build a SiteConfig from a plain dictionary (e.g. parsed JSON)."""
    known = {f.name for f in dataclasses.fields(SiteConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown site config keys: {', '.join(sorted(unknown))}")
    if "name" not in data:
        raise ValueError("Site config requires a 'name'")
    _check_types(data)

    kwargs = dict(data)
    kwargs.setdefault("source", kwargs["name"])
    for key, value in kwargs.items():
        if isinstance(value, list):
            kwargs[key] = _to_tuple(value)

    site = SiteConfig(**kwargs)
    site.validate()
    return site


def load_site_config(path: str) -> SiteConfig:
    """Load a site configuration from a JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid site config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Site config {path} must contain a JSON object")
    return site_from_dict(data)


def _to_tuple(values: Sequence) -> tuple:
    return tuple(_to_tuple(v) if isinstance(v, list) else v for v in values)
