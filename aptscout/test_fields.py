"""
Tests for price/size/rooms parsing and title selection.
"""
import pytest

from aptscout.config import SiteConfig
from aptscout.fields import (
    extract_candidate,
    extract_price,
    extract_rooms,
    extract_size,
    has_price,
    has_size,
    in_range,
    is_address_like,
    pick_title,
)
from aptscout.models import Measure
from aptscout.snapshot import PageSnapshot
from aptscout.utils import format_number, parse_number


SITE = SiteConfig(name="test", source="test.de")


@pytest.mark.parametrize("text,expected", [
    ("450,50", 450.5),
    ("450.50", 450.5),
    ("1.250", 1250.0),
    ("1.250,00", 1250.0),
    ("350", 350.0),
    ("2,5", 2.5),
    ("", None),
    ("abc", None),
])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


def test_format_number():
    assert format_number(350.0) == "350"
    assert format_number(450.5) == "450.50"


def test_price_with_decimal_comma():
    price = extract_price("Kaltmiete 450,50 € zzgl. NK")
    assert price == Measure(450.5, "€")
    assert price.display() == "450.50 €"


def test_price_with_thousands_separator():
    assert extract_price("Warmmiete: 1.250 €").value == 1250.0


@pytest.mark.parametrize("text", ["Warmmiete 1 250 €", "Warmmiete 1\u00a0250 €", "Warmmiete 1\u202f250 €"])
def test_price_with_space_grouped_thousands(text):
    assert extract_price(text).value == 1250.0


def test_price_with_english_grouping():
    assert extract_price("Rent 1,250.00 €").value == 1250.0
    assert extract_price("Rent 1,250 EUR").value == 1250.0


@pytest.mark.parametrize("price", ["1 250", "1\u00a0250", "1,250.00"])
def test_extract_candidate_grouped_price_above_band(price):
    assert _candidate(f'<div class="card">Altbauwohnung Berlin {price} € warm, 95 m²</div>') is None


def test_price_currency_before_number():
    assert extract_price("Miete € 380 monatlich").value == 380.0


def test_price_eur_word():
    assert extract_price("Gesamtmiete 399 EUR").value == 399.0


def test_first_price_wins():
    assert extract_price("350 € Kaltmiete, 420 € warm").value == 350.0


def test_price_ignores_numbers_without_currency():
    assert extract_price("Torstraße 1, 45 m², 2 Zimmer") is None


def test_prefix_currency_does_not_take_area():
    # "€" followed by a number that is really the flat size
    assert extract_price("Preis auf Anfrage € 45 m²") is None


def test_size_and_rooms():
    text = "Schöne Wohnung, 45,5 m², 2 Zimmer"
    assert extract_size(text) == Measure(45.5, "m²")
    assert extract_rooms(text) == Measure(2.0, "Zimmer")


def test_size_alternative_units():
    assert extract_size("ca. 60 qm Wohnfläche").value == 60.0
    assert extract_size("60m2").value == 60.0


def test_rooms_variants():
    assert extract_rooms("Helle 2-Zimmer-Wohnung").value == 2.0
    assert extract_rooms("3,5 Zi. Altbau").value == 3.5
    assert extract_rooms("keine Angabe") is None


def test_has_price_and_size():
    assert has_price("nur 300 €")
    assert has_price("300 Euro")
    assert not has_price("300 Punkte")
    assert has_size("50 m²")
    assert not has_size("50 Meter")


def test_in_range_is_inclusive():
    assert in_range(150, (150, 600))
    assert in_range(600, (150, 600))
    assert not in_range(149, (150, 600))
    assert not in_range(601, (150, 600))


def test_address_like_lines():
    assert is_address_like("Wohnung in Berlin-Mitte", ("Berlin",))
    assert is_address_like("Torstraße 1")
    assert is_address_like("Karl-Marx-Allee 12")
    assert is_address_like("10115 Berlin")
    assert not is_address_like("Schöne helle Wohnung")


def test_title_prefers_heading():
    title = pick_title(
        headings=["Helle Wohnung am Park"],
        lines=["Torstraße 1, Berlin", "350 €"],
        price=Measure(350, "€"),
    )
    assert title == "Helle Wohnung am Park"


def test_title_address_line_before_first_line():
    title = pick_title(
        headings=[],
        lines=["Neu im Angebot", "Müllerstraße 12, 13353 Berlin", "350 €"],
        price=Measure(350, "€"),
        city_names=("Berlin",),
    )
    assert title == "Müllerstraße 12, 13353 Berlin"


def test_title_first_long_line():
    title = pick_title(headings=["Neu"], lines=["kurz", "Gemütliche Dachwohnung"], price=Measure(350, "€"))
    assert title == "Gemütliche Dachwohnung"


def test_title_synthesized_fallback():
    title = pick_title(headings=[], lines=["350 €"], price=Measure(350, "€"))
    assert title == "350 € Apartment"


def test_title_is_truncated_and_collapsed():
    long_heading = "Wohnung   " + "x" * 95
    title = pick_title(headings=[], lines=[long_heading + " Berlin"], price=Measure(350, "€"),
                       city_names=("Berlin",))
    assert len(title) <= 100
    assert "   " not in title


def _candidate(html, site=SITE):
    snapshot = PageSnapshot.from_html(f"<html><body>{html}</body></html>")
    handle = snapshot.select(".card")[0]
    return extract_candidate(snapshot, handle, site)


def test_extract_candidate_full():
    c = _candidate(
        '<div class="card" data-aptscout-y="120">'
        "<h3>Altbau mit Balkon</h3><p>Torstraße 1, Berlin</p>"
        "<p>350 € Kaltmiete</p><p>45 m² · 2 Zimmer</p></div>"
    )
    assert c.price.value == 350.0
    assert c.size.value == 45.0
    assert c.rooms.value == 2.0
    assert c.title == "Altbau mit Balkon"
    assert c.position == 120.0


def test_extract_candidate_without_price_is_dropped():
    assert _candidate('<div class="card">Torstraße 1, 45 m², 2 Zimmer</div>') is None


@pytest.mark.parametrize("price,kept", [(149, False), (150, True), (151, True),
                                        (599, True), (600, True), (601, False)])
def test_extract_candidate_price_band_boundaries(price, kept):
    site = SiteConfig(name="test", source="test.de", price_range=(150, 600))
    c = _candidate(f'<div class="card">Wohnung Berlin {price} € 40 m²</div>', site)
    assert (c is not None) == kept
    if kept:
        assert c.price.value == price


def test_extract_candidate_out_of_band_is_not_clamped():
    assert _candidate('<div class="card">Wohnung 1.250 € 60 m²</div>') is None


def test_extract_candidate_size_range():
    site = SiteConfig(name="test", source="test.de", size_range=(15, 200))
    assert _candidate('<div class="card">Stellplatz 300 € 10 m²</div>', site) is None
    assert _candidate('<div class="card">Wohnung 300 € 40 m²</div>', site) is not None


def test_extract_candidate_caps_text():
    c = _candidate('<div class="card">Wohnung 300 € 40 m² ' + "lorem " * 600 + "</div>")
    assert len(c.text) == 2000
