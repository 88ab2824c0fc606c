"""
Tests for listing formatting and result document export.
"""
import json

import pandas as pd

from aptscout.config import SiteConfig
from aptscout.export import (
    build_failure_document,
    build_listings,
    build_result_document,
    document_to_dict,
    save_output_document,
    save_output_rows,
)
from aptscout.models import LINK_UNAVAILABLE, Measure, RawCandidate


SITE = SiteConfig(name="stadt-und-land", source="stadtundland.de")
TS = "2024-05-01T10:00:00+00:00"


def candidates():
    return [
        RawCandidate(
            container_ref=3,
            text="Helle Wohnung  in Pankow " + "sehr schön " * 40,
            price=Measure(350, "€"),
            size=Measure(45, "m²"),
            rooms=Measure(2, "Zimmer"),
            title="Helle Wohnung in Pankow",
            link="https://stadtundland.de/wohnungssuche/123",
        ),
        RawCandidate(
            container_ref=9,
            text="Wohnung 420,50 €",
            price=Measure(420.5, "€"),
            title="",
        ),
    ]


def test_build_listings_ids_and_fields():
    listings = build_listings(candidates(), SITE, scraped_at=TS, run_ms=1714557600000)
    assert [x.id for x in listings] == ["stadt_und_land_1714557600000_0", "stadt_und_land_1714557600000_1"]
    assert all(x.source == "stadtundland.de" and x.scraped_at == TS for x in listings)
    assert len(listings[0].description) <= 300
    assert "  " not in listings[0].description


def test_missing_values_are_marked():
    second = build_listings(candidates(), SITE, scraped_at=TS, run_ms=1)[1].to_dict()
    assert second["size"] == "N/A"
    assert second["rooms"] == "N/A"
    assert second["link"] == LINK_UNAVAILABLE
    assert second["price"] == "420.50 €"
    assert second["title"] == "420.50 € Apartment"


def test_success_document_shape():
    listings = build_listings(candidates(), SITE, scraped_at=TS, run_ms=1)
    doc = document_to_dict(build_result_document(listings, SITE.source, timestamp=TS))
    assert doc["success"] is True
    assert doc["count"] == 2
    assert doc["timestamp"] == TS
    assert doc["source"] == "stadtundland.de"
    assert "error" not in doc
    first = doc["data"][0]
    assert set(first) == {"id", "price", "size", "rooms", "title", "link", "description", "source", "scrapedAt"}
    assert first["size"] == "45 m²"


def test_failure_document_shape():
    doc = document_to_dict(build_failure_document("gewobag.de", "Navigation failed", timestamp=TS))
    assert doc == {
        "success": False,
        "count": 0,
        "timestamp": TS,
        "source": "gewobag.de",
        "data": [],
        "error": "Navigation failed",
    }


def test_empty_result_is_success():
    doc = document_to_dict(build_result_document([], "gewobag.de", timestamp=TS))
    assert doc["success"] is True
    assert doc["count"] == 0
    assert doc["data"] == []


def test_save_output_document(tmp_path):
    listings = build_listings(candidates(), SITE, scraped_at=TS, run_ms=1)
    out = tmp_path / "nested" / "results.json"
    save_output_document(build_result_document(listings, SITE.source, timestamp=TS), str(out))

    text = out.read_text(encoding="utf-8")
    assert "€" in text
    assert json.loads(text)["data"][1]["price"] == "420.50 €"


def test_save_output_rows_csv(tmp_path):
    listings = build_listings(candidates(), SITE, scraped_at=TS, run_ms=1)
    out = tmp_path / "listings.csv"
    save_output_rows(listings, str(out))

    df = pd.read_csv(out)
    assert list(df["price_value"]) == [350.0, 420.5]
    assert df.loc[0, "size_m2"] == 45
    assert pd.isna(df.loc[1, "size_m2"])
