"""
Result formatting and export for extracted listings.
"""
import json
import os
import time
from typing import List, Optional, Sequence

import pandas as pd

from .config import SiteConfig
from .models import LINK_UNAVAILABLE, Listing, RawCandidate
from .schemas import ListingOut, ResultDocument
from .utils import now_iso, truncate

DESCRIPTION_MAX_LENGTH = 300


def build_listings(
    candidates: Sequence[RawCandidate],
    site: SiteConfig,
    scraped_at: Optional[str] = None,
    run_ms: Optional[int] = None,
) -> List[Listing]:
    """Promote validated candidates to Listing records."""
    scraped_at = scraped_at or now_iso()
    run_ms = run_ms if run_ms is not None else int(time.time() * 1000)

    listings = []
    for i, c in enumerate(candidates):
        if c.price is None:
            continue
        listings.append(Listing(
            id=f"{site.id_prefix}_{run_ms}_{i}",
            price=c.price,
            size=c.size,
            rooms=c.rooms,
            title=c.title or f"{c.price.display()} Apartment",
            link=c.link or LINK_UNAVAILABLE,
            description=truncate(c.text, DESCRIPTION_MAX_LENGTH),
            source=site.source,
            scraped_at=scraped_at,
        ))
    return listings


def build_result_document(
    listings: Sequence[Listing],
    source: str,
    timestamp: Optional[str] = None,
) -> ResultDocument:
    """Wrap listings in the success document."""
    return ResultDocument(
        success=True,
        count=len(listings),
        timestamp=timestamp or now_iso(),
        source=source,
        data=[ListingOut(**x.to_dict()) for x in listings],
    )


def build_failure_document(source: str, error: str, timestamp: Optional[str] = None) -> ResultDocument:
    """Document written when the run failed before listings could be extracted."""
    return ResultDocument(
        success=False,
        count=0,
        timestamp=timestamp or now_iso(),
        source=source,
        data=[],
        error=error,
    )


def document_to_dict(doc: ResultDocument) -> dict:
    return doc.model_dump(by_alias=True, exclude_none=True)


def save_output_document(doc: ResultDocument, out_path: str, logger=None):
    """Write the result document as pretty-printed UTF-8 JSON."""
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(document_to_dict(doc), f, ensure_ascii=False, indent=2)

    if logger:
        logger.info(f">>> Saved {doc.count} listings to {out_path} (success={doc.success})")


def save_output_rows(listings: Sequence[Listing], out_path: str, logger=None):
    """Save listings to CSV or Excel file."""
    rows = []
    for x in listings:
        rows.append({
            "id": x.id,
            "title": x.title,
            "price_value": x.price.value,
            "price": x.price.display(),
            "size_m2": x.size.value if x.size else None,
            "rooms": x.rooms.value if x.rooms else None,
            "link": x.link,
            "description": x.description,
            "source": x.source,
            "scraped_at": x.scraped_at,
        })

    df = pd.DataFrame(rows, columns=[
        "id", "title", "price_value", "price", "size_m2", "rooms",
        "link", "description", "source", "scraped_at",
    ])
    if out_path.lower().endswith(".xlsx"):
        df.to_excel(out_path, index=False)
    else:
        df.to_csv(out_path, index=False)

    if logger:
        logger.info(f">>> Saved {len(df)} rows to {out_path}")
