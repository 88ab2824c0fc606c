"""
Pydantic models for the output document serialization.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ListingOut(BaseModel):
    """Output model for one listing."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    price: str
    size: str = "N/A"
    rooms: str = "N/A"
    title: str
    link: str = "N/A"
    description: str = ""
    source: str
    scraped_at: str = Field(alias="scrapedAt")


class ResultDocument(BaseModel):
    """Output model for a whole scrape run, successful or not."""
    success: bool
    count: int
    timestamp: str
    source: str
    data: List[ListingOut] = Field(default_factory=list)
    error: Optional[str] = None
